"""Persisted catalog documents: Artist and Song.

Both models are frozen Pydantic v2 models.  Python attributes are
snake_case; the document representation written to the store uses
camelCase keys (``songIds``, ``cachedSongIds``, ``scrapingStatus`` ...)
through an alias generator, so the persisted layout matches the schema the
web client reads.

Key relationships:
    - Artist.song_ids is the ordered catalog (popularity order as returned
      by the catalog source).
    - Artist.cached_song_ids is the subset whose Song documents hold valid
      lyrics.  It is only ever changed through the store's atomic
      array-add / array-remove operations.
    - A Song is stored once, however many artists list it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.utils.lyrics import is_valid_lyrics

ARTISTS = "artists"
SONGS = "songs"

_DOCUMENT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ScrapingStatus(str, Enum):  # noqa: UP042
    """Lyrics scraping lifecycle of a Song.

        PENDING ──► SCRAPING ──► COMPLETED
                        │
                        ├──► FAILED ──► (retry) SCRAPING
                        └──► PERMANENTLY_FAILED   (retry budget spent)

    PERMANENTLY_FAILED is terminal.  COMPLETED is terminal unless the
    stored lyrics turn out to be invalid, in which case the song is
    scraped again.
    """

    PENDING = "pending"
    SCRAPING = "scraping"
    COMPLETED = "completed"
    FAILED = "failed"
    PERMANENTLY_FAILED = "permanently_failed"


class ImageStatus(str, Enum):  # noqa: UP042
    """Tri-state result of artist image discovery.

    UNKNOWN means discovery never ran; ABSENT means it ran and found
    nothing, so it is not attempted again.
    """

    UNKNOWN = "unknown"
    FOUND = "found"
    ABSENT = "absent"


class ArtistRef(BaseModel):
    """Reference to the primary credited artist of a song."""

    model_config = _DOCUMENT_CONFIG

    id: str
    name: str = ""
    url: str | None = None


class Artist(BaseModel):
    """An artist and the state of its cached catalog."""

    model_config = _DOCUMENT_CONFIG

    id: str
    external_id: str
    name: str | None = None
    song_ids: list[str] = Field(default_factory=list)
    cached_song_ids: list[str] = Field(default_factory=list)
    total_songs: int = 0
    songs_fetched: int = 0
    is_fully_cached: bool = False
    songs_last_updated: datetime | None = None
    image_url: str | None = None
    image_status: ImageStatus = ImageStatus.UNKNOWN

    @property
    def lyrics_scraped(self) -> int:
        """Number of songs with cached lyrics, derived from ``cached_song_ids``."""
        return len(set(self.cached_song_ids))

    def is_stale(self, max_age: timedelta, now: datetime | None = None) -> bool:
        """Return ``True`` if the catalog was never populated or is older than *max_age*."""
        if self.songs_last_updated is None:
            return True
        now = now or datetime.now(tz=timezone.utc)  # noqa: UP017
        last = self.songs_last_updated
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)  # noqa: UP017
        return last < now - max_age

    def needs_population(self, max_age: timedelta, now: datetime | None = None) -> bool:
        """Return ``True`` unless the catalog is both fresh and fully cached."""
        return self.is_stale(max_age, now) or not self.is_fully_cached

    def position_of(self, song_id: str) -> int | None:
        """Index of *song_id* in ``song_ids``, or ``None`` if absent."""
        try:
            return self.song_ids.index(song_id)
        except ValueError:
            return None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Artist:
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Serialise to the camelCase store layout (the id is the document key)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})


class Song(BaseModel):
    """A song's descriptive metadata plus its lyrics cache state.

    Descriptive fields are written once when the catalog populator first
    sees the song and are never overwritten afterwards.
    """

    model_config = _DOCUMENT_CONFIG

    id: str
    title: str = ""
    source_url: str | None = None
    primary_artist_ref: ArtistRef | None = None
    artist_names: str | None = None
    song_art_image_url: str | None = None
    added_at: datetime | None = None

    lyrics: str | None = None
    scraping_status: ScrapingStatus = ScrapingStatus.PENDING
    scraping_attempts: int = 0
    scraping_error: str | None = None
    lyrics_scraped_at: datetime | None = None

    @property
    def has_valid_lyrics(self) -> bool:
        return is_valid_lyrics(self.lyrics)

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Song:
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Serialise to the camelCase store layout (the id is the document key)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})
