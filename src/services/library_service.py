"""Caller-facing reads and artist registration."""

from __future__ import annotations

from datetime import timedelta

import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.catalog import ARTISTS, SONGS, Artist, Song
from src.models.results import ArtistSummary
from src.utils.errors import NotFoundError
from src.utils.logging import get_logger


class LibraryService:
    """Registers artists and exposes read-only views of artists and songs."""

    def __init__(self, store: IDocumentStore, refresh_days: int = 7) -> None:
        self._store = store
        self._max_age = timedelta(days=refresh_days)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def get_artist(self, artist_id: str) -> Artist:
        data = await self._store.get(ARTISTS, artist_id)
        if data is None:
            raise NotFoundError(message=f"Artist {artist_id!r} not found")
        return Artist.from_document(artist_id, data)

    async def register_artist(
        self, artist_id: str, external_id: str, name: str | None = None
    ) -> Artist:
        """Create the artist if it does not exist; return the stored record.

        Registering an existing artist is a no-op and never resets its
        catalog or cache state.
        """
        artist = Artist(id=artist_id, external_id=external_id, name=name)
        await self._store.upsert(ARTISTS, artist_id, artist.to_document(), create_only=True)
        stored = await self.get_artist(artist_id)
        self._logger.info(
            "artist_registered",
            artist_id=artist_id,
            external_id=stored.external_id,
            songs=len(stored.song_ids),
        )
        return stored

    async def get_artist_summary(self, artist_id: str) -> ArtistSummary:
        artist = await self.get_artist(artist_id)
        return ArtistSummary(
            id=artist.id,
            name=artist.name,
            external_id=artist.external_id,
            total_songs=len(artist.song_ids),
            cached_songs=len(artist.cached_song_ids),
            lyrics_scraped=artist.lyrics_scraped,
            is_fully_cached=artist.is_fully_cached,
            songs_last_updated=artist.songs_last_updated,
            needs_refresh=artist.needs_population(self._max_age),
            image_url=artist.image_url,
            image_status=artist.image_status,
        )

    async def get_song(self, song_id: str) -> Song:
        data = await self._store.get(SONGS, song_id)
        if data is None:
            raise NotFoundError(message=f"Song {song_id!r} not found")
        return Song.from_document(song_id, data)
