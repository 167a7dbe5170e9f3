"""Result models returned by the engine's caller-facing operations.

These are the structured outcomes of populate / scrape / load-window /
summary / repair calls.  Per-item failures are data here, not exceptions:
a scrape batch or a playback window always comes back with whatever it
could resolve plus a record of what failed and why.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.catalog import ImageStatus, Song


class Direction(str, Enum):  # noqa: UP042
    """Which side of the cursor a playback window extends to."""

    FORWARD = "forward"
    REVERSE = "reverse"


class FailureKind(str, Enum):  # noqa: UP042
    """Why a song could not be resolved to valid lyrics."""

    NOT_FOUND = "not_found"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    EXTRACTION_FAILED = "extraction_failed"
    PERMANENT_FAILURE = "permanent_failure"
    INTERNAL = "internal"


# ---------------------------------------------------------------------------
# Catalog population
# ---------------------------------------------------------------------------
class PopulateResult(BaseModel):
    """Outcome of one catalog population pass."""

    model_config = ConfigDict(frozen=True)

    artist_id: str
    total_songs: int
    new_songs: int = 0
    is_fully_cached: bool = False
    pages_processed: int = 0
    # True when the fast path returned without contacting the catalog source.
    up_to_date: bool = False


# ---------------------------------------------------------------------------
# Lyrics scraping
# ---------------------------------------------------------------------------
class ScrapeFailure(BaseModel):
    """A song that did not end the scrape call with valid lyrics."""

    model_config = ConfigDict(frozen=True)

    song_id: str
    error: str
    kind: FailureKind
    # True once the song is permanently_failed and will not be retried.
    permanent: bool = False


class ScrapeResult(BaseModel):
    """Per-song outcome of a scrape batch."""

    model_config = ConfigDict(frozen=True)

    successful: list[str] = Field(default_factory=list)
    failed: list[ScrapeFailure] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def failed_ids(self) -> list[str]:
        return [f.song_id for f in self.failed]


# ---------------------------------------------------------------------------
# Queue window
# ---------------------------------------------------------------------------
class WindowRange(BaseModel):
    """Half-open index range ``[start, end)`` into an artist's song list."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class WindowResult(BaseModel):
    """A resolved playback window.

    ``songs`` keeps window order and only holds songs with valid lyrics.
    Every target id missing from ``songs`` appears in ``failed`` with a
    reason.
    """

    model_config = ConfigDict(frozen=True)

    artist_id: str
    position: int
    target_range: WindowRange
    target_ids: list[str] = Field(default_factory=list)
    songs: dict[str, Song] = Field(default_factory=dict)
    failed: dict[str, str] = Field(default_factory=dict)
    scraped: int = 0
    loaded: int = 0

    @property
    def total_target_songs(self) -> int:
        return len(self.target_ids)


# ---------------------------------------------------------------------------
# Summaries & maintenance
# ---------------------------------------------------------------------------
class ArtistSummary(BaseModel):
    """Read-only snapshot of an artist's catalog and cache progress."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    external_id: str
    total_songs: int
    cached_songs: int
    lyrics_scraped: int
    is_fully_cached: bool
    songs_last_updated: datetime | None = None
    needs_refresh: bool
    image_url: str | None = None
    image_status: ImageStatus = ImageStatus.UNKNOWN


class RepairReport(BaseModel):
    """Outcome of re-validating an artist's cached song list."""

    model_config = ConfigDict(frozen=True)

    artist_id: str
    checked: int
    invalid_ids: list[str] = Field(default_factory=list)
    dry_run: bool = False
    scrape_result: ScrapeResult | None = None
