"""Pydantic request/response schemas for the LyricQueue API.

Request bodies are defined here.  Responses reuse the engine's own result
models (:mod:`src.models.results`) and documents (:mod:`src.models.catalog`)
directly, so the HTTP contract and the service contract cannot drift.

Convention: request schemas end with "Request", response schemas end
with "Response".
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.models.results import Direction


class RegisterArtistRequest(BaseModel):
    """Register an artist under a stable key."""

    artist_id: str = Field(..., min_length=1, description="Stable artist key, e.g. 'kendrick-lamar'")
    external_id: str = Field(..., min_length=1, description="Artist id on the catalog source")
    name: str | None = None


class ScrapeRequest(BaseModel):
    """Scrape lyrics for specific songs of an artist."""

    song_ids: list[str] = Field(..., min_length=1)


class WindowRequest(BaseModel):
    """Load the playback window around a cursor song."""

    cursor_song_id: str = Field(..., min_length=1)
    direction: Direction = Direction.FORWARD
    window_size: int | None = Field(default=None, description="Values below 1 are treated as 1")


class RepairRequest(BaseModel):
    """Re-validate an artist's cached song list."""

    dry_run: bool = False


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
