"""LyricQueue domain models -- re-exports all public model classes.

The models live in two submodules:
    - catalog.py  -- persisted documents (Artist, Song) and their status enums
    - results.py  -- outcomes of populate / scrape / window / summary / repair
"""

from __future__ import annotations

from src.models.catalog import (
    ARTISTS,
    SONGS,
    Artist,
    ArtistRef,
    ImageStatus,
    ScrapingStatus,
    Song,
)
from src.models.results import (
    ArtistSummary,
    Direction,
    FailureKind,
    PopulateResult,
    RepairReport,
    ScrapeFailure,
    ScrapeResult,
    WindowRange,
    WindowResult,
)

__all__ = [
    # catalog
    "ARTISTS",
    "SONGS",
    "Artist",
    "ArtistRef",
    "ImageStatus",
    "ScrapingStatus",
    "Song",
    # results
    "ArtistSummary",
    "Direction",
    "FailureKind",
    "PopulateResult",
    "RepairReport",
    "ScrapeFailure",
    "ScrapeResult",
    "WindowRange",
    "WindowResult",
]
