"""Shared pytest fixtures for the LyricQueue test suite."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.catalog_provider import CatalogPage, ICatalogProvider
from src.interfaces.lyrics_provider import ILyricsProvider
from src.providers.store.memory_store import MemoryDocumentStore
from src.services.lyrics_scraper import LyricsScraper


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Return an empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def mock_catalog() -> MagicMock:
    """Return a mock catalog provider with no pages configured."""
    catalog = MagicMock(spec=ICatalogProvider)
    catalog.get_songs_page = AsyncMock(return_value=CatalogPage(page=1, songs=[], has_more=False))
    catalog.get_artist_image_url = AsyncMock(return_value=None)
    catalog.get_provider_name.return_value = "mock_catalog"
    catalog.is_available.return_value = True
    return catalog


@pytest.fixture
def mock_lyrics() -> MagicMock:
    """Return a mock lyrics provider that returns lyrics derived from the URL."""
    lyrics = MagicMock(spec=ILyricsProvider)

    async def _fetch(url: str) -> str:
        return f"Verse line for {url}\nAnother line"

    lyrics.fetch_lyrics = AsyncMock(side_effect=_fetch)
    lyrics.get_provider_name.return_value = "mock_lyrics"
    return lyrics


@pytest.fixture
def scraper(mock_lyrics: MagicMock, store: MemoryDocumentStore) -> LyricsScraper:
    """Return a scraper with no throttle delay."""
    return LyricsScraper(
        lyrics=mock_lyrics, store=store, max_attempts=3, scrape_delay=0, fetch_timeout=1.0
    )
