"""Unit tests for the library (registration / summaries) and cache repair services."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from factories import ARTIST_ID, EXTERNAL_ID, seed_artist, stale_timestamp

from src.models.catalog import ARTISTS, SONGS, Artist
from src.providers.store.memory_store import MemoryDocumentStore
from src.services.cache_repair_service import CacheRepairService
from src.services.library_service import LibraryService
from src.services.lyrics_scraper import LyricsScraper
from src.utils.errors import NotFoundError, UpstreamUnavailableError


async def _cached_ids(store: MemoryDocumentStore) -> list[str]:
    return Artist.from_document(ARTIST_ID, await store.get(ARTISTS, ARTIST_ID)).cached_song_ids


# ======================================================================
# LibraryService
# ======================================================================


class TestLibraryService:
    @pytest.mark.asyncio
    async def test_register_new_artist(self, store: MemoryDocumentStore) -> None:
        library = LibraryService(store)

        artist = await library.register_artist("kendrick", "1421", "Kendrick Lamar")

        assert artist.id == "kendrick"
        assert artist.external_id == "1421"
        assert artist.song_ids == []
        assert artist.is_fully_cached is False

    @pytest.mark.asyncio
    async def test_register_existing_artist_keeps_state(self, store: MemoryDocumentStore) -> None:
        await seed_artist(store, cached=["A"])
        library = LibraryService(store)

        artist = await library.register_artist(ARTIST_ID, "other-id", "Renamed")

        assert artist.external_id == EXTERNAL_ID
        assert artist.name == "Test Artist"
        assert artist.cached_song_ids == ["A"]
        assert len(artist.song_ids) == 10

    @pytest.mark.asyncio
    async def test_summary_counts(self, store: MemoryDocumentStore) -> None:
        await seed_artist(store, cached=["A", "B", "C"])

        summary = await LibraryService(store).get_artist_summary(ARTIST_ID)

        assert summary.total_songs == 10
        assert summary.cached_songs == 3
        assert summary.lyrics_scraped == 3
        assert summary.is_fully_cached is True
        assert summary.needs_refresh is False

    @pytest.mark.asyncio
    async def test_summary_flags_stale_catalog(self, store: MemoryDocumentStore) -> None:
        await seed_artist(store, songs_last_updated=stale_timestamp())

        summary = await LibraryService(store, refresh_days=7).get_artist_summary(ARTIST_ID)

        assert summary.needs_refresh is True

    @pytest.mark.asyncio
    async def test_get_song(self, store: MemoryDocumentStore) -> None:
        await seed_artist(store, cached=["A"])

        song = await LibraryService(store).get_song("A")

        assert song.has_valid_lyrics

    @pytest.mark.asyncio
    async def test_unknown_records_raise(self, store: MemoryDocumentStore) -> None:
        library = LibraryService(store)
        with pytest.raises(NotFoundError):
            await library.get_artist("ghost")
        with pytest.raises(NotFoundError):
            await library.get_song("ghost")


# ======================================================================
# CacheRepairService
# ======================================================================


class TestCacheRepair:
    @pytest.mark.asyncio
    async def test_clean_cache_reports_nothing(
        self, store: MemoryDocumentStore, scraper: LyricsScraper
    ) -> None:
        await seed_artist(store, cached=["A", "B"])

        report = await CacheRepairService(store, scraper).repair_artist(ARTIST_ID)

        assert report.checked == 2
        assert report.invalid_ids == []
        assert report.scrape_result is None

    @pytest.mark.asyncio
    async def test_dry_run_reports_without_writing(
        self, store: MemoryDocumentStore, scraper: LyricsScraper, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store, cached=["A", "B", "C"])
        await store.upsert(SONGS, "B", {"lyrics": "null"})

        report = await CacheRepairService(store, scraper).repair_artist(ARTIST_ID, dry_run=True)

        assert report.dry_run is True
        assert report.invalid_ids == ["B"]
        assert await _cached_ids(store) == ["A", "B", "C"]
        mock_lyrics.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_entries_are_rescraped(
        self, store: MemoryDocumentStore, scraper: LyricsScraper
    ) -> None:
        await seed_artist(store, cached=["A", "B", "C"])
        await store.upsert(SONGS, "B", {"lyrics": "undefined"})
        await store.upsert(SONGS, "C", {"lyrics": ""})

        report = await CacheRepairService(store, scraper).repair_artist(ARTIST_ID)

        assert report.invalid_ids == ["B", "C"]
        assert report.scrape_result is not None
        assert report.scrape_result.successful == ["B", "C"]
        assert sorted(await _cached_ids(store)) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_failed_rescrape_evicts_entry(
        self, store: MemoryDocumentStore, scraper: LyricsScraper, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store, cached=["A", "B"])
        await store.upsert(SONGS, "B", {"lyrics": "null"})
        mock_lyrics.fetch_lyrics.side_effect = UpstreamUnavailableError(message="down")

        report = await CacheRepairService(store, scraper).repair_artist(ARTIST_ID)

        assert report.scrape_result.failed_ids == ["B"]
        assert await _cached_ids(store) == ["A"]

    @pytest.mark.asyncio
    async def test_orphan_and_missing_ids_are_evicted(
        self, store: MemoryDocumentStore, scraper: LyricsScraper, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store, song_ids=["A", "B"], cached=["A"])
        await store.array_add(ARTISTS, ARTIST_ID, "cachedSongIds", ["ghost", "Z"])
        await store.upsert(SONGS, "Z", {"lyrics": "Valid lyrics\nhere"})

        report = await CacheRepairService(store, scraper).repair_artist(ARTIST_ID)

        assert report.invalid_ids == ["ghost", "Z"]
        assert report.scrape_result is None
        assert await _cached_ids(store) == ["A"]
        mock_lyrics.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_artist(
        self, store: MemoryDocumentStore, scraper: LyricsScraper
    ) -> None:
        with pytest.raises(NotFoundError):
            await CacheRepairService(store, scraper).repair_artist("ghost")
