"""Unit tests for src.services.lyrics_scraper."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest
from factories import ARTIST_ID, seed_artist, song_document

from src.models.catalog import ARTISTS, SONGS, Artist, ScrapingStatus, Song
from src.models.results import FailureKind
from src.providers.store.memory_store import MemoryDocumentStore
from src.services.lyrics_scraper import LyricsScraper
from src.utils.errors import ExtractionFailedError, NotFoundError, UpstreamUnavailableError


async def _artist(store: MemoryDocumentStore) -> Artist:
    return Artist.from_document(ARTIST_ID, await store.get(ARTISTS, ARTIST_ID))


async def _song(store: MemoryDocumentStore, song_id: str) -> Song:
    return Song.from_document(song_id, await store.get(SONGS, song_id))


# ======================================================================
# Successful scrapes
# ======================================================================


class TestScrapeSuccess:
    @pytest.mark.asyncio
    async def test_scrape_pending_song(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert result.successful == ["A"]
        assert result.failed == []
        song = await _song(store, "A")
        assert song.scraping_status is ScrapingStatus.COMPLETED
        assert song.scraping_attempts == 1
        assert song.lyrics.startswith("Verse line for https://genius.com/")
        assert song.lyrics_scraped_at is not None
        assert (await _artist(store)).cached_song_ids == ["A"]
        mock_lyrics.fetch_lyrics.assert_awaited_once_with(
            "https://genius.com/test-artist-song-a-lyrics"
        )

    @pytest.mark.asyncio
    async def test_completed_song_is_skipped_without_fetch(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store, cached=["A"])

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert result.skipped == ["A"]
        mock_lyrics.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_completed_song_missing_from_cache_is_readded(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store, cached=["A"])
        await store.array_remove(ARTISTS, ARTIST_ID, "cachedSongIds", ["A"])

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert result.skipped == ["A"]
        assert (await _artist(store)).cached_song_ids == ["A"]
        mock_lyrics.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_completed_with_null_lyrics_is_rescraped(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        await store.upsert(SONGS, "B", song_document("B", lyrics="null"))

        result = await scraper.scrape_lyrics(ARTIST_ID, ["B"])

        assert result.successful == ["B"]
        assert (await _song(store, "B")).has_valid_lyrics is True
        mock_lyrics.fetch_lyrics.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_song_outside_catalog_is_not_cached(
        self, scraper: LyricsScraper, store: MemoryDocumentStore
    ) -> None:
        await seed_artist(store, song_ids=["A", "B"])
        await store.upsert(SONGS, "Z", song_document("Z"))

        result = await scraper.scrape_lyrics(ARTIST_ID, ["Z"])

        assert result.successful == ["Z"]
        assert (await _song(store, "Z")).scraping_status is ScrapingStatus.COMPLETED
        assert "Z" not in (await _artist(store)).cached_song_ids

    @pytest.mark.asyncio
    async def test_duplicate_ids_processed_once(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A", "A", "B"])

        assert result.successful == ["A", "B"]
        assert mock_lyrics.fetch_lyrics.await_count == 2

    @pytest.mark.asyncio
    async def test_stuck_scraping_status_is_retried(
        self, scraper: LyricsScraper, store: MemoryDocumentStore
    ) -> None:
        await seed_artist(store)
        await store.upsert(
            SONGS, "C", {"scrapingStatus": ScrapingStatus.SCRAPING.value, "scrapingAttempts": 1}
        )

        result = await scraper.scrape_lyrics(ARTIST_ID, ["C"])

        assert result.successful == ["C"]
        assert (await _song(store, "C")).scraping_attempts == 2


# ======================================================================
# Failures and the retry bound
# ======================================================================


class TestScrapeFailures:
    @pytest.mark.asyncio
    async def test_unknown_artist_raises(self, scraper: LyricsScraper) -> None:
        with pytest.raises(NotFoundError):
            await scraper.scrape_lyrics("ghost", ["A"])

    @pytest.mark.asyncio
    async def test_missing_song_reported_not_found(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)

        result = await scraper.scrape_lyrics(ARTIST_ID, ["nope"])

        assert result.failed_ids == ["nope"]
        assert result.failed[0].kind is FailureKind.NOT_FOUND
        mock_lyrics.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_upstream_failure_marks_song_failed(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        mock_lyrics.fetch_lyrics.side_effect = UpstreamUnavailableError(message="HTTP 503")

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        failure = result.failed[0]
        assert failure.kind is FailureKind.UPSTREAM_UNAVAILABLE
        assert failure.permanent is False
        song = await _song(store, "A")
        assert song.scraping_status is ScrapingStatus.FAILED
        assert song.scraping_attempts == 1
        assert song.scraping_error == "HTTP 503"

    @pytest.mark.asyncio
    async def test_extraction_failure_kind(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        mock_lyrics.fetch_lyrics.side_effect = ExtractionFailedError(message="no containers")

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert result.failed[0].kind is FailureKind.EXTRACTION_FAILED

    @pytest.mark.asyncio
    async def test_blank_lyrics_from_source_are_a_failure(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        mock_lyrics.fetch_lyrics.side_effect = None
        mock_lyrics.fetch_lyrics.return_value = "undefined"

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert result.failed[0].kind is FailureKind.EXTRACTION_FAILED
        assert (await _song(store, "A")).lyrics is None

    @pytest.mark.asyncio
    async def test_fetch_timeout_is_upstream_failure(
        self, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)

        async def _hang(url: str) -> str:
            await asyncio.sleep(5)
            return "too late"

        mock_lyrics.fetch_lyrics.side_effect = _hang
        scraper = LyricsScraper(mock_lyrics, store, scrape_delay=0, fetch_timeout=0.01)

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert result.failed[0].kind is FailureKind.UPSTREAM_UNAVAILABLE
        assert (await _song(store, "A")).scraping_status is ScrapingStatus.FAILED

    @pytest.mark.asyncio
    async def test_failure_evicts_song_from_cache(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store, cached=["A", "B"])
        await store.upsert(SONGS, "A", {"lyrics": "", "scrapingStatus": "completed"})
        mock_lyrics.fetch_lyrics.side_effect = UpstreamUnavailableError(message="down")

        await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert (await _artist(store)).cached_song_ids == ["B"]

    @pytest.mark.asyncio
    async def test_retry_bound_is_exactly_max_attempts(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        mock_lyrics.fetch_lyrics.side_effect = UpstreamUnavailableError(message="down")

        outcomes = [await scraper.scrape_lyrics(ARTIST_ID, ["A"]) for _ in range(5)]

        assert mock_lyrics.fetch_lyrics.await_count == 3
        assert [o.failed[0].permanent for o in outcomes[:3]] == [False, False, True]
        assert outcomes[3].skipped == ["A"]
        assert outcomes[4].skipped == ["A"]
        song = await _song(store, "A")
        assert song.scraping_status is ScrapingStatus.PERMANENTLY_FAILED
        assert song.scraping_attempts == 3
        assert "A" not in (await _artist(store)).cached_song_ids

    @pytest.mark.asyncio
    async def test_exhausted_budget_is_retired_without_fetch(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        await store.upsert(
            SONGS,
            "A",
            {"scrapingStatus": "failed", "scrapingAttempts": 3, "scrapingError": "HTTP 500"},
        )

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        failure = result.failed[0]
        assert failure.kind is FailureKind.PERMANENT_FAILURE
        assert failure.permanent is True
        assert failure.error == "HTTP 500"
        assert (await _song(store, "A")).scraping_status is ScrapingStatus.PERMANENTLY_FAILED
        mock_lyrics.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_permanently_failed_song_removed_from_cache(
        self, scraper: LyricsScraper, store: MemoryDocumentStore
    ) -> None:
        await seed_artist(store, cached=["A"])
        await store.upsert(SONGS, "A", {"scrapingStatus": "permanently_failed"})

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        assert result.skipped == ["A"]
        assert (await _artist(store)).cached_song_ids == []

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_batch(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)

        async def _fetch(url: str) -> str:
            if url.endswith("song-b-lyrics"):
                raise UpstreamUnavailableError(message="down")
            return "Some lyrics\nfor this song"

        mock_lyrics.fetch_lyrics.side_effect = _fetch

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A", "B", "C"])

        assert result.successful == ["A", "C"]
        assert result.failed_ids == ["B"]
        assert (await _artist(store)).cached_song_ids == ["A", "C"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_as_internal(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)

        async def _fetch(url: str) -> str:
            if url.endswith("song-a-lyrics"):
                raise RuntimeError("parser exploded")
            return "Some lyrics\nfor this song"

        mock_lyrics.fetch_lyrics.side_effect = _fetch

        result = await scraper.scrape_lyrics(ARTIST_ID, ["A", "B"])

        assert result.failed[0].song_id == "A"
        assert result.failed[0].kind is FailureKind.INTERNAL
        assert result.successful == ["B"]
        song = await _song(store, "A")
        assert song.scraping_status is ScrapingStatus.FAILED
        assert song.scraping_error == "parser exploded"

    @pytest.mark.asyncio
    async def test_unexpected_error_still_counts_toward_retry_bound(
        self, scraper: LyricsScraper, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store, cached=["A"])
        await store.upsert(SONGS, "A", {"lyrics": "null"})
        mock_lyrics.fetch_lyrics.side_effect = RuntimeError("boom")

        for _ in range(3):
            await scraper.scrape_lyrics(ARTIST_ID, ["A"])

        song = await _song(store, "A")
        assert song.scraping_status is ScrapingStatus.PERMANENTLY_FAILED
        assert song.scraping_attempts == 3
        assert song.scraping_error == "boom"
        assert "A" not in (await _artist(store)).cached_song_ids
        assert mock_lyrics.fetch_lyrics.await_count == 3


# ======================================================================
# Concurrency
# ======================================================================


class TestConcurrentScrapes:
    @pytest.mark.asyncio
    async def test_concurrent_scrapes_keep_every_cached_id(
        self, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        scraper = LyricsScraper(mock_lyrics, store, scrape_delay=0)

        await asyncio.gather(
            scraper.scrape_lyrics(ARTIST_ID, ["A", "B", "C"]),
            scraper.scrape_lyrics(ARTIST_ID, ["D", "E"]),
            scraper.scrape_lyrics(ARTIST_ID, ["F"]),
        )

        assert sorted((await _artist(store)).cached_song_ids) == list("ABCDEF")

    @pytest.mark.asyncio
    async def test_attempts_are_counted_atomically(
        self, store: MemoryDocumentStore, mock_lyrics: MagicMock
    ) -> None:
        await seed_artist(store)
        mock_lyrics.fetch_lyrics.side_effect = UpstreamUnavailableError(message="down")
        scraper = LyricsScraper(mock_lyrics, store, scrape_delay=0)

        await asyncio.gather(*(scraper.scrape_lyrics(ARTIST_ID, ["A"]) for _ in range(2)))

        assert (await _song(store, "A")).scraping_attempts == 2
