"""Lyrics cache scraper with bounded retries.

For each requested song the scraper decides, from the song's
``scrapingStatus`` and ``scrapingAttempts``, whether to skip it, fetch its
lyrics, or retire it as ``permanently_failed``.  Every attempt is counted
with the store's atomic increment before the fetch, so the attempt count
stays correct when two callers scrape the same song concurrently.

The artist's ``cachedSongIds`` is kept in line with the outcome:

* success -- array-add (in the same batch as the lyrics write), only when
  the song belongs to the artist's ``songIds``
* failure -- array-remove (a no-op if the id was never cached)

A failure on one song never aborts the batch; it is reported in the
:class:`ScrapeResult` instead.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

import structlog

from src.interfaces.document_store import IDocumentStore, WriteBatch
from src.interfaces.lyrics_provider import ILyricsProvider
from src.models.catalog import ARTISTS, SONGS, Artist, ScrapingStatus, Song
from src.models.results import FailureKind, ScrapeFailure, ScrapeResult
from src.utils.errors import (
    ExtractionFailedError,
    LyricQueueError,
    NotFoundError,
    UpstreamUnavailableError,
)
from src.utils.logging import get_logger
from src.utils.lyrics import is_valid_lyrics

_CACHED_FIELD = "cachedSongIds"


class LyricsScraper:
    """Fetches lyrics for songs and records the outcome on Song and Artist."""

    def __init__(
        self,
        lyrics: ILyricsProvider,
        store: IDocumentStore,
        max_attempts: int = 3,
        scrape_delay: float = 0.3,
        fetch_timeout: float = 10.0,
    ) -> None:
        self._lyrics = lyrics
        self._store = store
        self._max_attempts = max_attempts
        self._scrape_delay = scrape_delay
        self._fetch_timeout = fetch_timeout
        self._last_fetch_time: float = 0.0
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    # -- Private helpers -------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce the minimum interval between lyric page fetches."""
        if self._scrape_delay <= 0:
            return
        elapsed = time.monotonic() - self._last_fetch_time
        if self._last_fetch_time > 0 and elapsed < self._scrape_delay:
            await asyncio.sleep(self._scrape_delay - elapsed)
        self._last_fetch_time = time.monotonic()

    async def _fetch(self, song: Song) -> str:
        if not song.source_url:
            raise ExtractionFailedError(message=f"Song {song.id} has no source URL")

        await self._throttle()
        try:
            text = await asyncio.wait_for(
                self._lyrics.fetch_lyrics(song.source_url), timeout=self._fetch_timeout
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError(
                message=f"Timed out after {self._fetch_timeout}s fetching {song.source_url}",
                provider_name=self._lyrics.get_provider_name(),
            ) from exc

        if not is_valid_lyrics(text):
            raise ExtractionFailedError(
                message="Source returned empty lyrics",
                provider_name=self._lyrics.get_provider_name(),
            )
        return text.strip()

    async def _retire(self, artist: Artist, song: Song) -> ScrapeFailure:
        """Move a song whose retry budget is spent to ``permanently_failed``."""
        error = song.scraping_error or "Retry limit reached"
        batch = (
            WriteBatch()
            .upsert(
                SONGS,
                song.id,
                {"scrapingStatus": ScrapingStatus.PERMANENTLY_FAILED.value, "scrapingError": error},
            )
            .array_remove(ARTISTS, artist.id, _CACHED_FIELD, [song.id])
        )
        await self._store.commit(batch)
        self._logger.warning(
            "lyrics_permanently_failed",
            song_id=song.id,
            attempts=song.scraping_attempts,
        )
        return ScrapeFailure(
            song_id=song.id,
            error=error,
            kind=FailureKind.PERMANENT_FAILURE,
            permanent=True,
        )

    async def _attempt(self, artist: Artist, song: Song) -> ScrapeFailure | None:
        """Run one counted scrape attempt; return a failure or ``None`` on success."""
        await self._store.commit(
            WriteBatch()
            .upsert(SONGS, song.id, {"scrapingStatus": ScrapingStatus.SCRAPING.value})
            .increment(SONGS, song.id, "scrapingAttempts", 1)
        )

        try:
            text = await self._fetch(song)
        except (UpstreamUnavailableError, ExtractionFailedError) as exc:
            kind = (
                FailureKind.EXTRACTION_FAILED
                if isinstance(exc, ExtractionFailedError)
                else FailureKind.UPSTREAM_UNAVAILABLE
            )
            return await self._record_failure(artist, song.id, str(exc), kind)
        except Exception as exc:
            self._logger.error("lyrics_fetch_unexpected_error", song_id=song.id, error=str(exc))
            error = str(exc) or type(exc).__name__
            return await self._record_failure(artist, song.id, error, FailureKind.INTERNAL)

        batch = WriteBatch().upsert(
            SONGS,
            song.id,
            {
                "lyrics": text,
                "lyricsScrapedAt": datetime.now(tz=timezone.utc).isoformat(),  # noqa: UP017
                "scrapingStatus": ScrapingStatus.COMPLETED.value,
                "scrapingError": None,
            },
        )
        if song.id in artist.song_ids:
            batch.array_add(ARTISTS, artist.id, _CACHED_FIELD, [song.id])
        await self._store.commit(batch)
        self._logger.info("lyrics_scraped", song_id=song.id, length=len(text))
        return None

    async def _record_failure(
        self, artist: Artist, song_id: str, error: str, kind: FailureKind
    ) -> ScrapeFailure:
        # Re-read: the attempt count may include concurrent callers' attempts.
        current = await self._store.get(SONGS, song_id) or {}
        attempts = int(current.get("scrapingAttempts") or 0)
        permanent = attempts >= self._max_attempts
        status = ScrapingStatus.PERMANENTLY_FAILED if permanent else ScrapingStatus.FAILED

        await self._store.commit(
            WriteBatch()
            .upsert(SONGS, song_id, {"scrapingStatus": status.value, "scrapingError": error})
            .array_remove(ARTISTS, artist.id, _CACHED_FIELD, [song_id])
        )
        self._logger.warning(
            "lyrics_scrape_failed",
            song_id=song_id,
            attempts=attempts,
            permanent=permanent,
            error=error,
        )
        return ScrapeFailure(song_id=song_id, error=error, kind=kind, permanent=permanent)

    async def _process(self, artist: Artist, song_id: str, result: _Collector) -> None:
        data = await self._store.get(SONGS, song_id)
        if data is None:
            result.failed.append(
                ScrapeFailure(
                    song_id=song_id,
                    error=f"Song {song_id!r} not found",
                    kind=FailureKind.NOT_FOUND,
                )
            )
            return

        song = Song.from_document(song_id, data)
        status = song.scraping_status

        if status is ScrapingStatus.COMPLETED and song.has_valid_lyrics:
            if song_id in artist.song_ids:
                await self._store.array_add(ARTISTS, artist.id, _CACHED_FIELD, [song_id])
            result.skipped.append(song_id)
            return

        if status is ScrapingStatus.PERMANENTLY_FAILED:
            await self._store.array_remove(ARTISTS, artist.id, _CACHED_FIELD, [song_id])
            result.skipped.append(song_id)
            return

        if status in (
            ScrapingStatus.PENDING,
            ScrapingStatus.FAILED,
            ScrapingStatus.SCRAPING,
            ScrapingStatus.COMPLETED,
        ):
            if song.scraping_attempts >= self._max_attempts:
                result.failed.append(await self._retire(artist, song))
                return
            failure = await self._attempt(artist, song)
            if failure is None:
                result.successful.append(song_id)
            else:
                result.failed.append(failure)
            return

        raise LyricQueueError(message=f"Unhandled scraping status {status!r}")

    # -- Public API ------------------------------------------------------------

    async def scrape_lyrics(self, artist_id: str, song_ids: list[str]) -> ScrapeResult:
        """Scrape lyrics for *song_ids* on behalf of *artist_id*.

        Songs are processed one at a time in the given order; duplicate ids
        are processed once.

        Raises
        ------
        NotFoundError
            If the artist does not exist.
        """
        data = await self._store.get(ARTISTS, artist_id)
        if data is None:
            raise NotFoundError(message=f"Artist {artist_id!r} not found")
        artist = Artist.from_document(artist_id, data)

        collector = _Collector()
        for song_id in dict.fromkeys(song_ids):
            try:
                await self._process(artist, song_id, collector)
            except LyricQueueError as exc:
                self._logger.error("lyrics_scrape_error", song_id=song_id, error=str(exc))
                collector.failed.append(
                    ScrapeFailure(song_id=song_id, error=str(exc), kind=FailureKind.INTERNAL)
                )
            except Exception as exc:
                self._logger.error("lyrics_scrape_unexpected_error", song_id=song_id, error=str(exc))
                collector.failed.append(
                    ScrapeFailure(song_id=song_id, error=str(exc), kind=FailureKind.INTERNAL)
                )

        result = ScrapeResult(
            successful=collector.successful,
            failed=collector.failed,
            skipped=collector.skipped,
        )
        self._logger.info(
            "lyrics_scrape_batch_finished",
            artist_id=artist_id,
            successful=len(result.successful),
            failed=len(result.failed),
            skipped=len(result.skipped),
        )
        return result


class _Collector:
    """Mutable accumulator for one scrape batch."""

    def __init__(self) -> None:
        self.successful: list[str] = []
        self.failed: list[ScrapeFailure] = []
        self.skipped: list[str] = []
