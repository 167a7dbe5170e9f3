"""Windowed queue loader: the playback-time entry point.

Given a cursor song, resolves the window of songs around it and makes sure
every one of them has valid lyrics before returning, scraping the gaps.

``cachedSongIds`` is treated as a hint, not the truth: every id it claims
is re-checked against its Song document, and any that turn out to hold
invalid lyrics (``""``, ``"null"`` ...) are scraped again with the rest.
"""

from __future__ import annotations

import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.catalog import ARTISTS, SONGS, Artist, Song
from src.models.results import Direction, WindowRange, WindowResult
from src.services.lyrics_scraper import LyricsScraper
from src.utils.errors import LyricQueueError, NotFoundError
from src.utils.logging import get_logger
from src.utils.window import clamp_window_size, compute_window

_PERMANENTLY_FAILED = "Permanently failed"


class QueueLoader:
    """Loads a window of songs with lyrics around a playback cursor."""

    def __init__(
        self,
        store: IDocumentStore,
        scraper: LyricsScraper,
        default_window_size: int = 10,
    ) -> None:
        self._store = store
        self._scraper = scraper
        self._default_window_size = default_window_size
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def _load_songs(self, song_ids: list[str]) -> dict[str, Song]:
        docs = await self._store.get_many(SONGS, song_ids)
        return {doc_id: Song.from_document(doc_id, data) for doc_id, data in docs.items()}

    async def load_window(
        self,
        artist_id: str,
        cursor_song_id: str,
        direction: Direction = Direction.FORWARD,
        window_size: int | None = None,
    ) -> WindowResult:
        """Return the songs of the window around *cursor_song_id*.

        Raises
        ------
        NotFoundError
            If the artist does not exist, has no songs, or does not list
            *cursor_song_id*.
        """
        data = await self._store.get(ARTISTS, artist_id)
        if data is None:
            raise NotFoundError(message=f"Artist {artist_id!r} not found")
        artist = Artist.from_document(artist_id, data)
        if not artist.song_ids:
            raise NotFoundError(message=f"Artist {artist_id!r} has no songs")

        position = artist.position_of(cursor_song_id)
        if position is None:
            raise NotFoundError(
                message=f"Song {cursor_song_id!r} is not in the catalog of {artist_id!r}"
            )

        size = clamp_window_size(window_size, self._default_window_size)
        start, end = compute_window(position, len(artist.song_ids), direction, size)
        target_ids = list(dict.fromkeys(artist.song_ids[start:end]))

        cached = set(artist.cached_song_ids)
        claimed = [sid for sid in target_ids if sid in cached]
        loaded = await self._load_songs(claimed)

        valid = {sid: song for sid, song in loaded.items() if song.has_valid_lyrics}
        needs_lyrics = [sid for sid in target_ids if sid not in valid]
        stale_claims = [sid for sid in claimed if sid not in valid]
        if stale_claims:
            self._logger.warning(
                "cached_lyrics_invalid",
                artist_id=artist_id,
                song_ids=stale_claims,
            )

        failed: dict[str, str] = {}
        refreshed: dict[str, Song] = {}
        scraped = 0
        if needs_lyrics:
            try:
                result = await self._scraper.scrape_lyrics(artist_id, needs_lyrics)
            except LyricQueueError as exc:
                self._logger.error("queue_scrape_failed", artist_id=artist_id, error=str(exc))
                failed = {sid: str(exc) for sid in needs_lyrics}
            else:
                scraped = len(result.successful)
                failed = {f.song_id: f.error for f in result.failed}
                refreshed = await self._load_songs(needs_lyrics)
                valid.update(
                    {sid: song for sid, song in refreshed.items() if song.has_valid_lyrics}
                )

        songs: dict[str, Song] = {}
        for sid in target_ids:
            if sid in valid:
                songs[sid] = valid[sid]
            elif sid not in failed:
                stored = refreshed.get(sid)
                failed[sid] = (stored.scraping_error if stored else None) or _PERMANENTLY_FAILED
        # Successfully resolved ids never carry a failure reason.
        failed = {sid: reason for sid, reason in failed.items() if sid not in songs}

        self._logger.info(
            "queue_window_loaded",
            artist_id=artist_id,
            position=position,
            start=start,
            end=end,
            loaded=len(songs),
            scraped=scraped,
            failed=len(failed),
        )
        return WindowResult(
            artist_id=artist_id,
            position=position,
            target_range=WindowRange(start=start, end=end),
            target_ids=target_ids,
            songs=songs,
            failed=failed,
            scraped=scraped,
            loaded=len(songs),
        )
