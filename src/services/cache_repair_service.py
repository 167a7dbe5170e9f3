"""Repair of drifted ``cachedSongIds`` lists.

Older writers could leave ids in an artist's cached list whose Song holds
``"null"``, an empty string or nothing at all.  The queue loader already
heals such ids one window at a time; this service sweeps a whole artist
at once.  Every invalid id is handed to the lyrics scraper, which either
rescrapes it or evicts it from the cached list, respecting the retry
budget like any other scrape.
"""

from __future__ import annotations

import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.catalog import ARTISTS, SONGS, Artist, Song
from src.models.results import RepairReport
from src.services.lyrics_scraper import LyricsScraper
from src.utils.errors import NotFoundError
from src.utils.logging import get_logger


class CacheRepairService:
    """Finds cached song ids without valid lyrics and re-scrapes them."""

    def __init__(self, store: IDocumentStore, scraper: LyricsScraper) -> None:
        self._store = store
        self._scraper = scraper
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def find_invalid(self, artist: Artist) -> list[str]:
        """Return cached ids of *artist* that lack valid lyrics or are not in its catalog."""
        cached_ids = list(dict.fromkeys(artist.cached_song_ids))
        docs = await self._store.get_many(SONGS, cached_ids)
        invalid: list[str] = []
        for song_id in cached_ids:
            data = docs.get(song_id)
            if song_id not in artist.song_ids or data is None:
                invalid.append(song_id)
            elif not Song.from_document(song_id, data).has_valid_lyrics:
                invalid.append(song_id)
        return invalid

    async def repair_artist(self, artist_id: str, dry_run: bool = False) -> RepairReport:
        """Check every cached id of *artist_id* and fix the invalid ones.

        With *dry_run* the invalid ids are reported but nothing is written.

        Raises
        ------
        NotFoundError
            If the artist does not exist.
        """
        data = await self._store.get(ARTISTS, artist_id)
        if data is None:
            raise NotFoundError(message=f"Artist {artist_id!r} not found")
        artist = Artist.from_document(artist_id, data)

        invalid = await self.find_invalid(artist)
        self._logger.info(
            "cache_repair_scan",
            artist_id=artist_id,
            checked=len(set(artist.cached_song_ids)),
            invalid=len(invalid),
            dry_run=dry_run,
        )

        scrape_result = None
        if invalid and not dry_run:
            # Ids with no Song document, or not in the catalog, cannot be rescraped.
            known = await self._store.get_many(SONGS, invalid)
            evict = [sid for sid in invalid if sid not in known or sid not in artist.song_ids]
            if evict:
                await self._store.array_remove(ARTISTS, artist_id, "cachedSongIds", evict)
                self._logger.info("cache_repair_evicted", artist_id=artist_id, song_ids=evict)
            rescrape = [sid for sid in invalid if sid not in evict]
            if rescrape:
                scrape_result = await self._scraper.scrape_lyrics(artist_id, rescrape)

        return RepairReport(
            artist_id=artist_id,
            checked=len(set(artist.cached_song_ids)),
            invalid_ids=invalid,
            dry_run=dry_run,
            scrape_result=scrape_result,
        )
