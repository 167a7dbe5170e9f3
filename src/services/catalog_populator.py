"""Incremental population of an artist's song catalog.

Pages through the catalog source from page 1 (popularity order) and
appends unseen song ids to ``Artist.songIds`` until the source runs out of
pages or the song ceiling is reached.  Every page is committed as one
atomic batch, so a failure on page N keeps pages 1..N-1.

A fresh, fully cached artist returns straight away with no external
request.  That is the path taken on almost every playback, so nothing on
it may touch the network.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import structlog

from src.interfaces.catalog_provider import CatalogSong, ICatalogProvider
from src.interfaces.document_store import IDocumentStore, WriteBatch
from src.models.catalog import ARTISTS, SONGS, Artist, ArtistRef, ImageStatus, Song
from src.models.results import PopulateResult
from src.services.artist_image_service import ArtistImageService
from src.utils.errors import NotFoundError
from src.utils.logging import get_logger


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class CatalogPopulator:
    """Fetches and persists an artist's ordered song list.

    Parameters
    ----------
    catalog:
        External catalog source.
    store:
        Document store holding the ``artists`` and ``songs`` collections.
    image_service:
        Optional picture discovery, fired in the background after the
        first page when the artist's ``imageStatus`` is still ``unknown``.
    page_size, max_songs, refresh_days, page_delay:
        Tunables; see :class:`src.config.settings.Settings`.
    """

    def __init__(
        self,
        catalog: ICatalogProvider,
        store: IDocumentStore,
        image_service: ArtistImageService | None = None,
        page_size: int = 50,
        max_songs: int = 1000,
        refresh_days: int = 7,
        page_delay: float = 0.2,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._image_service = image_service
        self._page_size = page_size
        self._max_songs = max_songs
        self._max_age = timedelta(days=refresh_days)
        self._page_delay = page_delay
        self._background_tasks: set[asyncio.Task[ImageStatus]] = set()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    async def _load_artist(self, artist_id: str) -> Artist:
        data = await self._store.get(ARTISTS, artist_id)
        if data is None:
            raise NotFoundError(message=f"Artist {artist_id!r} not found")
        return Artist.from_document(artist_id, data)

    @staticmethod
    def _song_document(song: CatalogSong, added_at: datetime) -> dict[str, object]:
        primary = None
        if song.primary_artist is not None:
            primary = ArtistRef(
                id=song.primary_artist.id,
                name=song.primary_artist.name,
                url=song.primary_artist.url,
            )
        return Song(
            id=song.id,
            title=song.title,
            source_url=song.url,
            primary_artist_ref=primary,
            artist_names=song.artist_names,
            song_art_image_url=song.song_art_image_url,
            added_at=added_at,
        ).to_document()

    def _start_image_discovery(self, artist: Artist, songs: list[CatalogSong]) -> None:
        if self._image_service is None or artist.image_status is not ImageStatus.UNKNOWN:
            return

        task = asyncio.create_task(
            self._image_service.discover(artist.id, artist.external_id, songs)
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._on_image_task_done)

    def _on_image_task_done(self, task: asyncio.Task[ImageStatus]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("artist_image_task_failed", error=str(exc))

    async def drain_background_tasks(self) -> None:
        """Wait for any in-flight image discovery tasks to finish."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def populate_catalog(self, artist_id: str) -> PopulateResult:
        """Bring the artist's song list up to date.

        Raises
        ------
        NotFoundError
            If the artist does not exist.
        UpstreamUnavailableError
            If a page fetch fails.  Pages committed before the failure are
            kept and the next call resumes from the current song list.
        """
        artist = await self._load_artist(artist_id)

        if not artist.needs_population(self._max_age):
            self._logger.debug("catalog_up_to_date", artist_id=artist_id)
            return PopulateResult(
                artist_id=artist_id,
                total_songs=len(artist.song_ids),
                is_fully_cached=True,
                up_to_date=True,
            )

        song_ids = list(dict.fromkeys(artist.song_ids))

        if len(song_ids) >= self._max_songs:
            await self._store.upsert(
                ARTISTS,
                artist_id,
                {
                    "isFullyCached": True,
                    "totalSongs": len(song_ids),
                    "songsLastUpdated": _utcnow().isoformat(),
                },
            )
            self._logger.info("catalog_at_ceiling", artist_id=artist_id, total_songs=len(song_ids))
            return PopulateResult(
                artist_id=artist_id,
                total_songs=len(song_ids),
                is_fully_cached=True,
            )

        self._logger.info(
            "catalog_population_started",
            artist_id=artist_id,
            external_id=artist.external_id,
            existing_songs=len(song_ids),
        )

        known = set(song_ids)
        songs_fetched = 0
        new_songs = 0
        pages_processed = 0
        is_fully_cached = False
        page_number = 1

        while True:
            if page_number > 1 and self._page_delay > 0:
                await asyncio.sleep(self._page_delay)

            page = await self._catalog.get_songs_page(
                artist.external_id, page_number, self._page_size
            )
            songs_fetched += len(page.songs)
            now = _utcnow()

            batch = WriteBatch()
            appended: list[str] = []
            for song in page.songs:
                if song.id in known:
                    continue
                if len(song_ids) >= self._max_songs:
                    break
                batch.upsert(SONGS, song.id, self._song_document(song, now), create_only=True)
                known.add(song.id)
                song_ids.append(song.id)
                appended.append(song.id)

            reached_ceiling = len(song_ids) >= self._max_songs
            is_fully_cached = not page.has_more or not page.songs or reached_ceiling

            if appended:
                batch.array_add(ARTISTS, artist_id, "songIds", appended)
            batch.upsert(
                ARTISTS,
                artist_id,
                {
                    "songsFetched": songs_fetched,
                    "totalSongs": len(song_ids),
                    "songsLastUpdated": now.isoformat(),
                    "isFullyCached": is_fully_cached,
                },
            )
            await self._store.commit(batch)

            new_songs += len(appended)
            pages_processed += 1
            self._logger.debug(
                "catalog_page_committed",
                artist_id=artist_id,
                page=page_number,
                new_songs=len(appended),
                total_songs=len(song_ids),
            )

            if page_number == 1:
                self._start_image_discovery(artist, page.songs)

            if is_fully_cached:
                break
            page_number += 1

        self._logger.info(
            "catalog_population_finished",
            artist_id=artist_id,
            total_songs=len(song_ids),
            new_songs=new_songs,
            pages=pages_processed,
        )
        return PopulateResult(
            artist_id=artist_id,
            total_songs=len(song_ids),
            new_songs=new_songs,
            is_fully_cached=is_fully_cached,
            pages_processed=pages_processed,
        )
