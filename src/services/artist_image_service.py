"""Best-effort artist picture discovery.

Runs as a side task of catalog population.  The first catalog page usually
credits the artist on several songs; the credit carries the picture URL,
so no extra request is needed in the common case.  When no credit matches,
the catalog source's single-artist lookup is tried once.

The outcome is recorded on the Artist as ``imageStatus``:

* ``found``  -- ``imageUrl`` holds the picture
* ``absent`` -- discovery ran and found nothing, or failed

Discovery never raises to its caller; a failure here must not affect the
population pass that triggered it.
"""

from __future__ import annotations

import structlog

from src.interfaces.catalog_provider import ArtistCredit, CatalogSong, ICatalogProvider
from src.interfaces.document_store import IDocumentStore
from src.models.catalog import ARTISTS, ImageStatus
from src.utils.errors import LyricQueueError
from src.utils.logging import get_logger

_DEFAULT_SCAN_LIMIT = 11


class ArtistImageService:
    """Finds and records an artist's picture URL."""

    def __init__(
        self,
        catalog: ICatalogProvider,
        store: IDocumentStore,
        scan_limit: int = _DEFAULT_SCAN_LIMIT,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._scan_limit = scan_limit
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @staticmethod
    def find_in_songs(
        external_artist_id: str, songs: list[CatalogSong], scan_limit: int = _DEFAULT_SCAN_LIMIT
    ) -> str | None:
        """Return the picture URL of the first credit matching *external_artist_id*.

        Checks the primary artist and then the featured artists of each of
        the first *scan_limit* songs.
        """
        for song in songs[:scan_limit]:
            credits: list[ArtistCredit] = []
            if song.primary_artist is not None:
                credits.append(song.primary_artist)
            credits.extend(song.featured_artists)
            for credit in credits:
                if credit.id == external_artist_id and credit.image_url:
                    return credit.image_url
        return None

    async def discover(
        self, artist_id: str, external_artist_id: str, songs: list[CatalogSong]
    ) -> ImageStatus:
        """Resolve the picture for *artist_id* and persist the result."""
        try:
            image_url = self.find_in_songs(external_artist_id, songs, self._scan_limit)
            if image_url is None:
                image_url = await self._catalog.get_artist_image_url(external_artist_id)
        except LyricQueueError as exc:
            self._logger.warning(
                "artist_image_lookup_failed",
                artist_id=artist_id,
                error=str(exc),
            )
            image_url = None

        status = ImageStatus.FOUND if image_url else ImageStatus.ABSENT
        fields: dict[str, str | None] = {"imageStatus": status.value}
        if image_url:
            fields["imageUrl"] = image_url

        try:
            await self._store.upsert(ARTISTS, artist_id, fields)
        except LyricQueueError as exc:
            self._logger.error("artist_image_save_failed", artist_id=artist_id, error=str(exc))
            return status

        self._logger.info("artist_image_resolved", artist_id=artist_id, status=status.value)
        return status
