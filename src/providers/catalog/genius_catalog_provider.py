"""Genius REST API catalog provider.

Implements ICatalogProvider against ``GET /artists/{id}/songs`` (sorted by
popularity) and ``GET /artists/{id}`` for the artist-picture fallback.
Authenticates with a bearer token from ``GENIUS_API_KEY``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from src.interfaces.catalog_provider import (
    ArtistCredit,
    CatalogPage,
    CatalogSong,
    ICatalogProvider,
)
from src.utils.errors import ConfigurationError, RateLimitError, UpstreamUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BASE_URL = "https://api.genius.com"
_DEFAULT_TIMEOUT = 10.0


class GeniusCatalogProvider(ICatalogProvider):
    """Catalog provider backed by the Genius API.

    An ``httpx.AsyncClient`` may be injected (shared across providers by
    the application factory); otherwise one is created and owned here.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = _DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    # -- Private helpers -------------------------------------------------------

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(
                message="GENIUS_API_KEY is not set",
                provider_name=self.get_provider_name(),
            )

        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailableError(
                message=f"Timeout calling {path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 429:
                raise RateLimitError(
                    message=f"Rate limited on {path}",
                    provider_name=self.get_provider_name(),
                ) from exc
            raise UpstreamUnavailableError(
                message=f"HTTP {status} for {path}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(
                message=f"HTTP error calling {path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(
                message=f"Invalid JSON from {path}",
                provider_name=self.get_provider_name(),
            ) from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("response"), dict):
            raise UpstreamUnavailableError(
                message=f"Unexpected response shape from {path}",
                provider_name=self.get_provider_name(),
            )
        return payload["response"]

    @staticmethod
    def _credit_from_data(data: Any) -> ArtistCredit | None:
        if not isinstance(data, dict) or data.get("id") is None:
            return None
        return ArtistCredit(
            id=str(data["id"]),
            name=data.get("name") or "",
            url=data.get("url"),
            image_url=data.get("image_url"),
        )

    def _song_from_data(self, data: dict[str, Any]) -> CatalogSong:
        featured = tuple(
            credit
            for credit in (self._credit_from_data(f) for f in data.get("featured_artists") or [])
            if credit is not None
        )
        return CatalogSong(
            id=str(data["id"]),
            title=data.get("title") or "",
            url=data.get("url") or "",
            song_art_image_url=data.get("song_art_image_url"),
            artist_names=data.get("artist_names"),
            primary_artist=self._credit_from_data(data.get("primary_artist")),
            featured_artists=featured,
        )

    # -- ICatalogProvider implementation ---------------------------------------

    async def get_songs_page(
        self, external_artist_id: str, page: int, page_size: int = 50
    ) -> CatalogPage:
        body = await self._get_json(
            f"/artists/{external_artist_id}/songs",
            params={"per_page": page_size, "page": page, "sort": "popularity"},
        )
        raw_songs = body.get("songs") or []
        songs = [self._song_from_data(s) for s in raw_songs if isinstance(s, dict) and s.get("id") is not None]

        logger.debug(
            "genius_songs_page_fetched",
            artist_id=external_artist_id,
            page=page,
            count=len(songs),
        )
        return CatalogPage(page=page, songs=songs, has_more=len(raw_songs) == page_size)

    async def get_artist_image_url(self, external_artist_id: str) -> str | None:
        body = await self._get_json(f"/artists/{external_artist_id}")
        artist = body.get("artist")
        if not isinstance(artist, dict):
            return None
        return artist.get("image_url") or None

    def get_provider_name(self) -> str:
        return "genius_catalog"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()
