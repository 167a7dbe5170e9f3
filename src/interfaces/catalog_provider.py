"""Abstract base class for song-catalog providers.

Defines the contract for paging through an artist's songs on an external
metadata service (Genius).  Pages are returned in descending popularity
order.  Providers are interchangeable behind this interface; the catalog
populator never talks HTTP itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ArtistCredit:
    """An artist credited on a catalog song (primary or featured).

    Attributes
    ----------
    id:
        Provider-specific artist identifier, as a string.
    name:
        Display name.
    url:
        Artist page on the provider.
    image_url:
        Artist picture, when the provider exposes one.
    """

    id: str
    name: str = ""
    url: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class CatalogSong:
    """A single song entry from a catalog page."""

    id: str
    title: str
    url: str
    song_art_image_url: str | None = None
    artist_names: str | None = None
    primary_artist: ArtistCredit | None = None
    featured_artists: tuple[ArtistCredit, ...] = ()


@dataclass(frozen=True)
class CatalogPage:
    """One page of an artist's catalog.

    ``has_more`` is ``False`` once the provider returned fewer songs than
    the requested page size.
    """

    page: int
    songs: list[CatalogSong] = field(default_factory=list)
    has_more: bool = False


class ICatalogProvider(ABC):
    """Contract for external song-metadata sources."""

    @abstractmethod
    async def get_songs_page(
        self, external_artist_id: str, page: int, page_size: int = 50
    ) -> CatalogPage:
        """Fetch one page of the artist's songs, most popular first.

        Parameters
        ----------
        external_artist_id:
            The provider's identifier for the artist.
        page:
            1-based page number.
        page_size:
            Songs per page.

        Raises
        ------
        src.utils.errors.UpstreamUnavailableError
            On network errors, timeouts, non-success statuses or an
            unparseable response.
        """

    @abstractmethod
    async def get_artist_image_url(self, external_artist_id: str) -> str | None:
        """Return the artist's picture URL from the provider, or ``None``.

        Raises
        ------
        src.utils.errors.UpstreamUnavailableError
            If the provider cannot be reached.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"genius_catalog"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""
