"""Abstract base class for lyrics providers.

The engine treats lyric extraction as opaque: a provider either returns
non-empty lyric text for a song page or raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ILyricsProvider(ABC):
    """Contract for fetching and extracting the lyrics of one song."""

    @abstractmethod
    async def fetch_lyrics(self, song_url: str) -> str:
        """Return the clean lyric text found at *song_url*.

        Raises
        ------
        src.utils.errors.UpstreamUnavailableError
            If the page could not be fetched (network, timeout, HTTP status).
        src.utils.errors.ExtractionFailedError
            If the page was fetched but holds no usable lyrics.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"genius_lyrics"``."""
