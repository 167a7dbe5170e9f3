"""Genius song-page lyrics provider using httpx and BeautifulSoup.

Fetches the public song page and assembles the lyric text from every
``div[data-lyrics-container="true"]`` block, stripping annotation links,
header/footer chrome and section markers such as ``[Chorus]``.
"""

from __future__ import annotations

import re

import httpx
import structlog
from bs4 import BeautifulSoup

from src.interfaces.lyrics_provider import ILyricsProvider
from src.utils.errors import ExtractionFailedError, RateLimitError, UpstreamUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 10.0
_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

_MIN_LYRICS_LENGTH = 10
_MIN_HTML_LENGTH = 100

_BRACKET_LINE = re.compile(r"^\[.*\]$")
_SECTION_HEADER = re.compile(
    r"^(Intro|Verse|Chorus|Bridge|Outro|Pre-Chorus|Post-Chorus|Hook|Refrain)(\s|\d|$)",
    re.IGNORECASE,
)


def _keep_line(line: str) -> bool:
    if not line:
        return False
    if _BRACKET_LINE.match(line):
        return False
    return not _SECTION_HEADER.match(line)


def extract_lyrics(html: str) -> str:
    """Return clean lyric text from a Genius song page.

    Raises
    ------
    ExtractionFailedError
        If the page has no lyrics containers or the cleaned text is
        shorter than ten characters.
    """
    soup = BeautifulSoup(html, "html.parser")
    containers = soup.select('div[data-lyrics-container="true"]')
    if not containers:
        raise ExtractionFailedError(
            message="No lyrics containers found",
            provider_name="genius_lyrics",
        )

    lines: list[str] = []
    for container in containers:
        for junk in container.select(
            '[data-exclude-from-selection="true"], '
            '[class*="LyricsHeader__Container"], '
            '[class*="LyricsFooter__Container"], '
            'a[href*="/annotations/"]'
        ):
            junk.decompose()
        for br in container.find_all("br"):
            br.replace_with("\n")

        text = container.get_text()
        lines.extend(line.strip() for line in text.split("\n"))

    lyrics = "\n".join(line for line in lines if _keep_line(line)).strip()
    if len(lyrics) < _MIN_LYRICS_LENGTH:
        raise ExtractionFailedError(
            message="Extracted lyrics are too short or empty",
            provider_name="genius_lyrics",
        )
    return lyrics


class GeniusLyricsProvider(ILyricsProvider):
    """Lyrics provider that scrapes Genius song pages."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    async def fetch_lyrics(self, song_url: str) -> str:
        if not song_url or "genius.com" not in song_url:
            raise ExtractionFailedError(
                message=f"Not a Genius song URL: {song_url!r}",
                provider_name=self.get_provider_name(),
            )

        try:
            response = await self._client.get(song_url, headers=_DEFAULT_HEADERS)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailableError(
                message=f"Timeout fetching {song_url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            error_cls = RateLimitError if status == 429 else UpstreamUnavailableError
            raise error_cls(
                message=f"HTTP {status} for {song_url}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(
                message=f"HTTP error fetching {song_url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        html = response.text
        if not html or len(html) < _MIN_HTML_LENGTH:
            raise UpstreamUnavailableError(
                message=f"Empty or truncated page for {song_url}",
                provider_name=self.get_provider_name(),
            )

        lyrics = extract_lyrics(html)
        logger.info("lyrics_extracted", url=song_url, length=len(lyrics))
        return lyrics

    def get_provider_name(self) -> str:
        return "genius_lyrics"

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()
