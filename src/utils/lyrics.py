"""Lyrics validity rules shared by the scraper, the queue loader and repair.

Upstream tooling has been seen to write the literal strings ``"null"`` and
``"undefined"`` into the lyrics field.  Those values are non-empty but mean
"no lyrics", so validity is checked against them explicitly everywhere a
song's lyrics are trusted.
"""

from __future__ import annotations

from typing import Any

_SENTINEL_VALUES = frozenset({"null", "undefined"})


def is_valid_lyrics(lyrics: Any) -> bool:
    """Return ``True`` if *lyrics* is usable lyric text.

    Valid means: a string, not empty or whitespace-only, and not one of the
    sentinel strings ``"null"`` / ``"undefined"`` in any letter case.
    """
    if not isinstance(lyrics, str):
        return False
    stripped = lyrics.strip()
    if not stripped:
        return False
    return stripped.lower() not in _SENTINEL_VALUES
