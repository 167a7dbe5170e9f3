"""Lyrics providers."""

from src.providers.lyrics.genius_lyrics_provider import GeniusLyricsProvider, extract_lyrics

__all__ = ["GeniusLyricsProvider", "extract_lyrics"]
