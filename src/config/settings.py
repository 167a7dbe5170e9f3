"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read, in priority order, from:
#
#   1. Environment variables, e.g. GENIUS_API_KEY=abc123
#   2. The .env file in the project root (local development)
#   3. The defaults declared below
#
# Field ``genius_api_key`` maps to env var ``GENIUS_API_KEY``.
#
# The catalog, scraping and window tunables below are the knobs the
# engine exposes.  Timing values (delays, timeouts) only affect pacing;
# the retry ceiling and page size change behaviour.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """LyricQueue application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === External sources ===
    # Empty string = "not configured"; the catalog provider raises
    # ConfigurationError on first use.
    genius_api_key: str = ""
    genius_api_base_url: str = "https://api.genius.com"
    request_timeout: float = 10.0  # seconds, per external fetch

    # === Document store ===
    store_backend: str = "sqlite"  # "sqlite" or "memory"
    store_db_path: str = "data/lyricqueue.db"

    # === Catalog population ===
    catalog_page_size: int = 50
    catalog_max_songs: int = 1000
    catalog_refresh_days: int = 7
    catalog_page_delay: float = 0.2  # seconds between page fetches
    discover_artist_images: bool = True
    image_scan_limit: int = 11

    # === Lyrics scraping ===
    max_scrape_attempts: int = 3
    scrape_delay: float = 0.3  # seconds between lyric fetches

    # === Queue window ===
    default_window_size: int = 10

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def has_genius_credentials(self) -> bool:
        """Return ``True`` when a Genius API token is configured."""
        return bool(self.genius_api_key)
