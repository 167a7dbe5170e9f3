"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
#   1. config/config.yaml  -- static tunables checked into the repo
#   2. .env file           -- local developer overrides (not committed)
#   3. Environment vars    -- set at deploy time
#
# load_config() reads the YAML file, then deep-merges the values coming
# from Settings on top.  build_settings() goes the other way and turns
# the merged tree back into a Settings object, which is what the
# services consume.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path
from typing import Any

import yaml

from src.config.settings import Settings

# Flat Settings field -> (section, key) in config.yaml.
_YAML_KEYS: dict[str, tuple[str, str]] = {
    "catalog_page_size": ("catalog", "page_size"),
    "catalog_max_songs": ("catalog", "max_songs"),
    "catalog_refresh_days": ("catalog", "refresh_days"),
    "catalog_page_delay": ("catalog", "page_delay"),
    "discover_artist_images": ("catalog", "discover_images"),
    "image_scan_limit": ("catalog", "image_scan_limit"),
    "max_scrape_attempts": ("scraping", "max_attempts"),
    "scrape_delay": ("scraping", "delay"),
    "request_timeout": ("scraping", "request_timeout"),
    "default_window_size": ("queue", "window_size"),
    "store_backend": ("store", "backend"),
    "store_db_path": ("store", "db_path"),
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Only settings explicitly provided through the environment or ``.env``
    override YAML values; plain defaults do not.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; a fresh one is built if omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    explicit = settings.model_fields_set

    env_overrides: dict[str, Any] = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "genius": {
            "configured": settings.has_genius_credentials(),
            "base_url": settings.genius_api_base_url,
        },
        "logging": {
            "level": settings.log_level,
        },
    }
    for field, (section, key) in _YAML_KEYS.items():
        if field in explicit:
            env_overrides.setdefault(section, {})[key] = getattr(settings, field)

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def build_settings(path: str = "config/config.yaml") -> Settings:
    """Return Settings with YAML tunables applied beneath environment values."""
    base = Settings()
    config = load_config(path, settings=base)

    updates: dict[str, Any] = {}
    for field, (section, key) in _YAML_KEYS.items():
        value = config.get(section, {}).get(key)
        if value is not None and field not in base.model_fields_set:
            updates[field] = value

    if not updates:
        return base
    return base.model_copy(update=updates)


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
