"""Utility modules for LyricQueue.

- **errors** -- exception hierarchy rooted at LyricQueueError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **lyrics** (not re-exported here) -- the lyrics validity rule.
- **window** (not re-exported here) -- playback-window index arithmetic;
  it depends on the models package, which itself imports ``lyrics``.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    ExtractionFailedError,
    LyricQueueError,
    NotFoundError,
    RateLimitError,
    StoreError,
    UpstreamUnavailableError,
)

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ExtractionFailedError",
    "LyricQueueError",
    "NotFoundError",
    "RateLimitError",
    "StoreError",
    "UpstreamUnavailableError",
    "configure_logging",
    "get_logger",
]
