"""Custom exception hierarchy for LyricQueue.

All application exceptions inherit from :class:`LyricQueueError`, which
carries an optional ``provider_name`` so error handlers can tell which
collaborator (e.g. "genius_catalog", "genius_lyrics", "sqlite_store")
caused the failure.

    LyricQueueError  (base -- catch-all for any LyricQueue error)
    +-- NotFoundError             (unknown artist / song / cursor)
    +-- UpstreamUnavailableError  (catalog or lyrics source unreachable)
    |   +-- RateLimitError        (source answered 429)
    +-- ExtractionFailedError     (page fetched, no usable lyrics)
    +-- StoreError                (document store write/read failure)
    +-- ConfigurationError        (startup / missing config)

Only whole-operation preconditions are raised to callers.  Per-song
failures inside a scrape batch are caught and reported in the batch
result; a song that exhausts its retry budget ends in the
``permanently_failed`` status rather than raising.
"""


class LyricQueueError(Exception):
    """Base exception for all LyricQueue errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[genius_lyrics] HTTP 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Precondition errors
# ---------------------------------------------------------------------------

class NotFoundError(LyricQueueError):
    """Raised when an artist or song key does not exist, or a cursor is not in the song list."""

    def __init__(
        self,
        message: str = "Requested record was not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External source errors
# ---------------------------------------------------------------------------

class UpstreamUnavailableError(LyricQueueError):
    """Raised when the catalog or lyrics source request fails.

    Covers network errors, timeouts and non-success HTTP statuses.  The
    populator lets it propagate (the caller may retry); the scraper counts
    it against the song's retry budget.
    """

    def __init__(
        self,
        message: str = "External source is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(UpstreamUnavailableError):
    """Raised when the external source reports its rate limit was exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionFailedError(LyricQueueError):
    """Raised when a song page was fetched but yielded no usable lyrics (e.g. instrumentals)."""

    def __init__(
        self,
        message: str = "No usable lyrics found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Infrastructure errors
# ---------------------------------------------------------------------------

class StoreError(LyricQueueError):
    """Raised when a document store operation cannot be applied."""

    def __init__(
        self,
        message: str = "Document store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(LyricQueueError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
