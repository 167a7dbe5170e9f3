"""LyricQueue API layer -- routes, schemas and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    ErrorResponse,
    HealthResponse,
    RegisterArtistRequest,
    RepairRequest,
    ScrapeRequest,
    WindowRequest,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "RegisterArtistRequest",
    "RepairRequest",
    "RequestLoggingMiddleware",
    "ScrapeRequest",
    "WindowRequest",
    "configure_cors",
    "router",
]
