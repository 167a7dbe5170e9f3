"""LyricQueue FastAPI application entry point.

Wires together the providers, services, and routes via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``,
configures structured logging, and exposes the engine under ``/api/v1``.

``build_components`` is shared with the CLI so both entry points assemble
the engine the same way.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import build_settings
from src.config.settings import Settings
from src.interfaces.document_store import IDocumentStore
from src.providers.catalog.genius_catalog_provider import GeniusCatalogProvider
from src.providers.lyrics.genius_lyrics_provider import GeniusLyricsProvider
from src.providers.store.memory_store import MemoryDocumentStore
from src.providers.store.sqlite_store import SQLiteDocumentStore
from src.services.artist_image_service import ArtistImageService
from src.services.cache_repair_service import CacheRepairService
from src.services.catalog_populator import CatalogPopulator
from src.services.library_service import LibraryService
from src.services.lyrics_scraper import LyricsScraper
from src.services.queue_loader import QueueLoader
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_VERSION = "0.1.0"

settings = build_settings()
configure_logging(log_level=settings.log_level, json_output=settings.app_env == "production")
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component construction
# ---------------------------------------------------------------------------


def _build_store(app_settings: Settings) -> IDocumentStore:
    backend = app_settings.store_backend.lower()
    if backend == "memory":
        return MemoryDocumentStore()
    if backend == "sqlite":
        return SQLiteDocumentStore(db_path=app_settings.store_db_path)
    raise ConfigurationError(message=f"Unknown STORE_BACKEND {app_settings.store_backend!r}")


def build_http_client(app_settings: Settings) -> httpx.AsyncClient:
    """Return the shared HTTP client; Genius song pages may redirect."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(app_settings.request_timeout),
        follow_redirects=True,
    )


def _build_all(
    app_settings: Settings,
    store: IDocumentStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    *store* and *http_client* may be supplied to swap in test doubles.
    """
    # -- Shared resources --
    http_client = http_client or build_http_client(app_settings)
    store = store or _build_store(app_settings)

    # -- External sources --
    catalog = GeniusCatalogProvider(
        api_key=app_settings.genius_api_key,
        base_url=app_settings.genius_api_base_url,
        http_client=http_client,
    )
    lyrics = GeniusLyricsProvider(http_client=http_client)

    # -- Services --
    image_service = None
    if app_settings.discover_artist_images:
        image_service = ArtistImageService(
            catalog=catalog,
            store=store,
            scan_limit=app_settings.image_scan_limit,
        )

    populator = CatalogPopulator(
        catalog=catalog,
        store=store,
        image_service=image_service,
        page_size=app_settings.catalog_page_size,
        max_songs=app_settings.catalog_max_songs,
        refresh_days=app_settings.catalog_refresh_days,
        page_delay=app_settings.catalog_page_delay,
    )
    scraper = LyricsScraper(
        lyrics=lyrics,
        store=store,
        max_attempts=app_settings.max_scrape_attempts,
        scrape_delay=app_settings.scrape_delay,
        fetch_timeout=app_settings.request_timeout,
    )
    queue_loader = QueueLoader(
        store=store,
        scraper=scraper,
        default_window_size=app_settings.default_window_size,
    )
    library = LibraryService(store=store, refresh_days=app_settings.catalog_refresh_days)
    repair = CacheRepairService(store=store, scraper=scraper)

    provider_registry = {
        "catalog": catalog.is_available(),
        "lyrics": True,
        "store": store.get_provider_name(),
    }

    return {
        "http_client": http_client,
        "document_store": store,
        "catalog_provider": catalog,
        "lyrics_provider": lyrics,
        "catalog_populator": populator,
        "lyrics_scraper": scraper,
        "queue_loader": queue_loader,
        "library_service": library,
        "cache_repair_service": repair,
        "provider_registry": provider_registry,
    }


def build_components(app_settings: Settings | None = None, **overrides: Any) -> dict[str, Any]:
    """Public wrapper around :func:`_build_all` for scripts and the CLI."""
    return _build_all(app_settings or settings, **overrides)


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = getattr(application.state, "components", None) or _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["document_store"].initialize()

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        store=components["document_store"].get_provider_name(),
        genius_configured=components["provider_registry"]["catalog"],
    )

    yield

    # -- Shutdown: let image discovery finish, then close the shared client --
    populator: CatalogPopulator = components["catalog_populator"]
    await populator.drain_background_tasks()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(components: dict[str, Any] | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Pre-built *components* (see :func:`build_components`) are used instead
    of constructing fresh ones at startup; tests pass them in.
    """
    application = FastAPI(
        title="LyricQueue API",
        version=_VERSION,
        description=(
            "Populate an artist's song catalog from Genius, cache lyrics with "
            "bounded retries, and serve a sliding playback window of songs "
            "with lyrics pre-fetched around the cursor."
        ),
        lifespan=_lifespan,
    )
    if components is not None:
        application.state.components = components

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
