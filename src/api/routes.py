"""FastAPI API routes for the LyricQueue engine.

Provides REST endpoints for artist registration, catalog population,
lyrics scraping, playback-window loading, cache repair and health checks.
Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

Endpoint                              Method  Description
-------------------------------------------------------------------------
/api/v1/artists                       POST    Register an artist
/api/v1/artists/{id}                  GET     Catalog and cache summary
/api/v1/artists/{id}/populate         POST    Fetch/refresh the song catalog
/api/v1/artists/{id}/scrape           POST    Scrape lyrics for given songs
/api/v1/artists/{id}/window           POST    Load the window around a cursor
/api/v1/artists/{id}/repair           POST    Re-validate cached song ids
/api/v1/songs/{id}                    GET     A single song document
/api/v1/health                        GET     Health check + provider status

Engine errors are not caught here; ErrorHandlingMiddleware maps them to
status codes.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from src.api.schemas import (
    ErrorResponse,
    HealthResponse,
    RegisterArtistRequest,
    RepairRequest,
    ScrapeRequest,
    WindowRequest,
)
from src.models.catalog import Artist, Song
from src.models.results import (
    ArtistSummary,
    PopulateResult,
    RepairReport,
    ScrapeResult,
    WindowResult,
)
from src.services.cache_repair_service import CacheRepairService
from src.services.catalog_populator import CatalogPopulator
from src.services.library_service import LibraryService
from src.services.lyrics_scraper import LyricsScraper
from src.services.queue_loader import QueueLoader

router = APIRouter(prefix="/api/v1")

_VERSION = "0.1.0"
_NOT_FOUND = {404: {"model": ErrorResponse}}
_UPSTREAM = {404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_library(request: Request) -> LibraryService:
    return request.app.state.library_service


def _get_populator(request: Request) -> CatalogPopulator:
    return request.app.state.catalog_populator


def _get_scraper(request: Request) -> LyricsScraper:
    return request.app.state.lyrics_scraper


def _get_queue_loader(request: Request) -> QueueLoader:
    return request.app.state.queue_loader


def _get_repair_service(request: Request) -> CacheRepairService:
    return request.app.state.cache_repair_service


LibraryDep = Annotated[LibraryService, Depends(_get_library)]
PopulatorDep = Annotated[CatalogPopulator, Depends(_get_populator)]
ScraperDep = Annotated[LyricsScraper, Depends(_get_scraper)]
QueueLoaderDep = Annotated[QueueLoader, Depends(_get_queue_loader)]
RepairDep = Annotated[CacheRepairService, Depends(_get_repair_service)]


# ---------------------------------------------------------------------------
# Artists
# ---------------------------------------------------------------------------


@router.post(
    "/artists",
    response_model=Artist,
    status_code=201,
    summary="Register an artist",
)
async def register_artist(body: RegisterArtistRequest, library: LibraryDep) -> Artist:
    """Create the artist if absent; an existing artist is returned unchanged."""
    return await library.register_artist(body.artist_id, body.external_id, body.name)


@router.get(
    "/artists/{artist_id}",
    response_model=ArtistSummary,
    responses=_NOT_FOUND,
    summary="Artist catalog and cache summary",
)
async def get_artist(artist_id: str, library: LibraryDep) -> ArtistSummary:
    return await library.get_artist_summary(artist_id)


@router.post(
    "/artists/{artist_id}/populate",
    response_model=PopulateResult,
    responses=_UPSTREAM,
    summary="Fetch or refresh the artist's song catalog",
)
async def populate_artist(artist_id: str, populator: PopulatorDep) -> PopulateResult:
    return await populator.populate_catalog(artist_id)


@router.post(
    "/artists/{artist_id}/scrape",
    response_model=ScrapeResult,
    responses=_NOT_FOUND,
    summary="Scrape lyrics for specific songs",
)
async def scrape_songs(artist_id: str, body: ScrapeRequest, scraper: ScraperDep) -> ScrapeResult:
    """Per-song failures are returned in the body, not as an error status."""
    return await scraper.scrape_lyrics(artist_id, body.song_ids)


@router.post(
    "/artists/{artist_id}/window",
    response_model=WindowResult,
    responses=_NOT_FOUND,
    summary="Load the playback window around a cursor song",
)
async def load_window(artist_id: str, body: WindowRequest, loader: QueueLoaderDep) -> WindowResult:
    return await loader.load_window(
        artist_id,
        body.cursor_song_id,
        direction=body.direction,
        window_size=body.window_size,
    )


@router.post(
    "/artists/{artist_id}/repair",
    response_model=RepairReport,
    responses=_NOT_FOUND,
    summary="Re-validate and repair the artist's cached song list",
)
async def repair_artist(
    artist_id: str, repair: RepairDep, body: RepairRequest | None = None
) -> RepairReport:
    dry_run = body.dry_run if body is not None else False
    return await repair.repair_artist(artist_id, dry_run=dry_run)


# ---------------------------------------------------------------------------
# Songs
# ---------------------------------------------------------------------------


@router.get(
    "/songs/{song_id}",
    response_model=Song,
    responses=_NOT_FOUND,
    summary="A single song with its lyrics state",
)
async def get_song(song_id: str, library: LibraryDep) -> Song:
    return await library.get_song(song_id)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    status = "healthy" if providers.get("catalog", False) else "degraded"
    return HealthResponse(status=status, version=_VERSION, providers=providers)
