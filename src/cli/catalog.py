"""Operator CLI for the catalog, lyrics cache and playback window.

Usage::

    # Register an artist under a stable key (Genius artist id 1421)
    python -m src.cli register kendrick-lamar 1421 --name "Kendrick Lamar"

    # Fetch or refresh the song catalog
    python -m src.cli populate kendrick-lamar

    # Scrape lyrics for specific songs
    python -m src.cli scrape kendrick-lamar 90475 3039923

    # Load 5 songs before the cursor
    python -m src.cli load kendrick-lamar 3039923 --reverse --size 5

    # Show progress, then repair drifted cache entries
    python -m src.cli summary kendrick-lamar
    python -m src.cli repair kendrick-lamar --dry-run

Results are printed as JSON.  Engine errors (unknown artist, unreachable
source) print a message to stderr and exit with status 1.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

import httpx
from pydantic import BaseModel

from src.models.results import Direction
from src.utils.errors import LyricQueueError

# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_register(args: argparse.Namespace, components: dict[str, Any]) -> BaseModel:
    return await components["library_service"].register_artist(
        args.artist_id, args.external_id, args.name
    )


async def _handle_populate(args: argparse.Namespace, components: dict[str, Any]) -> BaseModel:
    result = await components["catalog_populator"].populate_catalog(args.artist_id)
    await components["catalog_populator"].drain_background_tasks()
    return result


async def _handle_scrape(args: argparse.Namespace, components: dict[str, Any]) -> BaseModel:
    return await components["lyrics_scraper"].scrape_lyrics(args.artist_id, args.song_ids)


async def _handle_load(args: argparse.Namespace, components: dict[str, Any]) -> BaseModel:
    direction = Direction.REVERSE if args.reverse else Direction.FORWARD
    return await components["queue_loader"].load_window(
        args.artist_id, args.cursor_song_id, direction=direction, window_size=args.size
    )


async def _handle_summary(args: argparse.Namespace, components: dict[str, Any]) -> BaseModel:
    return await components["library_service"].get_artist_summary(args.artist_id)


async def _handle_repair(args: argparse.Namespace, components: dict[str, Any]) -> BaseModel:
    return await components["cache_repair_service"].repair_artist(
        args.artist_id, dry_run=args.dry_run
    )


_HANDLERS = {
    "register": _handle_register,
    "populate": _handle_populate,
    "scrape": _handle_scrape,
    "load": _handle_load,
    "summary": _handle_summary,
    "repair": _handle_repair,
}


async def run_command(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Run the subcommand in *args* against pre-built *components*."""
    await components["document_store"].initialize()
    try:
        result = await _HANDLERS[args.command](args, components)
    except LyricQueueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(result.model_dump_json(indent=2, by_alias=True))
    return 0


async def _run(args: argparse.Namespace) -> int:
    # Deferred: importing src.main builds settings and the FastAPI app.
    from src.main import build_components

    components = build_components()
    client: httpx.AsyncClient = components["http_client"]
    try:
        return await run_command(args, components)
    finally:
        await client.aclose()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the LyricQueue CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="Manage artist catalogs, the lyrics cache and playback windows.",
    )
    subparsers = parser.add_subparsers(dest="command", help="LyricQueue commands")

    # -- register --
    register_parser = subparsers.add_parser("register", help="Register an artist")
    register_parser.add_argument("artist_id", help="Stable artist key")
    register_parser.add_argument("external_id", help="Genius artist id")
    register_parser.add_argument("--name", default=None, help="Display name")

    # -- populate --
    populate_parser = subparsers.add_parser("populate", help="Fetch or refresh the song catalog")
    populate_parser.add_argument("artist_id")

    # -- scrape --
    scrape_parser = subparsers.add_parser("scrape", help="Scrape lyrics for specific songs")
    scrape_parser.add_argument("artist_id")
    scrape_parser.add_argument("song_ids", nargs="+", help="Song ids to scrape")

    # -- load --
    load_parser = subparsers.add_parser("load", help="Load the window around a cursor song")
    load_parser.add_argument("artist_id")
    load_parser.add_argument("cursor_song_id")
    load_parser.add_argument(
        "--reverse", action="store_true", help="Extend the window towards earlier songs"
    )
    load_parser.add_argument(
        "--size", type=int, default=None, help="Window size (default: from settings)"
    )

    # -- summary --
    summary_parser = subparsers.add_parser("summary", help="Show catalog and cache progress")
    summary_parser.add_argument("artist_id")

    # -- repair --
    repair_parser = subparsers.add_parser("repair", help="Repair the cached song list")
    repair_parser.add_argument("artist_id")
    repair_parser.add_argument(
        "--dry-run", action="store_true", help="Report invalid entries without changing them"
    )

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for LyricQueue."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
