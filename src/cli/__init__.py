"""CLI tools for the LyricQueue engine.

- ``python -m src.cli register <artist_id> <external_id>`` -- register an artist
- ``python -m src.cli populate <artist_id>`` -- fetch/refresh its song catalog
- ``python -m src.cli scrape <artist_id> <song_id>...`` -- scrape lyrics
- ``python -m src.cli load <artist_id> <cursor_song_id>`` -- load a playback window
- ``python -m src.cli summary <artist_id>`` -- catalog and cache progress
- ``python -m src.cli repair <artist_id> [--dry-run]`` -- repair the cached song list

All commands use argparse and print JSON results to stdout.
"""
