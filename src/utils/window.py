"""Index-range arithmetic for the playback window."""

from __future__ import annotations

from src.models.results import Direction


def clamp_window_size(window_size: int | None, default: int = 10) -> int:
    """Return *window_size* (or *default* when ``None``) clamped to at least 1."""
    if window_size is None:
        window_size = default
    return max(1, int(window_size))


def compute_window(position: int, length: int, direction: Direction, window_size: int) -> tuple[int, int]:
    """Return the half-open index range ``[start, end)`` around *position*.

    The range always contains *position*.  Forward windows extend towards
    the end of the list, reverse windows towards the start; either is cut
    short at the list boundary instead of raising.

    >>> compute_window(3, 10, Direction.FORWARD, 3)
    (3, 6)
    >>> compute_window(3, 10, Direction.REVERSE, 3)
    (1, 4)
    """
    if not 0 <= position < length:
        msg = f"Position {position} outside list of length {length}"
        raise ValueError(msg)

    size = max(1, window_size)
    if direction is Direction.REVERSE:
        return max(0, position - (size - 1)), position + 1
    return position, min(length, position + size)
