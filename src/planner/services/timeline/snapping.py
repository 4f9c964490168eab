"""Snap drop positions to a fixed time grid inside an idle gap."""

from __future__ import annotations

import math

from .clock import LAST_MINUTE_OF_DAY

DEFAULT_GRID_MINUTES = 15


def snap_to_grid(
    raw_minutes: int,
    item_duration: int,
    gap_start: int,
    gap_end: int,
    grid: int = DEFAULT_GRID_MINUTES,
) -> int | None:
    """Snap ``raw_minutes`` to the nearest grid line where the item fits the gap.

    Args:
        raw_minutes: Raw drop position in minutes from midnight.
        item_duration: Duration of the item being placed.
        gap_start: Gap start in minutes from midnight (inclusive).
        gap_end: Gap end in minutes from midnight; capped at 23:59.
        grid: Grid step in minutes.

    Returns:
        The snapped start in minutes, or None when no grid line inside the gap
        leaves room for the whole item.
    """
    earliest = math.ceil(gap_start / grid) * grid
    # Placed items end by 23:59.
    latest = math.floor((min(gap_end, LAST_MINUTE_OF_DAY) - item_duration) / grid) * grid
    if earliest > latest:
        return None

    # Halves round up so a drop exactly between two lines favours the later one.
    snapped = math.floor(raw_minutes / grid + 0.5) * grid
    return max(earliest, min(latest, snapped))
