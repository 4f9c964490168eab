"""Quick gap placement: drop a stop or break into idle time without a recalculation.

The placement is provisional. Travel legs are cleared and customer stops are
flagged ``needs_reschedule`` until the real insertion cost is confirmed by a
full recalculation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Sequence

from ...models.domain import Stop
from .builder import DEFAULT_BREAK_MINUTES
from .clock import format_clock, parse_clock
from .models import QuickPlacement, TimelineItem
from .reorder import renumber
from .snapping import DEFAULT_GRID_MINUTES, snap_to_grid

DEFAULT_SERVICE_MINUTES = 30

logger = logging.getLogger(__name__)


def pointer_fraction(pointer_y: float, rect_top: float, rect_height: float) -> float:
    """Map a pointer position to a 0..1 fraction of the gap's rendered height."""
    if rect_height <= 0:
        return 0.5
    return max(0.0, min(1.0, (pointer_y - rect_top) / rect_height))


def dropped_item_duration(stop: Stop) -> int:
    if stop.is_break:
        return stop.break_duration_minutes if stop.break_duration_minutes is not None else DEFAULT_BREAK_MINUTES
    if stop.service_duration_minutes is not None:
        return stop.service_duration_minutes
    if stop.override_service_duration_minutes is not None:
        return stop.override_service_duration_minutes
    return DEFAULT_SERVICE_MINUTES


def _gap_stop_index(gap_id: str) -> int | None:
    try:
        return int(gap_id.removeprefix("gap-"))
    except ValueError:
        return None


def _find_anchor(stops: Sequence[Stop], start_index: int | None, dropped_id: str) -> Stop | None:
    # The gap precedes stops[start_index]; skip the dragged stop itself.
    if start_index is None:
        return None
    for stop in stops[max(0, start_index):]:
        if stop.id != dropped_id:
            return stop
    return None


def quick_place_in_gap(
    stops: Sequence[Stop],
    items: Sequence[TimelineItem],
    stop_id: str,
    gap_id: str,
    fraction: float,
    grid: int = DEFAULT_GRID_MINUTES,
) -> QuickPlacement | None:
    """Place ``stop_id`` into the gap ``gap_id`` at a grid-snapped time.

    Args:
        stops: Current route stops. Not modified.
        items: Timeline items built from ``stops``.
        stop_id: Id of the dropped stop or break.
        gap_id: Id of the gap item it was dropped on.
        fraction: Pointer position within the gap, 0 (top) to 1 (bottom).
        grid: Snap grid in minutes.

    Returns:
        The new stop list with the snapped interval, or None when the drop
        cannot be applied (unknown stop or gap, or no slot fits).
    """
    dropped = next((stop for stop in stops if stop.id == stop_id), None)
    if dropped is None:
        logger.debug(f"Quick placement ignored: stop '{stop_id}' not found")
        return None

    gap = next((item for item in items if item.id == gap_id and item.type == "gap"), None)
    if gap is None:
        logger.debug(f"Quick placement ignored: gap '{gap_id}' not found")
        return None
    gap_start = parse_clock(gap.start_time)
    gap_end = parse_clock(gap.end_time)
    if gap_start is None or gap_end is None:
        return None

    duration = dropped_item_duration(dropped)
    clamped_fraction = max(0.0, min(1.0, fraction))
    raw_start = gap_start + math.floor(clamped_fraction * (gap_end - gap_start) + 0.5)
    snapped_start = snap_to_grid(raw_start, duration, gap_start, gap_end, grid)
    if snapped_start is None:
        logger.info(
            f"Quick placement rejected: {duration} min item does not fit gap "
            f"{gap.start_time}-{gap.end_time} on a {grid} min grid"
        )
        return None

    start_time = format_clock(snapped_start)
    end_time = format_clock(snapped_start + duration)

    anchor = _find_anchor(stops, _gap_stop_index(gap_id), dropped.id)
    remaining = [stop for stop in stops if stop.id != dropped.id]
    insertion_point = len(remaining)
    if anchor is not None:
        insertion_point = next(i for i, stop in enumerate(remaining) if stop.id == anchor.id)

    if dropped.is_break:
        placed = replace(
            dropped,
            break_time_start=start_time,
            estimated_arrival=start_time,
            estimated_departure=end_time,
            duration_from_previous_minutes=None,
            distance_from_previous_km=None,
        )
    else:
        placed = replace(
            dropped,
            estimated_arrival=start_time,
            estimated_departure=end_time,
            scheduled_time_start=start_time,
            scheduled_time_end=end_time,
            needs_reschedule=True,
            duration_from_previous_minutes=None,
            distance_from_previous_km=None,
        )

    remaining.insert(insertion_point, placed)
    return QuickPlacement(
        stops=renumber(remaining),
        stop_id=placed.id,
        start_time=start_time,
        end_time=end_time,
    )
