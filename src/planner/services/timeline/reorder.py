"""Pure helpers for drag-and-drop stop reordering and insertion."""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ...models.domain import Stop


def renumber(stops: Sequence[Stop]) -> list[Stop]:
    """Return copies of ``stops`` with contiguous 1-indexed ``stop_order``."""
    return [replace(stop, stop_order=position) for position, stop in enumerate(stops, start=1)]


def _check_index(name: str, index: int, count: int) -> None:
    if not 0 <= index < count:
        raise ValueError(f"{name} {index} is out of range for {count} stop(s)")


def reorder_stops(stops: Sequence[Stop], from_index: int, to_index: int) -> list[Stop]:
    """Move the stop at ``from_index`` to ``to_index`` and renumber.

    The input sequence is not modified.
    """
    _check_index("from_index", from_index, len(stops))
    _check_index("to_index", to_index, len(stops))
    reordered = list(stops)
    moved = reordered.pop(from_index)
    reordered.insert(to_index, moved)
    return renumber(reordered)


def needs_scheduled_time_warning(stops: Sequence[Stop], from_index: int, to_index: int) -> Stop | None:
    """Return the moved stop when it has an agreed time, else None.

    Moving such a stop may make the promised time unreachable, so the caller
    has to confirm the move before committing it.
    """
    if from_index == to_index:
        return None
    if not 0 <= from_index < len(stops):
        return None
    stop = stops[from_index]
    if stop.scheduled_time_start:
        return stop
    return None


def clear_stale_break_times(stops: Sequence[Stop], moved: Stop | None) -> list[Stop]:
    """Drop recorded times on a moved break.

    Without this the builder would still see the break's old start and hide
    the idle time that opened up at its new position. The next recalculation
    fills in fresh values.
    """
    if moved is None or not moved.is_break:
        return list(stops)
    return [
        replace(stop, break_time_start=None, estimated_arrival=None, estimated_departure=None)
        if stop.id == moved.id
        else stop
        for stop in stops
    ]


def insert_stop_at_position(stops: Sequence[Stop], new_stop: Stop, insert_at: int) -> list[Stop]:
    """Insert ``new_stop`` at ``insert_at`` (clamped to the list bounds) and renumber."""
    index = max(0, min(insert_at, len(stops)))
    return renumber([*stops[:index], new_stop, *stops[index:]])


def resolve_drop_index(from_index: int, over_index: int, delta_y: float, count: int) -> int:
    """Infer the target index of a drag that ended over another stop.

    A drag that moved upward places the stop before the hovered one; a drag
    that moved downward (or not at all) places it after.
    """
    if delta_y < 0:
        to_index = over_index if from_index > over_index else over_index - 1
    else:
        to_index = over_index if from_index < over_index else over_index + 1
    return max(0, min(to_index, count - 1))
