"""Build a flat, typed timeline from a route's ordered stops.

The builder walks all stops in array order (customers and breaks alike) with a
running time cursor that starts at the depot departure. Travel legs are
emitted before customer stops, breaks are placed inline at their array
position, and a gap is emitted wherever the cursor is ahead of the next
stop's known arrival.

The output is rebuilt from scratch on every call; items are never patched.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ...models.domain import ReturnToDepot, Stop
from .clock import format_clock, normalise_clock, parse_clock
from .models import TimelineItem

# Absorbs rounding noise so exact-fit arrivals produce neither a gap nor a late flag.
GAP_THRESHOLD_MINUTES = 1
DEFAULT_BREAK_MINUTES = 30


def _depot(item_id: str, start: str | None, end: str | None) -> TimelineItem:
    return TimelineItem(type="depot", id=item_id, start_time=start, end_time=end, duration_minutes=0)


def _break_duration(stop: Stop, arrival: int | None, departure: int | None) -> int:
    if stop.break_duration_minutes is not None:
        return stop.break_duration_minutes
    if arrival is not None and departure is not None:
        return max(0, departure - arrival)
    return DEFAULT_BREAK_MINUTES


def _break_item(
    stop: Stop, cursor: int, arrival: int | None, departure: int | None
) -> tuple[TimelineItem, int]:
    # A recorded start earlier than the cursor is stale (left over from before
    # a reorder), so the break never starts before the crew is free.
    recorded = parse_clock(stop.break_time_start) if stop.break_time_start else arrival
    start = recorded if recorded is not None and recorded >= cursor else cursor
    end = start + _break_duration(stop, arrival, departure)
    item = TimelineItem(
        type="break",
        id=stop.id,
        start_time=format_clock(start),
        end_time=format_clock(end),
        duration_minutes=max(0, end - start),
        stop=replace(stop),
    )
    return item, end


def _stop_item(
    stop: Stop,
    cursor: int,
    arrival: int | None,
    departure: int | None,
    late_arrival_minutes: int | None,
    actual_arrival_time: str | None,
) -> tuple[TimelineItem, int]:
    start = arrival if arrival is not None else cursor
    end = departure if departure is not None else start

    agreed_start = parse_clock(stop.scheduled_time_start)
    agreed_end = parse_clock(stop.scheduled_time_end)
    has_window = agreed_start is not None and agreed_end is not None
    window_duration = agreed_end - agreed_start if has_window else None
    service = stop.service_duration_minutes
    is_flexible = (
        window_duration is not None
        and window_duration > 0
        and service is not None
        and 0 < service < window_duration
    )

    item = TimelineItem(
        type="stop",
        id=stop.id,
        start_time=format_clock(start),
        end_time=format_clock(end),
        duration_minutes=max(0, end - start),
        stop=replace(stop),
        late_arrival_minutes=late_arrival_minutes,
        actual_arrival_time=actual_arrival_time,
        agreed_window_start=normalise_clock(stop.scheduled_time_start) if has_window else None,
        agreed_window_end=normalise_clock(stop.scheduled_time_end) if has_window else None,
        agreed_window_duration_minutes=window_duration if is_flexible else None,
        needs_reschedule=stop.needs_reschedule or None,
    )
    return item, end


def build_timeline_items(
    stops: Sequence[Stop],
    workday_start: str,
    workday_end: str,
    return_to_depot: ReturnToDepot | None = None,
    depot_departure: str | None = None,
) -> list[TimelineItem]:
    """Convert ordered stops into depot/travel/stop/break/gap items.

    Args:
        stops: Route stops in visiting order. Not modified.
        workday_start: Workday start (HH:MM); the cursor origin unless
            ``depot_departure`` is given.
        workday_end: Workday end (HH:MM); where the closing depot sits when
            no return leg is known.
        return_to_depot: Optional final leg back to the depot.
        depot_departure: Optional actual departure time overriding the
            workday start.

    Returns:
        A new list of timeline items, always opened and closed by a depot item.
    """
    effective_start = depot_departure or workday_start
    items: list[TimelineItem] = [
        _depot("depot-start", normalise_clock(effective_start), normalise_clock(effective_start))
    ]

    if not stops:
        items.append(_depot("depot-end", normalise_clock(workday_end), normalise_clock(workday_end)))
        return items

    cursor = parse_clock(effective_start)
    if cursor is None:
        cursor = parse_clock(workday_start) or 0
    # Gap anchors count customer stops only; the insertion advisor ignores breaks.
    customer_count = 0

    for index, stop in enumerate(stops):
        arrival = parse_clock(stop.estimated_arrival)
        departure = parse_clock(stop.estimated_departure)

        if not stop.is_break:
            travel_duration = stop.duration_from_previous_minutes or 0
            travel_end = cursor + travel_duration
            items.append(
                TimelineItem(
                    type="travel",
                    id=f"travel-{index}",
                    start_time=format_clock(cursor),
                    end_time=format_clock(travel_end),
                    duration_minutes=travel_duration,
                    distance_km=stop.distance_from_previous_km,
                    destination_stop_id=stop.id,
                    override_travel_duration_minutes=stop.override_travel_duration_minutes,
                )
            )
            cursor = travel_end

        late_arrival_minutes = None
        actual_arrival_time = None
        agreed_start = parse_clock(stop.scheduled_time_start)
        if not stop.is_break and agreed_start is not None and cursor > agreed_start + GAP_THRESHOLD_MINUTES:
            late_arrival_minutes = cursor - agreed_start
            actual_arrival_time = format_clock(cursor)

        if stop.is_break:
            effective_arrival = arrival if arrival is not None and arrival > cursor else None
        else:
            effective_arrival = arrival

        if effective_arrival is not None and effective_arrival - cursor > GAP_THRESHOLD_MINUTES:
            items.append(
                TimelineItem(
                    type="gap",
                    id=f"gap-{index}",
                    start_time=format_clock(cursor),
                    end_time=format_clock(effective_arrival),
                    duration_minutes=effective_arrival - cursor,
                    insert_after_index=None if stop.is_break else customer_count - 1,
                )
            )
            cursor = effective_arrival

        if stop.is_break:
            item, cursor = _break_item(stop, cursor, arrival, departure)
        else:
            item, cursor = _stop_item(stop, cursor, arrival, departure, late_arrival_minutes, actual_arrival_time)
            customer_count += 1
        items.append(item)

    if return_to_depot is not None:
        return_end = cursor + return_to_depot.duration_minutes
        items.append(
            TimelineItem(
                type="travel",
                id="travel-return",
                start_time=format_clock(cursor),
                end_time=format_clock(return_end),
                duration_minutes=return_to_depot.duration_minutes,
                distance_km=return_to_depot.distance_km,
            )
        )
        cursor = return_end
        items.append(_depot("depot-end", format_clock(cursor), None))
    else:
        items.append(
            TimelineItem(
                type="travel",
                id="travel-return",
                start_time=format_clock(cursor),
                end_time=None,
                duration_minutes=0,
            )
        )
        items.append(_depot("depot-end", normalise_clock(workday_end), None))

    return items
