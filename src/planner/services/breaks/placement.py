"""Suggest where a rest break fits into a day's route.

Every position between customer stops is evaluated against the configured
break window, the cumulative-distance window and (optionally) the 4.5 hour
driving rule. A position counts as time-valid when the break can start
inside the window and still end before the next agreed visit.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ...models.domain import Stop
from ..timeline.clock import add_minutes, format_clock, parse_clock

DEFAULT_ROUTE_START_MINUTES = 8 * 60
DEFAULT_BREAK_EARLIEST_MINUTES = 11 * 60 + 30
DEFAULT_BREAK_LATEST_MINUTES = 13 * 60
DEFAULT_SERVICE_MINUTES = 30


@dataclass(slots=True)
class BreakSettings:
    break_enabled: bool = True
    break_duration_minutes: int = 30
    break_earliest_time: str = "11:30"
    break_latest_time: str = "13:00"
    break_min_km: float = 0.0
    break_max_km: float = 10_000.0


@dataclass(slots=True)
class BreakConstraintOptions:
    enforce_driving_break_rule: bool = False
    max_driving_minutes: int = 270
    required_break_minutes: int = 45


@dataclass(slots=True)
class BreakPosition:
    # 0-based insert index among customer stops
    position: int
    estimated_time: Optional[str]
    estimated_distance_km: Optional[float]
    warnings: List[str] = field(default_factory=list)


@dataclass(slots=True)
class _Candidate:
    position: int
    break_start: int
    gap_start: int
    gap_end: float
    chrono_fit: bool
    distance_km: float
    time_valid: bool
    km_valid: bool
    driving_valid: bool
    driving_minutes: int


def _km_distance_to_window(candidate: _Candidate, settings: BreakSettings) -> float:
    return min(
        abs(candidate.distance_km - settings.break_min_km),
        abs(candidate.distance_km - settings.break_max_km),
    )


def _time_distance_to_window(candidate: _Candidate, window_start: int, window_end: int) -> int:
    return min(abs(candidate.break_start - window_start), abs(candidate.break_start - window_end))


def _evaluate_positions(
    stops: Sequence[Stop],
    settings: BreakSettings,
    start_minutes: int,
    window_start: int,
    window_end: int,
    options: BreakConstraintOptions,
) -> list[_Candidate]:
    candidates: list[_Candidate] = []
    cursor = start_minutes
    cumulative_km = 0.0
    driving_minutes = 0

    for position in range(len(stops) + 1):
        gap_start = cursor
        gap_end: float = math.inf
        if position < len(stops):
            next_start = parse_clock(stops[position].scheduled_time_start)
            if next_start is not None:
                gap_end = next_start

        break_start = max(gap_start, window_start)
        break_end = break_start + settings.break_duration_minutes
        fits_in_gap = break_end <= gap_end
        candidates.append(
            _Candidate(
                position=position,
                break_start=break_start,
                gap_start=gap_start,
                gap_end=gap_end,
                chrono_fit=gap_start <= break_start < gap_end,
                distance_km=cumulative_km,
                time_valid=window_start <= break_start <= window_end and fits_in_gap,
                km_valid=settings.break_min_km <= cumulative_km <= settings.break_max_km,
                driving_valid=not options.enforce_driving_break_rule
                or driving_minutes <= options.max_driving_minutes,
                driving_minutes=driving_minutes,
            )
        )

        if position == len(stops):
            break
        stop = stops[position]
        driving_minutes += stop.duration_from_previous_minutes or 0
        cumulative_km += stop.distance_from_previous_km or 0.0

        end = parse_clock(stop.scheduled_time_end)
        if end is None:
            end = parse_clock(stop.estimated_departure)
        if end is not None and end > cursor:
            cursor = end
        else:
            cursor += stop.duration_from_previous_minutes or 0
            cursor += stop.service_duration_minutes or DEFAULT_SERVICE_MINUTES

    return candidates


def suggest_break_position(
    stops: Sequence[Stop],
    settings: BreakSettings,
    start_time: str = "08:00",
    options: BreakConstraintOptions | None = None,
) -> BreakPosition:
    """Pick the best break position among customer ``stops``.

    Preference order: a position satisfying every constraint; otherwise the
    time-valid position closest to the km window; otherwise the position whose
    break start is nearest the time window, favouring positions where the
    break falls chronologically inside the gap.
    """
    options = options or BreakConstraintOptions()
    customers = [stop for stop in stops if not stop.is_break]
    if not customers or not settings.break_enabled:
        return BreakPosition(position=0, estimated_time=None, estimated_distance_km=None)

    window_start = parse_clock(settings.break_earliest_time)
    if window_start is None:
        window_start = DEFAULT_BREAK_EARLIEST_MINUTES
    window_end = parse_clock(settings.break_latest_time)
    if window_end is None:
        window_end = DEFAULT_BREAK_LATEST_MINUTES
    start_minutes = parse_clock(start_time)
    if start_minutes is None:
        start_minutes = DEFAULT_ROUTE_START_MINUTES

    candidates = _evaluate_positions(customers, settings, start_minutes, window_start, window_end, options)
    km_warning = f"Break is outside the distance window ({settings.break_min_km:g}-{settings.break_max_km:g} km)"
    warnings: list[str] = []

    best = next((c for c in candidates if c.time_valid and c.km_valid and c.driving_valid), None)
    if best is None:
        time_valid = [c for c in candidates if c.time_valid and c.driving_valid]
        if time_valid:
            best = time_valid[0]
            for candidate in time_valid[1:]:
                if _km_distance_to_window(candidate, settings) < _km_distance_to_window(best, settings):
                    best = candidate
            warnings.append(km_warning)
        else:
            pool = [c for c in candidates if c.driving_valid] or candidates
            best = pool[0]
            for candidate in pool[1:]:
                if candidate.chrono_fit != best.chrono_fit:
                    if candidate.chrono_fit:
                        best = candidate
                    continue
                if _time_distance_to_window(candidate, window_start, window_end) < _time_distance_to_window(
                    best, window_start, window_end
                ):
                    best = candidate
            warnings.append(
                f"Break is outside the time window ({settings.break_earliest_time}-{settings.break_latest_time})"
            )
            if not best.km_valid:
                warnings.append(km_warning)

    if options.enforce_driving_break_rule:
        if best.driving_minutes > options.max_driving_minutes:
            warnings.append(
                f"Break comes too late for the 4.5 h driving rule "
                f"(about {best.driving_minutes} min of driving before it)"
            )
        if settings.break_duration_minutes < options.required_break_minutes:
            warnings.append(f"Legal minimum break is {options.required_break_minutes} minutes")

    return BreakPosition(
        position=best.position,
        estimated_time=format_clock(best.break_start),
        estimated_distance_km=best.distance_km,
        warnings=warnings,
    )


def create_break_stop(
    stop_order: int,
    settings: BreakSettings,
    estimated_time: str | None,
    *,
    floating: bool = True,
    stop_id: str | None = None,
) -> Stop:
    """Create a break stop pinned at ``estimated_time``.

    Floating breaks leave ``break_time_start`` empty so the next insertion may
    move them; the estimated and agreed times still place the break on the
    timeline before the router recalculates.
    """
    break_end = add_minutes(estimated_time, settings.break_duration_minutes)
    return Stop(
        id=stop_id or f"break-{uuid.uuid4().hex[:12]}",
        stop_order=stop_order,
        stop_type="break",
        customer_name="Break",
        address="",
        estimated_arrival=estimated_time,
        estimated_departure=break_end,
        scheduled_time_start=estimated_time,
        scheduled_time_end=break_end,
        break_duration_minutes=settings.break_duration_minutes,
        break_time_start=None if floating else estimated_time,
    )
