"""Route capacity metrics and their ok/tight/overloaded classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

from ...config import settings
from ...models.domain import ReturnToDepot, Stop
from ..timeline.builder import DEFAULT_BREAK_MINUTES
from ..timeline.clock import parse_clock

CapacityStatus = Literal["ok", "tight", "overloaded"]

DEFAULT_SERVICE_MINUTES = 30


@dataclass(slots=True)
class RouteMetrics:
    distance_km: float
    travel_time_min: float
    service_time_min: float
    load_percent: float
    slack_min: float
    stop_count: int


@dataclass(slots=True)
class CapacityAssessment:
    load_status: CapacityStatus
    slack_status: CapacityStatus
    warn_on_insert: bool


def get_load_status(load_percent: float) -> CapacityStatus:
    if load_percent < settings.load_tight_percent:
        return "ok"
    if load_percent <= settings.load_overloaded_percent:
        return "tight"
    return "overloaded"


def get_slack_status(slack_min: float) -> CapacityStatus:
    if slack_min > settings.slack_ok_minutes:
        return "ok"
    if slack_min >= settings.slack_tight_minutes:
        return "tight"
    return "overloaded"


def assess_capacity(metrics: RouteMetrics) -> CapacityAssessment:
    load_status = get_load_status(metrics.load_percent)
    slack_status = get_slack_status(metrics.slack_min)
    return CapacityAssessment(
        load_status=load_status,
        slack_status=slack_status,
        warn_on_insert="overloaded" in (load_status, slack_status),
    )


def _service_minutes(stop: Stop) -> int:
    arrival = parse_clock(stop.estimated_arrival)
    departure = parse_clock(stop.estimated_departure)
    if arrival is not None and departure is not None:
        return max(0, departure - arrival)
    if stop.service_duration_minutes is not None:
        return stop.service_duration_minutes
    return DEFAULT_SERVICE_MINUTES


def compute_route_metrics(
    stops: Sequence[Stop],
    workday_start: str,
    workday_end: str,
    return_to_depot: ReturnToDepot | None = None,
) -> RouteMetrics:
    """Derive aggregate metrics for a single day's route.

    Load counts travel, service and breaks against the workday length; slack is
    the workday left over after travel and service.
    """
    start = parse_clock(workday_start)
    end = parse_clock(workday_end)
    workday_minutes = max(0, end - start) if start is not None and end is not None else 0

    distance_km = sum(stop.distance_from_previous_km or 0.0 for stop in stops)
    travel_min = sum(stop.duration_from_previous_minutes or 0 for stop in stops)
    if return_to_depot is not None:
        distance_km += return_to_depot.distance_km
        travel_min += return_to_depot.duration_minutes

    customers = [stop for stop in stops if not stop.is_break]
    service_min = sum(_service_minutes(stop) for stop in customers)
    break_min = sum(
        stop.break_duration_minutes if stop.break_duration_minutes is not None else DEFAULT_BREAK_MINUTES
        for stop in stops
        if stop.is_break
    )

    busy_min = travel_min + service_min + break_min
    load_percent = round(busy_min / workday_minutes * 100) if workday_minutes else 0
    return RouteMetrics(
        distance_km=distance_km,
        travel_time_min=travel_min,
        service_time_min=service_min,
        load_percent=load_percent,
        slack_min=max(0, workday_minutes - (travel_min + service_min)),
        stop_count=len(customers),
    )


def format_duration(minutes: float) -> str:
    if minutes < 60:
        return f"{round(minutes)}min"
    hours, mins = divmod(int(round(minutes)), 60)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h{mins:02d}"
