import pytest

from src.planner.config import settings
from src.planner.models.domain import ReturnToDepot, Stop
from src.planner.services.capacity.metrics import (
    RouteMetrics,
    assess_capacity,
    compute_route_metrics,
    format_duration,
    get_load_status,
    get_slack_status,
)


@pytest.mark.parametrize(
    "load,expected",
    [(0, "ok"), (79.9, "ok"), (80, "tight"), (95, "tight"), (95.1, "overloaded"), (140, "overloaded")],
)
def test_load_status_bands(load, expected):
    assert get_load_status(load) == expected


@pytest.mark.parametrize(
    "slack,expected",
    [(120, "ok"), (31, "ok"), (30, "tight"), (15, "tight"), (14.9, "overloaded"), (0, "overloaded")],
)
def test_slack_status_bands(slack, expected):
    assert get_slack_status(slack) == expected


def test_thresholds_come_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "load_tight_percent", 50.0)

    assert get_load_status(60) == "tight"


def test_warn_on_insert_when_either_dimension_is_overloaded():
    relaxed = RouteMetrics(distance_km=10, travel_time_min=60, service_time_min=60, load_percent=40, slack_min=200, stop_count=3)
    packed = RouteMetrics(distance_km=10, travel_time_min=60, service_time_min=60, load_percent=70, slack_min=5, stop_count=3)

    assert assess_capacity(relaxed).warn_on_insert is False
    assessment = assess_capacity(packed)
    assert (assessment.load_status, assessment.slack_status) == ("ok", "overloaded")
    assert assessment.warn_on_insert is True


def test_route_metrics_from_stops():
    stops = [
        Stop(
            id="A",
            stop_order=1,
            distance_from_previous_km=10.0,
            duration_from_previous_minutes=30,
            estimated_arrival="08:30",
            estimated_departure="09:00",
        ),
        Stop(id="B", stop_order=2, distance_from_previous_km=15.0, duration_from_previous_minutes=30, service_duration_minutes=60),
        Stop(id="BRK", stop_order=3, stop_type="break", break_duration_minutes=30),
    ]

    metrics = compute_route_metrics(stops, "08:00", "16:00", ReturnToDepot(distance_km=5.0, duration_minutes=20))

    assert metrics.distance_km == 30.0
    assert metrics.travel_time_min == 80
    assert metrics.service_time_min == 90
    assert metrics.load_percent == 42
    assert metrics.slack_min == 310
    assert metrics.stop_count == 2


def test_empty_workday_yields_zero_load():
    metrics = compute_route_metrics([], "08:00", "08:00")

    assert metrics.load_percent == 0
    assert metrics.slack_min == 0


def test_format_duration():
    assert format_duration(45) == "45min"
    assert format_duration(120) == "2h"
    assert format_duration(65) == "1h05"
