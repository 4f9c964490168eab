from src.planner.models.domain import Stop
from src.planner.services.breaks.placement import (
    BreakConstraintOptions,
    BreakSettings,
    create_break_stop,
    suggest_break_position,
)


def _day() -> list[Stop]:
    return [
        Stop(
            id="A",
            stop_order=1,
            scheduled_time_start="08:30",
            estimated_departure="10:00",
            distance_from_previous_km=20.0,
            duration_from_previous_minutes=30,
        ),
        Stop(
            id="B",
            stop_order=2,
            scheduled_time_start="10:30",
            estimated_departure="12:00",
            distance_from_previous_km=30.0,
            duration_from_previous_minutes=30,
        ),
        Stop(
            id="C",
            stop_order=3,
            scheduled_time_start="13:00",
            estimated_departure="14:00",
            distance_from_previous_km=10.0,
            duration_from_previous_minutes=20,
        ),
    ]


def test_break_goes_into_first_position_that_satisfies_everything():
    suggestion = suggest_break_position(_day(), BreakSettings())

    assert suggestion.position == 2
    assert suggestion.estimated_time == "12:00"
    assert suggestion.estimated_distance_km == 50.0
    assert suggestion.warnings == []


def test_km_window_miss_falls_back_to_time_valid_position_with_warning():
    suggestion = suggest_break_position(_day(), BreakSettings(break_min_km=60.0))

    assert suggestion.position == 2
    assert len(suggestion.warnings) == 1
    assert "distance window" in suggestion.warnings[0]


def test_breaks_between_existing_breaks_are_ignored():
    stops = _day()
    stops.insert(1, Stop(id="OLD", stop_order=2, stop_type="break", estimated_departure="23:00"))

    suggestion = suggest_break_position(stops, BreakSettings())

    assert suggestion.position == 2


def test_driving_rule_reports_legal_minimum():
    suggestion = suggest_break_position(
        _day(),
        BreakSettings(),
        options=BreakConstraintOptions(enforce_driving_break_rule=True, max_driving_minutes=45),
    )

    assert suggestion.position in (0, 1)
    assert any("time window" in warning for warning in suggestion.warnings)
    assert "Legal minimum break is 45 minutes" in suggestion.warnings


def test_disabled_or_empty_route_gives_no_time():
    assert suggest_break_position(_day(), BreakSettings(break_enabled=False)).estimated_time is None
    empty = suggest_break_position([], BreakSettings())
    assert (empty.position, empty.estimated_time) == (0, None)


def test_create_floating_break_stop():
    stop = create_break_stop(3, BreakSettings(break_duration_minutes=45), "12:00")

    assert stop.is_break
    assert stop.id.startswith("break-")
    assert stop.stop_order == 3
    assert (stop.estimated_arrival, stop.estimated_departure) == ("12:00", "12:45")
    assert stop.break_time_start is None
    assert stop.break_duration_minutes == 45


def test_create_pinned_break_stop_keeps_given_id():
    stop = create_break_stop(1, BreakSettings(), "11:30", floating=False, stop_id="lunch")

    assert stop.id == "lunch"
    assert stop.break_time_start == "11:30"
