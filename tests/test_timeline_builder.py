from src.planner.models.domain import ReturnToDepot, Stop
from src.planner.services.timeline.builder import build_timeline_items
from src.planner.services.timeline.clock import parse_clock


def _stop(sid: str, order: int, **kwargs) -> Stop:
    return Stop(id=sid, stop_order=order, customer_name=f"Customer {sid}", **kwargs)


def _break(sid: str, order: int, **kwargs) -> Stop:
    return Stop(id=sid, stop_order=order, stop_type="break", customer_name="Break", **kwargs)


def _types(items):
    return [item.type for item in items]


def test_empty_route_has_only_depot_items():
    items = build_timeline_items([], "08:00", "16:00")

    assert _types(items) == ["depot", "depot"]
    assert (items[0].start_time, items[0].end_time) == ("08:00", "08:00")
    assert (items[1].start_time, items[1].end_time) == ("16:00", "16:00")


def test_single_stop_with_exact_travel_has_no_gap():
    stops = [_stop("A", 1, duration_from_previous_minutes=25, estimated_arrival="08:25", estimated_departure="08:55")]

    items = build_timeline_items(stops, "08:00", "16:00")

    assert _types(items) == ["depot", "travel", "stop", "travel", "depot"]
    travel = items[1]
    assert (travel.start_time, travel.end_time, travel.duration_minutes) == ("08:00", "08:25", 25)
    assert travel.destination_stop_id == "A"
    assert items[2].start_time == "08:25"
    assert items[3].id == "travel-return"
    assert items[3].end_time is None
    assert items[4].start_time == "16:00"


def test_arrival_within_rounding_tolerance_is_not_a_gap():
    stops = [_stop("A", 1, duration_from_previous_minutes=25, estimated_arrival="08:26", estimated_departure="08:56")]

    items = build_timeline_items(stops, "08:00", "16:00")

    assert "gap" not in _types(items)


def test_idle_time_before_known_arrival_becomes_gap_anchored_after_previous_customer():
    stops = [
        _stop("A", 1, duration_from_previous_minutes=30, estimated_arrival="08:30", estimated_departure="09:00"),
        _stop("B", 2, duration_from_previous_minutes=15, estimated_arrival="10:30", estimated_departure="11:00"),
    ]

    items = build_timeline_items(stops, "08:00", "16:00")

    gaps = [item for item in items if item.type == "gap"]
    assert len(gaps) == 1
    gap = gaps[0]
    assert gap.id == "gap-1"
    assert (gap.start_time, gap.end_time, gap.duration_minutes) == ("09:15", "10:30", 75)
    assert gap.insert_after_index == 0
    assert _types(items) == ["depot", "travel", "stop", "travel", "gap", "stop", "travel", "depot"]


def test_late_arrival_against_agreed_time_is_flagged():
    stops = [_stop("A", 1, duration_from_previous_minutes=77, scheduled_time_start="09:00", scheduled_time_end="10:00")]

    items = build_timeline_items(stops, "08:00", "16:00")

    stop_item = next(item for item in items if item.type == "stop")
    assert stop_item.late_arrival_minutes == 17
    assert stop_item.actual_arrival_time == "09:17"
    assert stop_item.agreed_window_start == "09:00"
    assert stop_item.agreed_window_end == "10:00"


def test_flexible_agreed_window_exposes_its_duration():
    stops = [
        _stop(
            "A",
            1,
            estimated_arrival="09:00",
            estimated_departure="09:30",
            scheduled_time_start="09:00:00",
            scheduled_time_end="11:00:00",
            service_duration_minutes=30,
        )
    ]

    stop_item = next(item for item in build_timeline_items(stops, "08:00", "16:00") if item.type == "stop")

    assert stop_item.agreed_window_start == "09:00"
    assert stop_item.agreed_window_duration_minutes == 120
    assert stop_item.late_arrival_minutes is None


def test_stale_break_start_is_pulled_forward_to_cursor():
    stops = [
        _stop("A", 1, duration_from_previous_minutes=0, estimated_arrival="08:00", estimated_departure="09:00"),
        _break("BRK", 2, break_time_start="08:30", break_duration_minutes=30),
    ]

    items = build_timeline_items(stops, "08:00", "16:00")

    assert "gap" not in _types(items)
    brk = next(item for item in items if item.type == "break")
    assert (brk.start_time, brk.end_time, brk.duration_minutes) == ("09:00", "09:30", 30)


def test_break_arriving_later_gets_an_unanchored_gap_and_no_travel():
    stops = [
        _stop("A", 1, duration_from_previous_minutes=0, estimated_arrival="08:00", estimated_departure="09:00"),
        _break("BRK", 2, estimated_arrival="10:00", estimated_departure="10:30"),
    ]

    items = build_timeline_items(stops, "08:00", "16:00")

    assert _types(items) == ["depot", "travel", "stop", "gap", "break", "travel", "depot"]
    gap = items[3]
    assert gap.insert_after_index is None
    assert (gap.start_time, gap.end_time) == ("09:00", "10:00")
    assert items[4].duration_minutes == 30


def test_return_leg_places_closing_depot_after_travel():
    stops = [_stop("A", 1, duration_from_previous_minutes=0, estimated_arrival="08:00", estimated_departure="09:00")]

    items = build_timeline_items(stops, "08:00", "16:00", return_to_depot=ReturnToDepot(distance_km=12.5, duration_minutes=20))

    travel_return, depot_end = items[-2], items[-1]
    assert (travel_return.start_time, travel_return.end_time) == ("09:00", "09:20")
    assert travel_return.distance_km == 12.5
    assert depot_end.start_time == "09:20"
    assert depot_end.end_time is None


def test_depot_departure_overrides_workday_start():
    stops = [_stop("A", 1, duration_from_previous_minutes=15)]

    items = build_timeline_items(stops, "08:00", "16:00", depot_departure="07:45:00")

    assert items[0].start_time == "07:45"
    assert items[1].start_time == "07:45"
    assert items[1].end_time == "08:00"


def test_every_non_empty_route_is_framed_by_depots_with_consistent_durations():
    stops = [
        _stop("A", 1, duration_from_previous_minutes=20, estimated_arrival="08:20", estimated_departure="08:50"),
        _break("BRK", 2, break_duration_minutes=30),
        _stop("B", 3, duration_from_previous_minutes=10, estimated_arrival="10:00", estimated_departure="10:45"),
        _stop("C", 4, duration_from_previous_minutes=5, needs_reschedule=True),
    ]

    items = build_timeline_items(stops, "08:00", "16:00")

    assert items[0].type == "depot" and items[-1].type == "depot"
    assert _types(items).count("depot") == 2
    for item in items:
        if item.type in ("stop", "break"):
            assert item.duration_minutes >= 0
            assert parse_clock(item.end_time) - parse_clock(item.start_time) == item.duration_minutes
    assert items[-3].needs_reschedule is True


def test_builder_does_not_mutate_input_stops():
    stop = _stop("A", 1, duration_from_previous_minutes=10)

    items = build_timeline_items([stop], "08:00", "16:00")
    items[2].stop.customer_name = "Changed"

    assert stop.customer_name == "Customer A"
