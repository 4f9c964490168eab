import pytest

from src.planner.models.domain import Stop
from src.planner.services.timeline.builder import build_timeline_items
from src.planner.services.timeline.clock import parse_clock
from src.planner.services.timeline.quick_gap import dropped_item_duration, pointer_fraction, quick_place_in_gap
from src.planner.services.timeline.snapping import snap_to_grid


def _route(extra_service: int = 30) -> list[Stop]:
    return [
        Stop(id="A", stop_order=1, duration_from_previous_minutes=30, estimated_arrival="08:30", estimated_departure="09:00"),
        Stop(id="B", stop_order=2, duration_from_previous_minutes=15, estimated_arrival="10:30", estimated_departure="11:00"),
        Stop(
            id="C",
            stop_order=3,
            duration_from_previous_minutes=10,
            distance_from_previous_km=4.2,
            estimated_arrival="11:10",
            estimated_departure="11:40",
            service_duration_minutes=extra_service,
        ),
    ]


def test_snap_rounds_to_nearest_grid_line_inside_gap():
    assert snap_to_grid(545, 30, 540, 630) == 540
    assert snap_to_grid(545, 10, 500, 600, grid=10) == 550
    assert snap_to_grid(625, 30, 540, 630) == 600


def test_snap_returns_none_when_no_grid_line_fits():
    assert snap_to_grid(560, 30, 545, 580) is None


def test_pointer_fraction_is_clamped_and_handles_empty_rect():
    assert pointer_fraction(150, 100, 0) == 0.5
    assert pointer_fraction(150, 100, 100) == 0.5
    assert pointer_fraction(250, 100, 100) == 1.0
    assert pointer_fraction(50, 100, 100) == 0.0


def test_dropped_item_duration_fallbacks():
    assert dropped_item_duration(Stop(id="A", stop_order=1, override_service_duration_minutes=45)) == 45
    assert dropped_item_duration(Stop(id="A", stop_order=1, service_duration_minutes=20, override_service_duration_minutes=45)) == 20
    assert dropped_item_duration(Stop(id="A", stop_order=1)) == 30
    assert dropped_item_duration(Stop(id="BRK", stop_order=1, stop_type="break")) == 30


def test_customer_dropped_into_gap_is_placed_before_following_stop():
    stops = _route()
    items = build_timeline_items(stops, "08:00", "16:00")

    placement = quick_place_in_gap(stops, items, "C", "gap-1", 0.0)

    assert placement is not None
    assert (placement.start_time, placement.end_time) == ("09:15", "09:45")
    assert [stop.id for stop in placement.stops] == ["A", "C", "B"]
    assert [stop.stop_order for stop in placement.stops] == [1, 2, 3]
    placed = placement.stops[1]
    assert placed.needs_reschedule is True
    assert (placed.scheduled_time_start, placed.scheduled_time_end) == ("09:15", "09:45")
    assert placed.duration_from_previous_minutes is None
    assert placed.distance_from_previous_km is None
    assert stops[2].estimated_arrival == "11:10"


def test_middle_of_gap_snaps_to_grid():
    stops = _route()
    items = build_timeline_items(stops, "08:00", "16:00")

    placement = quick_place_in_gap(stops, items, "C", "gap-1", 0.5)

    assert placement.start_time == "10:00"
    assert placement.end_time == "10:30"


@pytest.mark.parametrize("fraction", [0.0, 0.1, 0.25, 0.5, 0.75, 0.9, 1.0])
def test_placement_never_leaves_the_gap(fraction):
    stops = _route()
    items = build_timeline_items(stops, "08:00", "16:00")
    gap = next(item for item in items if item.id == "gap-1")

    placement = quick_place_in_gap(stops, items, "C", "gap-1", fraction)

    assert parse_clock(gap.start_time) <= parse_clock(placement.start_time)
    assert parse_clock(placement.end_time) <= parse_clock(gap.end_time)


def test_item_longer_than_gap_is_rejected():
    stops = _route(extra_service=90)
    items = build_timeline_items(stops, "08:00", "16:00")

    assert quick_place_in_gap(stops, items, "C", "gap-1", 0.5) is None


def test_unknown_stop_or_gap_is_ignored():
    stops = _route()
    items = build_timeline_items(stops, "08:00", "16:00")

    assert quick_place_in_gap(stops, items, "missing", "gap-1", 0.5) is None
    assert quick_place_in_gap(stops, items, "C", "gap-7", 0.5) is None


def test_break_dropped_into_gap_records_its_start():
    stops = _route() + [Stop(id="BRK", stop_order=4, stop_type="break", break_duration_minutes=45)]
    items = build_timeline_items(stops, "08:00", "16:00")

    placement = quick_place_in_gap(stops, items, "BRK", "gap-1", 0.0)

    placed = next(stop for stop in placement.stops if stop.id == "BRK")
    assert [stop.id for stop in placement.stops] == ["A", "BRK", "B", "C"]
    assert placed.break_time_start == "09:15"
    assert placed.estimated_departure == "10:00"
    assert placed.needs_reschedule is False


def test_stop_dropped_into_gap_right_before_it_anchors_on_next_stop():
    stops = _route()
    items = build_timeline_items(stops, "08:00", "16:00")

    placement = quick_place_in_gap(stops, items, "B", "gap-1", 0.0)

    assert [stop.id for stop in placement.stops] == ["A", "B", "C"]
    assert (placement.start_time, placement.end_time) == ("09:15", "09:45")
    assert placement.stops[1].needs_reschedule is True


def test_snap_keeps_items_within_the_day():
    assert snap_to_grid(1440, 30, 1380, 1500) == 1395
