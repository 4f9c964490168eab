"""Timeline orchestration service.

Translates API payloads into domain stops, runs the pure timeline helpers and
returns the new stop list together with a freshly rebuilt timeline. Nothing
is stored here: the caller owns the stop list and persists the result.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable, Sequence

import httpx

from ...config import settings
from ...models.domain import ReturnToDepot, Stop
from ...schemas.capacity import CapacityAssessmentModel, RouteMetricsModel
from ...schemas.insertion import BreakPositionModel, BreakSuggestRequest, BreakSuggestResponse
from ...schemas.stops import RouteContext, StopModel
from ...schemas.timeline import (
    InsertStopRequest,
    QuickPlaceRequest,
    QuickPlaceResponse,
    RecalculateRequest,
    RecalculateResponse,
    ReorderRequest,
    ReorderResponse,
    StopsResponse,
    TimelineItemModel,
    TimelineResponse,
)
from ..breaks.placement import BreakConstraintOptions, BreakSettings, create_break_stop, suggest_break_position
from ..capacity.metrics import RouteMetrics, assess_capacity, compute_route_metrics, format_duration
from ..jobs.client import JobClient, JobFailedError
from .builder import build_timeline_items
from .models import TimelineItem
from .quick_gap import pointer_fraction, quick_place_in_gap
from .reorder import (
    clear_stale_break_times,
    insert_stop_at_position,
    needs_scheduled_time_warning,
    renumber,
    reorder_stops,
    resolve_drop_index,
)

RECALCULATE_JOB_TYPE = "route.recalculate"

logger = logging.getLogger(__name__)


def stop_from_model(model: StopModel) -> Stop:
    return Stop(**model.model_dump())


def stop_to_model(stop: Stop) -> StopModel:
    return StopModel(**asdict(stop))


def _workday(context: RouteContext) -> tuple[str, str]:
    return (
        context.workday_start or settings.default_workday_start,
        context.workday_end or settings.default_workday_end,
    )


def _return_leg(context: RouteContext) -> ReturnToDepot | None:
    if context.return_to_depot is None:
        return None
    return ReturnToDepot(
        distance_km=context.return_to_depot.distance_km,
        duration_minutes=context.return_to_depot.duration_minutes,
    )


def _item_to_model(item: TimelineItem) -> TimelineItemModel:
    data = asdict(item)
    data["stop"] = stop_to_model(item.stop) if item.stop is not None else None
    return TimelineItemModel(**data)


def metrics_to_models(metrics: RouteMetrics) -> tuple[RouteMetricsModel, CapacityAssessmentModel]:
    assessment = assess_capacity(metrics)
    return (
        RouteMetricsModel(**asdict(metrics)),
        CapacityAssessmentModel(
            load_status=assessment.load_status,
            slack_status=assessment.slack_status,
            warn_on_insert=assessment.warn_on_insert,
            load_label=f"{round(metrics.load_percent)}%",
            slack_label=format_duration(metrics.slack_min),
        ),
    )


def build_items(context: RouteContext, stops: Sequence[Stop]) -> list[TimelineItem]:
    workday_start, workday_end = _workday(context)
    return build_timeline_items(
        stops,
        workday_start,
        workday_end,
        return_to_depot=_return_leg(context),
        depot_departure=context.depot_departure,
    )


def _timeline_response(context: RouteContext, stops: Sequence[Stop]) -> TimelineResponse:
    workday_start, workday_end = _workday(context)
    items = build_items(context, stops)
    metrics, capacity = metrics_to_models(
        compute_route_metrics(stops, workday_start, workday_end, _return_leg(context))
    )
    return TimelineResponse(
        items=[_item_to_model(item) for item in items],
        metrics=metrics,
        capacity=capacity,
    )


def build_timeline(payload: RouteContext) -> TimelineResponse:
    stops = [stop_from_model(model) for model in payload.stops]
    return _timeline_response(payload, stops)


def apply_reorder(payload: ReorderRequest) -> ReorderResponse:
    """Reorder stops, or ask for confirmation when an agreed-time stop moves."""
    stops = [stop_from_model(model) for model in payload.stops]
    if not 0 <= payload.from_index < len(stops):
        raise ValueError(f"from_index {payload.from_index} is out of range for {len(stops)} stop(s)")

    if payload.to_index is not None:
        if payload.to_index >= len(stops):
            raise ValueError(f"to_index {payload.to_index} is out of range for {len(stops)} stop(s)")
        to_index = payload.to_index
    else:
        if payload.over_index >= len(stops):
            raise ValueError(f"over_index {payload.over_index} is out of range for {len(stops)} stop(s)")
        to_index = resolve_drop_index(payload.from_index, payload.over_index, payload.delta_y, len(stops))

    if payload.from_index == to_index:
        return ReorderResponse(
            applied=False,
            from_index=payload.from_index,
            to_index=to_index,
            stops=payload.stops,
        )

    warning_stop = needs_scheduled_time_warning(stops, payload.from_index, to_index)
    if warning_stop is not None and not payload.confirmed:
        logger.info(f"Reorder of stop '{warning_stop.id}' needs confirmation: agreed time {warning_stop.scheduled_time_start}")
        return ReorderResponse(
            applied=False,
            requires_confirmation=True,
            confirmation_stop=stop_to_model(warning_stop),
            from_index=payload.from_index,
            to_index=to_index,
            stops=payload.stops,
        )

    moved = stops[payload.from_index]
    reordered = clear_stale_break_times(reorder_stops(stops, payload.from_index, to_index), moved)
    return ReorderResponse(
        applied=True,
        from_index=payload.from_index,
        to_index=to_index,
        stops=[stop_to_model(stop) for stop in reordered],
        timeline=_timeline_response(payload, reordered),
    )


def apply_quick_place(payload: QuickPlaceRequest) -> QuickPlaceResponse:
    stops = [stop_from_model(model) for model in payload.stops]
    items = build_items(payload, stops)
    if payload.fraction is not None:
        fraction = payload.fraction
    else:
        fraction = pointer_fraction(payload.pointer_y, payload.gap_rect_top, payload.gap_rect_height)

    placement = quick_place_in_gap(
        stops,
        items,
        payload.stop_id,
        payload.gap_id,
        fraction,
        grid=settings.snap_grid_minutes,
    )
    if placement is None:
        return QuickPlaceResponse(
            applied=False,
            stops=payload.stops,
            message="The item does not fit into this gap.",
        )

    return QuickPlaceResponse(
        applied=True,
        stops=[stop_to_model(stop) for stop in placement.stops],
        start_time=placement.start_time,
        end_time=placement.end_time,
        timeline=_timeline_response(payload, placement.stops),
    )


def apply_insert(payload: InsertStopRequest) -> StopsResponse:
    stops = [stop_from_model(model) for model in payload.stops]
    if any(stop.id == payload.stop.id for stop in stops):
        raise ValueError(f"Stop '{payload.stop.id}' is already part of the route.")
    inserted = insert_stop_at_position(stops, stop_from_model(payload.stop), payload.insert_at)
    return StopsResponse(
        stops=[stop_to_model(stop) for stop in inserted],
        timeline=_timeline_response(payload, inserted),
    )


def suggest_break(payload: BreakSuggestRequest) -> BreakSuggestResponse:
    """Suggest a break position and return the route with the break inserted.

    The position counts customer stops only. A route that already holds a
    break is returned unchanged with the suggestion for reference. With the
    driving rule enforced the break lasts at least the legal minimum.
    """
    stops = [stop_from_model(model) for model in payload.stops]
    workday_start, _ = _workday(payload)
    options = BreakConstraintOptions(**payload.options.model_dump())
    break_settings = BreakSettings(**payload.settings.model_dump())
    if options.enforce_driving_break_rule:
        break_settings.break_duration_minutes = max(
            break_settings.break_duration_minutes, options.required_break_minutes
        )
    suggestion = suggest_break_position(
        stops,
        break_settings,
        start_time=payload.depot_departure or workday_start,
        options=options,
    )
    existing = next((stop for stop in stops if stop.is_break), None)
    if existing is not None:
        suggestion.warnings.append(f"Route already has a break ({existing.id}); no break was added.")
    suggestion_model = BreakPositionModel(
        position=suggestion.position,
        estimated_time=suggestion.estimated_time,
        estimated_distance_km=suggestion.estimated_distance_km,
        warnings=suggestion.warnings,
    )
    if suggestion.estimated_time is None or existing is not None:
        return BreakSuggestResponse(suggestion=suggestion_model, stops=payload.stops)

    break_stop = create_break_stop(
        suggestion.position + 1,
        break_settings,
        suggestion.estimated_time,
        floating=payload.floating,
    )
    with_break = insert_stop_at_position(stops, break_stop, suggestion.position)
    return BreakSuggestResponse(
        suggestion=suggestion_model,
        break_stop=stop_to_model(with_break[suggestion.position]),
        stops=[stop_to_model(stop) for stop in with_break],
    )


def recalculate_route(
    payload: RecalculateRequest,
    client_factory: Callable[[], JobClient] | None = None,
) -> RecalculateResponse:
    """Submit the stop list for an authoritative recalculation and wait for it.

    Failures leave the caller's stops untouched and return a message suitable
    for a retry banner.
    """
    workday_start, workday_end = _workday(payload)
    job_payload = {
        "routeId": payload.route_id,
        "date": payload.date,
        "workdayStart": workday_start,
        "workdayEnd": workday_end,
        "stops": [model.model_dump() for model in payload.stops],
    }
    try:
        client = (client_factory or JobClient)()
    except ValueError as e:
        logger.warning(f"Recalculation unavailable: {e}")
        return RecalculateResponse(applied=False, stops=payload.stops, error="Route recalculation is not configured.")

    try:
        with client:
            job_id = client.submit(RECALCULATE_JOB_TYPE, job_payload)
            status = client.wait_for_terminal(job_id)
    except JobFailedError as e:
        logger.warning(str(e))
        return RecalculateResponse(applied=False, stops=payload.stops, error="Route recalculation failed. Please retry.")
    except (TimeoutError, httpx.HTTPError) as e:
        logger.warning(f"Recalculation for route '{payload.route_id}' did not complete: {e}")
        return RecalculateResponse(
            applied=False,
            stops=payload.stops,
            error="Route recalculation is temporarily unavailable. Please retry.",
        )
    except ValueError as e:
        # Missing job id or a body that is not JSON
        logger.warning(f"Job service sent an unusable response for route '{payload.route_id}': {e}")
        return RecalculateResponse(applied=False, stops=payload.stops, error="Route recalculation failed. Please retry.")

    try:
        result = status.result if isinstance(status.result, dict) else {}
        raw_stops = result.get("stops") or []
        recalculated = renumber([stop_from_model(StopModel.model_validate(raw)) for raw in raw_stops])
    except (ValueError, TypeError) as e:
        logger.warning(f"Recalculated stops for route '{payload.route_id}' could not be read: {e}")
        return RecalculateResponse(applied=False, stops=payload.stops, error="Route recalculation failed. Please retry.")
    return RecalculateResponse(
        applied=True,
        stops=[stop_to_model(stop) for stop in recalculated],
        timeline=_timeline_response(payload, recalculated),
    )
