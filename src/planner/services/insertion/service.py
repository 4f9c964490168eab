"""Map insertion advisor suggestions onto timeline gaps."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Callable, List, Optional, Sequence

from ...config import settings
from ...schemas.insertion import (
    GapInsertionInfoModel,
    InsertionSuggestionsRequest,
    InsertionSuggestionsResponse,
    SlotSuggestionModel,
)
from ..timeline.models import GapInsertionInfo, SlotSuggestion, TimelineItem
from ..timeline.service import build_items, stop_from_model
from .advisor_client import InsertionAdvisorClient, InsertionAdvisorError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SuggestionFetchResult:
    suggestions: List[SlotSuggestion] = field(default_factory=list)
    # User-facing message when the advisor failed; suggestions are then empty.
    error: Optional[str] = None


def fetch_suggestions(
    fetch: Callable[[InsertionAdvisorClient], List[SlotSuggestion]],
    client_factory: Optional[Callable[[], InsertionAdvisorClient]] = None,
) -> SuggestionFetchResult:
    """Run ``fetch`` against the advisor, falling back to no suggestions on failure."""
    try:
        client = (client_factory or InsertionAdvisorClient)()
    except ValueError as e:
        logger.warning(f"Insertion advisor unavailable: {e}")
        return SuggestionFetchResult(error="Insertion suggestions are not configured.")

    try:
        return SuggestionFetchResult(suggestions=fetch(client))
    except InsertionAdvisorError as e:
        logger.warning(f"Insertion advisor request failed: {e}")
        return SuggestionFetchResult(error="Insertion suggestions are temporarily unavailable. Please retry.")


def gap_insertion_map(suggestions: Sequence[SlotSuggestion], candidate_name: str = "") -> dict[int, GapInsertionInfo]:
    """Index suggestions by the customer-stop index they follow.

    Later records for the same anchor replace earlier ones.
    """
    mapping: dict[int, GapInsertionInfo] = {}
    for suggestion in suggestions:
        mapping[suggestion.insert_after_index] = GapInsertionInfo(
            insert_after_index=suggestion.insert_after_index,
            candidate_name=candidate_name,
            estimated_arrival=suggestion.estimated_arrival,
            estimated_departure=suggestion.estimated_departure,
            delta_km=suggestion.delta_km,
            delta_min=suggestion.delta_min,
            status=suggestion.status,
        )
    return mapping


def attach_gap_suggestions(
    items: Sequence[TimelineItem],
    suggestions: Sequence[SlotSuggestion],
    candidate_name: str = "",
) -> dict[str, GapInsertionInfo]:
    """Return insertion info keyed by gap item id for every gap with a suggestion."""
    mapping = gap_insertion_map(suggestions, candidate_name)
    attached: dict[str, GapInsertionInfo] = {}
    for item in items:
        if item.type != "gap" or item.insert_after_index is None:
            continue
        info = mapping.get(item.insert_after_index)
        if info is not None:
            attached[item.id] = info
    return attached


def suggest_insertions(
    payload: InsertionSuggestionsRequest,
    client_factory: Optional[Callable[[], InsertionAdvisorClient]] = None,
) -> InsertionSuggestionsResponse:
    """Fetch ranked insertion points for a candidate and map them onto gaps."""
    stops = [stop_from_model(model) for model in payload.stops]
    workday_start = payload.workday_start or settings.default_workday_start
    workday_end = payload.workday_end or settings.default_workday_end
    candidate = payload.candidate

    result = fetch_suggestions(
        lambda client: client.calculate_insertion(
            route_stops=stops,
            depot=(payload.depot.lat, payload.depot.lng),
            candidate_id=candidate.id,
            customer_id=candidate.customer_id,
            coordinates=(candidate.coordinates.lat, candidate.coordinates.lng),
            service_duration_minutes=candidate.service_duration_minutes,
            date=payload.date,
            workday_start=workday_start,
            workday_end=workday_end,
        ),
        client_factory=client_factory,
    )
    items = build_items(payload, stops)
    attached = attach_gap_suggestions(items, result.suggestions, candidate_name=candidate.name)
    return InsertionSuggestionsResponse(
        candidate_id=candidate.id,
        suggestions=[SlotSuggestionModel(**asdict(suggestion)) for suggestion in result.suggestions],
        gap_suggestions={gap_id: GapInsertionInfoModel(**asdict(info)) for gap_id, info in attached.items()},
        error=result.error,
    )
