"""Timeline domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional

from ...models.domain import Stop

TimelineItemType = Literal["depot", "travel", "stop", "break", "gap"]
InsertionStatus = Literal["ok", "tight", "conflict"]


@dataclass(slots=True)
class TimelineItem:
    type: TimelineItemType
    id: str
    start_time: Optional[str]
    end_time: Optional[str]
    duration_minutes: int
    stop: Optional[Stop] = None
    distance_km: Optional[float] = None
    # gap only: customer-stop index this gap follows (-1 = before the first stop)
    insert_after_index: Optional[int] = None
    destination_stop_id: Optional[str] = None
    override_travel_duration_minutes: Optional[int] = None
    late_arrival_minutes: Optional[int] = None
    actual_arrival_time: Optional[str] = None
    agreed_window_start: Optional[str] = None
    agreed_window_end: Optional[str] = None
    agreed_window_duration_minutes: Optional[int] = None
    needs_reschedule: Optional[bool] = None


@dataclass(slots=True)
class SlotSuggestion:
    """One ranked insertion point returned by the insertion advisor."""

    insert_after_index: int
    estimated_arrival: Optional[str]
    estimated_departure: Optional[str]
    delta_km: float
    delta_min: float
    status: InsertionStatus
    insert_after_name: Optional[str] = None
    insert_before_name: Optional[str] = None
    conflict_reason: Optional[str] = None


@dataclass(slots=True)
class GapInsertionInfo:
    insert_after_index: int
    candidate_name: str
    estimated_arrival: Optional[str]
    estimated_departure: Optional[str]
    delta_km: float
    delta_min: float
    status: InsertionStatus


@dataclass(slots=True)
class QuickPlacement:
    stops: List[Stop]
    stop_id: str
    start_time: str
    end_time: str
