"""Timeline request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .capacity import CapacityAssessmentModel, RouteMetricsModel
from .insertion import GapInsertionInfoModel
from .stops import RouteContext, StopModel


class TimelineItemModel(BaseModel):
    type: Literal["depot", "travel", "stop", "break", "gap"]
    id: str
    start_time: Optional[str]
    end_time: Optional[str]
    duration_minutes: int
    stop: Optional[StopModel] = None
    distance_km: Optional[float] = None
    insert_after_index: Optional[int] = None
    destination_stop_id: Optional[str] = None
    override_travel_duration_minutes: Optional[int] = None
    late_arrival_minutes: Optional[int] = None
    actual_arrival_time: Optional[str] = None
    agreed_window_start: Optional[str] = None
    agreed_window_end: Optional[str] = None
    agreed_window_duration_minutes: Optional[int] = None
    needs_reschedule: Optional[bool] = None


class TimelineResponse(BaseModel):
    items: List[TimelineItemModel]
    metrics: RouteMetricsModel
    capacity: CapacityAssessmentModel
    gap_suggestions: Dict[str, GapInsertionInfoModel] = Field(default_factory=dict)


class ReorderRequest(RouteContext):
    from_index: int = Field(..., ge=0)
    to_index: Optional[int] = Field(default=None, ge=0, description="Explicit target index.")
    over_index: Optional[int] = Field(default=None, ge=0, description="Index of the stop the drag ended over.")
    delta_y: float = Field(default=0.0, description="Total vertical drag distance; negative means upward.")
    confirmed: bool = Field(default=False, description="Set after the user accepted moving an agreed-time stop.")

    @model_validator(mode="after")
    def _target_given(self) -> "ReorderRequest":
        if self.to_index is None and self.over_index is None:
            raise ValueError("Either to_index or over_index is required.")
        return self


class ReorderResponse(BaseModel):
    applied: bool
    requires_confirmation: bool = False
    confirmation_stop: Optional[StopModel] = None
    from_index: int
    to_index: int
    stops: List[StopModel]
    timeline: Optional[TimelineResponse] = None


class QuickPlaceRequest(RouteContext):
    stop_id: str
    gap_id: str = Field(..., pattern=r"^gap-\d+$")
    fraction: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Pointer position within the gap.")
    pointer_y: Optional[float] = None
    gap_rect_top: Optional[float] = None
    gap_rect_height: Optional[float] = None

    @model_validator(mode="after")
    def _position_given(self) -> "QuickPlaceRequest":
        if self.fraction is None and None in (self.pointer_y, self.gap_rect_top, self.gap_rect_height):
            raise ValueError("Provide fraction or pointer_y with gap_rect_top and gap_rect_height.")
        return self


class QuickPlaceResponse(BaseModel):
    applied: bool
    stops: List[StopModel]
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    message: Optional[str] = None
    timeline: Optional[TimelineResponse] = None


class InsertStopRequest(RouteContext):
    stop: StopModel
    insert_at: int = Field(..., ge=0)


class StopsResponse(BaseModel):
    stops: List[StopModel]
    timeline: TimelineResponse


class RecalculateRequest(RouteContext):
    route_id: str
    date: str


class RecalculateResponse(BaseModel):
    applied: bool
    stops: List[StopModel]
    error: Optional[str] = None
    timeline: Optional[TimelineResponse] = None
