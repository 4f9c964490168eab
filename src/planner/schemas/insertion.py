"""Insertion advisor and break placement schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .stops import RouteContext, StopModel

InsertionStatusLiteral = Literal["ok", "tight", "conflict"]


class GapInsertionInfoModel(BaseModel):
    insert_after_index: int
    candidate_name: str
    estimated_arrival: Optional[str] = None
    estimated_departure: Optional[str] = None
    delta_km: float
    delta_min: float
    status: InsertionStatusLiteral


class SlotSuggestionModel(BaseModel):
    insert_after_index: int
    estimated_arrival: Optional[str] = None
    estimated_departure: Optional[str] = None
    delta_km: float
    delta_min: float
    status: InsertionStatusLiteral
    insert_after_name: Optional[str] = None
    insert_before_name: Optional[str] = None
    conflict_reason: Optional[str] = None


class CoordinatesModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class InsertionCandidateModel(BaseModel):
    id: str
    customer_id: str
    name: str = ""
    coordinates: CoordinatesModel
    service_duration_minutes: int = Field(default=30, ge=1)


class BreakSettingsModel(BaseModel):
    break_enabled: bool = True
    break_duration_minutes: int = Field(default=30, ge=1)
    break_earliest_time: str = "11:30"
    break_latest_time: str = "13:00"
    break_min_km: float = Field(default=0.0, ge=0)
    break_max_km: float = Field(default=10_000.0, ge=0)


class BreakConstraintOptionsModel(BaseModel):
    enforce_driving_break_rule: bool = False
    max_driving_minutes: int = Field(default=270, ge=1)
    required_break_minutes: int = Field(default=45, ge=0)


class BreakPositionModel(BaseModel):
    position: int
    estimated_time: Optional[str] = None
    estimated_distance_km: Optional[float] = None
    warnings: List[str] = Field(default_factory=list)


class InsertionSuggestionsRequest(RouteContext):
    date: str
    depot: CoordinatesModel
    candidate: InsertionCandidateModel


class InsertionSuggestionsResponse(BaseModel):
    candidate_id: str
    suggestions: List[SlotSuggestionModel]
    gap_suggestions: Dict[str, GapInsertionInfoModel]
    error: Optional[str] = None


class BreakSuggestRequest(RouteContext):
    settings: BreakSettingsModel = Field(default_factory=BreakSettingsModel)
    options: BreakConstraintOptionsModel = Field(default_factory=BreakConstraintOptionsModel)
    floating: bool = True


class BreakSuggestResponse(BaseModel):
    suggestion: BreakPositionModel
    break_stop: Optional[StopModel] = None
    stops: List[StopModel]
