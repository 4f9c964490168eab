"""Capacity metrics schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

CapacityStatusLiteral = Literal["ok", "tight", "overloaded"]


class RouteMetricsModel(BaseModel):
    distance_km: float = Field(..., ge=0)
    travel_time_min: float = Field(..., ge=0)
    service_time_min: float = Field(..., ge=0)
    load_percent: float = Field(..., ge=0)
    slack_min: float
    stop_count: int = Field(..., ge=0)


class CapacityAssessmentModel(BaseModel):
    load_status: CapacityStatusLiteral
    slack_status: CapacityStatusLiteral
    warn_on_insert: bool
    load_label: str
    slack_label: str


class CapacityAssessRequest(BaseModel):
    metrics: RouteMetricsModel


class CapacityAssessResponse(BaseModel):
    metrics: RouteMetricsModel
    capacity: CapacityAssessmentModel
