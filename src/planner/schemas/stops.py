"""Stop and route context schemas shared by the API."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class StopModel(BaseModel):
    id: str
    stop_order: int = Field(..., ge=1)
    stop_type: Literal["customer", "break"] = "customer"
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    address: Optional[str] = None
    estimated_arrival: Optional[str] = Field(default=None, description="HH:MM or HH:MM:SS")
    estimated_departure: Optional[str] = Field(default=None, description="HH:MM or HH:MM:SS")
    scheduled_time_start: Optional[str] = Field(default=None, description="Agreed window start (HH:MM)")
    scheduled_time_end: Optional[str] = Field(default=None, description="Agreed window end (HH:MM)")
    service_duration_minutes: Optional[int] = Field(default=None, ge=0)
    override_service_duration_minutes: Optional[int] = Field(default=None, ge=0)
    needs_reschedule: bool = False
    break_time_start: Optional[str] = None
    break_duration_minutes: Optional[int] = Field(default=None, ge=0)
    distance_from_previous_km: Optional[float] = Field(default=None, ge=0)
    duration_from_previous_minutes: Optional[int] = Field(default=None, ge=0)
    override_travel_duration_minutes: Optional[int] = Field(default=None, ge=0)
    status: str = "pending"


class ReturnToDepotModel(BaseModel):
    distance_km: float = Field(..., ge=0)
    duration_minutes: int = Field(..., ge=0)


class RouteContext(BaseModel):
    """Stops plus the workday frame they are laid out in."""

    stops: List[StopModel]
    workday_start: Optional[str] = Field(default=None, description="Defaults to the configured workday start.")
    workday_end: Optional[str] = Field(default=None, description="Defaults to the configured workday end.")
    return_to_depot: Optional[ReturnToDepotModel] = None
    depot_departure: Optional[str] = None

    @model_validator(mode="after")
    def _unique_stop_ids(self) -> "RouteContext":
        ids = [stop.id for stop in self.stops]
        if len(ids) != len(set(ids)):
            raise ValueError("Stop ids must be unique within a route.")
        return self
