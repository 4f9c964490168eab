"""Domain models for route stops and depot legs."""

from dataclasses import dataclass
from typing import Literal, Optional

StopType = Literal["customer", "break"]


@dataclass(slots=True)
class Stop:
    """One element of a route's ordered stop list: a customer visit or a break.

    Clock values are "HH:MM" strings (seconds are tolerated and ignored).
    Travel metrics describe the leg from the previous stop and are filled in
    by the external router after a recalculation.
    """

    id: str
    stop_order: int
    stop_type: StopType = "customer"
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    address: Optional[str] = None
    estimated_arrival: Optional[str] = None
    estimated_departure: Optional[str] = None
    scheduled_time_start: Optional[str] = None
    scheduled_time_end: Optional[str] = None
    service_duration_minutes: Optional[int] = None
    override_service_duration_minutes: Optional[int] = None
    needs_reschedule: bool = False
    break_time_start: Optional[str] = None
    break_duration_minutes: Optional[int] = None
    distance_from_previous_km: Optional[float] = None
    duration_from_previous_minutes: Optional[int] = None
    override_travel_duration_minutes: Optional[int] = None
    status: str = "pending"

    @property
    def is_break(self) -> bool:
        return self.stop_type == "break"


@dataclass(slots=True)
class ReturnToDepot:
    """Final leg from the last stop back to the depot."""

    distance_km: float
    duration_minutes: int
