"""Capacity endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.capacity import CapacityAssessRequest, CapacityAssessResponse
from ...services.capacity.metrics import RouteMetrics
from ...services.timeline.service import metrics_to_models

router = APIRouter(prefix="/capacity", tags=["capacity"])


@router.post("/assess", response_model=CapacityAssessResponse, status_code=status.HTTP_200_OK)
def assess(payload: CapacityAssessRequest) -> CapacityAssessResponse:
    """Classify precomputed route metrics into load and slack bands."""
    metrics, capacity = metrics_to_models(RouteMetrics(**payload.metrics.model_dump()))
    return CapacityAssessResponse(metrics=metrics, capacity=capacity)
