"""Timeline endpoints: build, reorder, quick placement, insertion and recalculation."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from fastapi import APIRouter, HTTPException, status

from ...schemas.stops import RouteContext
from ...schemas.timeline import (
    InsertStopRequest,
    QuickPlaceRequest,
    QuickPlaceResponse,
    RecalculateRequest,
    RecalculateResponse,
    ReorderRequest,
    ReorderResponse,
    StopsResponse,
    TimelineResponse,
)
from ...services.timeline import service

router = APIRouter(prefix="/timeline", tags=["timeline"])

T = TypeVar("T")


def _run(action: str, func: Callable[[], T]) -> T:
    try:
        return func()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error during {action}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}: {str(exc)}",
        ) from exc


@router.post("/build", response_model=TimelineResponse, status_code=status.HTTP_200_OK)
def build(payload: RouteContext) -> TimelineResponse:
    return _run("build timeline", lambda: service.build_timeline(payload))


@router.post("/reorder", response_model=ReorderResponse, status_code=status.HTTP_200_OK)
def reorder(payload: ReorderRequest) -> ReorderResponse:
    """Move a stop; agreed-time stops come back with ``requires_confirmation`` first."""
    return _run("reorder stops", lambda: service.apply_reorder(payload))


@router.post("/quick-place", response_model=QuickPlaceResponse, status_code=status.HTTP_200_OK)
def quick_place(payload: QuickPlaceRequest) -> QuickPlaceResponse:
    return _run("place item in gap", lambda: service.apply_quick_place(payload))


@router.post("/insert", response_model=StopsResponse, status_code=status.HTTP_200_OK)
def insert(payload: InsertStopRequest) -> StopsResponse:
    return _run("insert stop", lambda: service.apply_insert(payload))


@router.post("/recalculate", response_model=RecalculateResponse, status_code=status.HTTP_200_OK)
def recalculate(payload: RecalculateRequest) -> RecalculateResponse:
    return _run("recalculate route", lambda: service.recalculate_route(payload))
