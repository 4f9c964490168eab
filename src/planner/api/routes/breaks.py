"""Break placement endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.insertion import BreakSuggestRequest, BreakSuggestResponse
from ...services.timeline.service import suggest_break

router = APIRouter(prefix="/breaks", tags=["breaks"])


@router.post("/suggest", response_model=BreakSuggestResponse, status_code=status.HTTP_200_OK)
def suggest(payload: BreakSuggestRequest) -> BreakSuggestResponse:
    try:
        return suggest_break(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error suggesting break: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to suggest break: {str(exc)}",
        ) from exc
