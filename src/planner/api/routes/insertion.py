"""Insertion suggestion endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.insertion import InsertionSuggestionsRequest, InsertionSuggestionsResponse
from ...services.insertion.service import suggest_insertions

router = APIRouter(prefix="/insertion", tags=["insertion"])


@router.post("/suggestions", response_model=InsertionSuggestionsResponse, status_code=status.HTTP_200_OK)
def suggestions(payload: InsertionSuggestionsRequest) -> InsertionSuggestionsResponse:
    """Ranked insertion points for a candidate.

    Advisor outages are reported in ``error`` with an empty suggestion list
    rather than as an HTTP failure.
    """
    try:
        return suggest_insertions(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error fetching insertion suggestions: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch insertion suggestions: {str(exc)}",
        ) from exc
