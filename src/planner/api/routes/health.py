"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_advisor_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.insertion.advisor_client import check_health as advisor_health_check
    return advisor_health_check


@router.get("/health/advisor", status_code=status.HTTP_200_OK)
def health_advisor() -> dict:
    """Check insertion advisor health."""
    if not settings.advisor_base_url:
        return {"service": "insertion-advisor", "healthy": False, "configured": False}
    try:
        advisor_health_check = _get_advisor_health_check()
        return {"service": "insertion-advisor", "healthy": advisor_health_check(), "configured": True}
    except Exception as e:
        return {"service": "insertion-advisor", "healthy": False, "configured": True, "error": str(e)}
