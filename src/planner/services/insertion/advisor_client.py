"""HTTP client for the insertion advisor service.

The advisor ranks candidate insertion points for a new visit by incremental
cost. Its cost model is opaque to this service: statuses and deltas are
passed through exactly as received.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Sequence

import httpx

from ...config import settings
from ...models.domain import Stop
from ..timeline.models import SlotSuggestion

logger = logging.getLogger(__name__)

_VALID_STATUSES = {"ok", "tight", "conflict"}


class InsertionAdvisorError(RuntimeError):
    """Raised when the insertion advisor cannot produce suggestions."""


def _route_stop_payload(stop: Stop) -> dict[str, Any]:
    return {
        "id": stop.id,
        "name": stop.customer_name or "",
        "arrivalTime": stop.estimated_arrival,
        "departureTime": stop.estimated_departure,
    }


def _parse_position(raw: dict[str, Any]) -> SlotSuggestion:
    status = raw.get("status", "conflict")
    if status not in _VALID_STATUSES:
        raise ValueError(f"Unknown insertion status '{status}'")
    return SlotSuggestion(
        insert_after_index=int(raw["insertAfterIndex"]),
        estimated_arrival=raw.get("estimatedArrival"),
        estimated_departure=raw.get("estimatedDeparture"),
        delta_km=float(raw.get("deltaKm") or 0.0),
        delta_min=float(raw.get("deltaMin") or 0.0),
        status=status,
        insert_after_name=raw.get("insertAfterName"),
        insert_before_name=raw.get("insertBeforeName"),
        conflict_reason=raw.get("conflictReason"),
    )


class InsertionAdvisorClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.advisor_base_url
        if not self.base_url:
            raise ValueError("Insertion advisor base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.advisor_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.advisor_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.advisor_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.post(url, json=payload)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise InsertionAdvisorError("Insertion advisor returned a non-object response")
                    if "error" in data:
                        message = data["error"].get("message") if isinstance(data["error"], dict) else data["error"]
                        raise InsertionAdvisorError(f"Insertion advisor returned an error: {message}")
                    body = data.get("payload", data)
                    if not isinstance(body, dict):
                        raise InsertionAdvisorError("Insertion advisor returned an empty or non-object payload")
                    return body
                except httpx.HTTPStatusError as e:
                    # Client errors will not succeed on retry
                    if e.response.status_code < 500:
                        raise InsertionAdvisorError(
                            f"Insertion advisor rejected the request ({e.response.status_code})"
                        ) from e
                    attempt += 1
                    if attempt > self.max_retries:
                        raise InsertionAdvisorError(
                            f"Insertion advisor failed after {self.max_retries} retries: {e}"
                        ) from e
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise InsertionAdvisorError(f"Insertion advisor is not reachable at {self.base_url}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Insertion advisor request failed, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {e}"
                    )
                    time.sleep(wait_time)
                except ValueError as e:
                    raise InsertionAdvisorError(f"Insertion advisor returned invalid JSON: {e}") from e
        finally:
            client.close()

    def calculate_insertion(
        self,
        *,
        route_stops: Sequence[Stop],
        depot: tuple[float, float],
        candidate_id: str,
        customer_id: str,
        coordinates: tuple[float, float],
        service_duration_minutes: int,
        date: str,
        workday_start: str | None = None,
        workday_end: str | None = None,
    ) -> list[SlotSuggestion]:
        """Return all insertion positions for a candidate, ranked by the advisor."""
        payload = {
            "routeStops": [_route_stop_payload(stop) for stop in route_stops if not stop.is_break],
            "depot": {"lat": depot[0], "lng": depot[1]},
            "candidate": {
                "id": candidate_id,
                "customerId": customer_id,
                "coordinates": {"lat": coordinates[0], "lng": coordinates[1]},
                "serviceDurationMinutes": service_duration_minutes,
            },
            "date": date,
            "workdayStart": workday_start,
            "workdayEnd": workday_end,
        }
        data = self._post("/insertion/calculate", payload)
        try:
            return [_parse_position(raw) for raw in data.get("allPositions") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise InsertionAdvisorError(f"Malformed insertion advisor response: {e}") from e


def check_health(base_url: str | None = None) -> bool:
    """Check that the insertion advisor answers on its health endpoint."""
    base = base_url or settings.advisor_base_url
    if not base:
        return False
    try:
        response = httpx.get(f"{base.rstrip('/')}/health", timeout=5.0)
        response.raise_for_status()
        return True
    except httpx.HTTPError:
        return False
