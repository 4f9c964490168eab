"""Client for the background job service (route recalculation and friends).

Jobs move through intermediate states (queued, processing, ...) that callers
ignore; only the terminal ``completed`` and ``failed`` states are acted on.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ...config import settings

TERMINAL_STATES = ("completed", "failed")

logger = logging.getLogger(__name__)


class JobFailedError(RuntimeError):
    def __init__(self, job_id: str, message: str) -> None:
        super().__init__(f"Job {job_id} failed: {message}")
        self.job_id = job_id


@dataclass(slots=True)
class JobStatus:
    job_id: str
    status: str
    result: Optional[dict] = None
    error: Optional[str] = None
    progress: dict = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES


class JobClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        poll_interval: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.jobs_base_url
        if not self.base_url:
            raise ValueError("Job service base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.poll_interval = poll_interval if poll_interval is not None else settings.jobs_poll_interval_seconds
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "JobClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def submit(self, job_type: str, payload: dict[str, Any]) -> str:
        """Submit a job and return its id."""
        response = self._client.post(f"{self.base_url}/jobs", json={"type": job_type, "payload": payload})
        response.raise_for_status()
        job_id = response.json().get("jobId")
        if not job_id:
            raise ValueError("Job service response missing jobId.")
        logger.info(f"Submitted {job_type} job {job_id}")
        return str(job_id)

    def get_status(self, job_id: str) -> JobStatus:
        response = self._client.get(f"{self.base_url}/jobs/{job_id}")
        response.raise_for_status()
        data = response.json()
        return JobStatus(
            job_id=job_id,
            status=str(data.get("status", "unknown")),
            result=data.get("result"),
            error=data.get("error"),
            progress=data.get("progress") or {},
        )

    def wait_for_terminal(self, job_id: str, timeout: float | None = None) -> JobStatus:
        """Poll until the job completes.

        Raises:
            JobFailedError: The job reached the ``failed`` state.
            TimeoutError: No terminal state within ``timeout`` seconds.
        """
        timeout = timeout if timeout is not None else settings.jobs_timeout_seconds
        deadline = time.monotonic() + timeout
        while True:
            status = self.get_status(job_id)
            if status.status == "completed":
                return status
            if status.status == "failed":
                raise JobFailedError(job_id, status.error or "unknown error")
            if time.monotonic() >= deadline:
                raise TimeoutError(f"Job {job_id} did not finish within {timeout:.0f}s (last status: {status.status})")
            time.sleep(self.poll_interval)
