import httpx
import pytest

from src.planner.services.jobs.client import JobClient, JobFailedError


def _client(handler) -> JobClient:
    return JobClient(base_url="http://jobs.test", poll_interval=0, transport=httpx.MockTransport(handler))


def test_submit_and_wait_until_completed():
    statuses = iter(["queued", "processing", "completed"])
    submitted = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            submitted["body"] = request.content
            return httpx.Response(202, json={"jobId": "job-1"})
        status = next(statuses)
        result = {"stops": []} if status == "completed" else None
        return httpx.Response(200, json={"status": status, "result": result})

    with _client(handler) as client:
        job_id = client.submit("route.recalculate", {"routeId": "R1"})
        status = client.wait_for_terminal(job_id)

    assert job_id == "job-1"
    assert b"route.recalculate" in submitted["body"]
    assert status.status == "completed"
    assert status.is_terminal
    assert status.result == {"stops": []}


def test_failed_job_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "failed", "error": "router offline"})

    with _client(handler) as client:
        with pytest.raises(JobFailedError, match="router offline"):
            client.wait_for_terminal("job-2")


def test_job_that_never_finishes_times_out():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "queued"})

    with _client(handler) as client:
        with pytest.raises(TimeoutError):
            client.wait_for_terminal("job-3", timeout=0)


def test_missing_job_id_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(202, json={})

    with _client(handler) as client:
        with pytest.raises(ValueError):
            client.submit("route.recalculate", {})
