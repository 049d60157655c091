"""Tests for the job store proxy routes."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from jobs_board.main import create_app


def _app_with_upstream(handler):
    app = create_app()
    app.state.upstream = httpx.AsyncClient(
        base_url="http://jobstore.test/api", transport=httpx.MockTransport(handler)
    )
    app.state.reader = None
    return app


@pytest.fixture
def recorded() -> list[httpx.Request]:
    return []


class TestJobsProxy:
    def test_get_forwards_path_and_query(self, recorded) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            recorded.append(request)
            return httpx.Response(200, json={"jobs": []})

        client = TestClient(_app_with_upstream(handler))
        response = client.get("/api/jobs", params={"status": "open"})

        assert response.status_code == 200
        assert response.json() == {"jobs": []}
        assert recorded[0].url.path == "/api/jobs"
        assert recorded[0].url.params["status"] == "open"

    def test_post_forwards_body_and_credentials(self, recorded) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            recorded.append(request)
            return httpx.Response(200, json={"success": True})

        client = TestClient(_app_with_upstream(handler))
        response = client.post(
            "/api/jobs/job_1/select-winner",
            json={"submission_id": "sub_1"},
            headers={"X-Token": "tok", "X-Wallet": "0xabc"},
        )

        assert response.status_code == 200
        upstream = recorded[0]
        assert upstream.method == "POST"
        assert upstream.url.path == "/api/jobs/job_1/select-winner"
        assert upstream.headers["X-Token"] == "tok"
        assert upstream.headers["X-Wallet"] == "0xabc"
        assert json.loads(upstream.content) == {"submission_id": "sub_1"}

    def test_upstream_status_passed_through(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "Unauthorized"})

        client = TestClient(_app_with_upstream(handler))
        response = client.post("/api/jobs/job_1/mark-paid", json={})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_unreachable_upstream(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = TestClient(_app_with_upstream(handler))
        response = client.get("/api/jobs")

        assert response.status_code == 500
        assert response.json()["error"] == "Proxy error"
        assert "refused" in response.json()["details"]


class TestStatsProxy:
    def test_stats_fallback_zeros(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = TestClient(_app_with_upstream(handler))
        response = client.get("/api/stats")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Proxy error"
        assert body["open"] == 0
        assert body["totalPending"] == 0

    def test_leaderboard(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/leaderboard"
            return httpx.Response(200, json={"leaderboard": [{"wallet": "0xabc", "earned": 9.8}]})

        client = TestClient(_app_with_upstream(handler))
        assert client.get("/api/leaderboard").json()["leaderboard"][0]["wallet"] == "0xabc"


class TestMiddleware:
    def test_request_id_echoed(self) -> None:
        client = TestClient(_app_with_upstream(lambda request: httpx.Response(200, json={})))
        response = client.get("/api/stats", headers={"X-Request-ID": "req-1"})
        assert response.headers["X-Request-ID"] == "req-1"

    def test_missing_upstream_is_503(self) -> None:
        client = TestClient(create_app())
        assert client.get("/api/stats").status_code == 503
