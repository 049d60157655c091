"""Tests for the domain error -> HTTP status mapping."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jobs_board.api.middleware import setup_middleware
from jobs_board.domain.exceptions import (
    AuthorizationError,
    ConfirmationTimeoutError,
    InvalidStateTransitionError,
    JobStoreError,
    ValidationError,
)


def _raising_app(exc: Exception) -> FastAPI:
    app = FastAPI()
    setup_middleware(app)

    @app.get("/boom")
    async def boom() -> None:
        raise exc

    return app


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (ValidationError("Fill all fields"), 400),
            (AuthorizationError(), 401),
            (InvalidStateTransitionError("CHECK_ALLOWANCE", "funded"), 409),
            (JobStoreError("down"), 502),
            (ConfirmationTimeoutError("0xabc", 5.0), 504),
        ],
    )
    def test_domain_errors(self, exc: Exception, status: int) -> None:
        response = TestClient(_raising_app(exc)).get("/boom")
        assert response.status_code == status
        assert response.json()["message"] == exc.message

    def test_unexpected_error(self) -> None:
        response = TestClient(_raising_app(RuntimeError("bug"))).get("/boom")
        assert response.status_code == 500
        assert response.json()["error"] == "INTERNAL_ERROR"
