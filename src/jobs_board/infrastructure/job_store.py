"""JobStoreClient — thin async client for the external job store API.

The job store owns jobs and submissions; this client only forwards calls
and turns its `{"error": "..."}` answers into JobStoreError. Idempotent
reads are retried on connection failures with tenacity; writes are sent
exactly once.

Usage:
    async with JobStoreClient.from_settings() as store:
        jobs = await store.list_jobs()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from jobs_board.config import get_settings
from jobs_board.domain.exceptions import JobStoreError
from jobs_board.logging_config import get_logger
from jobs_board.schemas.jobs import (
    CreateJobRequest,
    CreateJobResponse,
    Job,
    LeaderboardEntry,
    MarkPaidRequest,
    SelectWinnerRequest,
    Stats,
    Submission,
    SubmitWorkRequest,
)

if TYPE_CHECKING:
    from jobs_board.config import Settings
    from jobs_board.domain.models import PosterCredentials

logger = get_logger(__name__)


def _is_connection_failure(exc: BaseException) -> bool:
    return isinstance(exc, JobStoreError) and exc.status_code is None


class JobStoreClient:
    """CRUD surface of the job store."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        read_attempts: int = 3,
        backoff_seconds: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self._read_attempts = max(1, read_attempts)
        self._backoff_seconds = backoff_seconds

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> JobStoreClient:
        settings = settings or get_settings()
        return cls(
            base_url=settings.job_store_url,
            timeout=settings.job_store_timeout_seconds,
            read_attempts=settings.job_store_read_attempts,
        )

    async def __aenter__(self) -> JobStoreClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def list_jobs(self) -> list[Job]:
        data = await self._get("/jobs")
        return [Job.model_validate(item) for item in data.get("jobs") or []]

    async def create_job(self, request: CreateJobRequest) -> CreateJobResponse:
        data = await self._post("/jobs", json=request.model_dump(mode="json"))
        return CreateJobResponse.model_validate(data)

    async def select_winner(
        self,
        job_id: str,
        submission_id: str,
        credentials: PosterCredentials,
    ) -> dict:
        return await self._post(
            f"/jobs/{job_id}/select-winner",
            json=SelectWinnerRequest(submission_id=submission_id).model_dump(),
            headers=credentials.headers(),
        )

    async def mark_paid(
        self,
        job_id: str,
        credentials: PosterCredentials,
        tx_hash: str = "",
    ) -> dict:
        return await self._post(
            f"/jobs/{job_id}/mark-paid",
            json=MarkPaidRequest(tx_hash=tx_hash).model_dump(),
            headers=credentials.headers(),
        )

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    async def list_submissions(self, job_id: str) -> list[Submission]:
        data = await self._get(f"/jobs/{job_id}/submissions")
        return [Submission.model_validate(item) for item in data.get("submissions") or []]

    async def submit_work(self, job_id: str, request: SubmitWorkRequest) -> dict:
        return await self._post(f"/jobs/{job_id}/submissions", json=request.model_dump())

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def get_stats(self) -> Stats:
        return Stats.model_validate(await self._get("/stats"))

    async def get_leaderboard(self) -> list[LeaderboardEntry]:
        data = await self._get("/leaderboard")
        return [LeaderboardEntry.model_validate(item) for item in data.get("leaderboard") or []]

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get(self, path: str) -> dict:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._read_attempts),
            wait=wait_exponential(multiplier=self._backoff_seconds, max=5),
            retry=retry_if_exception(_is_connection_failure),
            reraise=True,
        ):
            with attempt:
                return await self._request("GET", path)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _post(self, path: str, json: Any, headers: dict[str, str] | None = None) -> dict:
        return await self._request("POST", path, json=json, headers=headers)

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> dict:
        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("job_store.unreachable", method=method, path=path, error=str(exc))
            raise JobStoreError(f"Job store unreachable: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        error = data.get("error") if isinstance(data, dict) else None
        if response.is_error or error:
            message = str(error or f"HTTP {response.status_code}")
            logger.warning(
                "job_store.request_failed",
                method=method,
                path=path,
                status=response.status_code,
                error=message,
            )
            raise JobStoreError(message, status_code=response.status_code)

        if not isinstance(data, dict):
            raise JobStoreError("Unexpected job store response", status_code=response.status_code)
        return data
