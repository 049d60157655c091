"""Pydantic API schemas."""

from jobs_board.schemas.api import ErrorResponse, HealthResponse
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

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "CreateJobRequest",
    "CreateJobResponse",
    "Job",
    "LeaderboardEntry",
    "MarkPaidRequest",
    "SelectWinnerRequest",
    "Stats",
    "Submission",
    "SubmitWorkRequest",
]
