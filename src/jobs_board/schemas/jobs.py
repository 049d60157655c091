"""Pydantic schemas for the external job store API.

Response schemas are lenient (unknown fields ignored, sensible defaults)
because the job store is owned elsewhere and evolves independently.
Request schemas are strict: they are the local validation gate that runs
before any network call.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobs_board.domain.enums import JobStatus, PaymentStatus, SubmissionStatus

# ---------------------------------------------------------------------------
# Records owned by the job store
# ---------------------------------------------------------------------------


class Job(BaseModel):
    """Cached, possibly stale copy of a job record."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    description: str = ""
    reward: Decimal = Decimal(0)
    currency: str = "USDC"
    poster_wallet: str | None = None
    status: JobStatus = JobStatus.OPEN
    winner_wallet: str | None = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    submission_count: int = 0
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> str:
        return str(value)

    @property
    def is_open(self) -> bool:
        return self.status == JobStatus.OPEN

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


class Submission(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    job_id: str = ""
    worker_wallet: str = ""
    content: str = ""
    status: SubmissionStatus = SubmissionStatus.PENDING
    created_at: datetime | None = None

    @field_validator("id", "job_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: object) -> str:
        return "" if value is None else str(value)


class Stats(BaseModel):
    """Board totals. Defaults double as the degraded display state."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    open: int = 0
    completed: int = 0
    total_rewards: Decimal = Field(default=Decimal(0), alias="totalRewards")
    total_paid: Decimal = Field(default=Decimal(0), alias="totalPaid")
    total_pending: Decimal = Field(default=Decimal(0), alias="totalPending")


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    wallet: str
    earned: Decimal = Decimal(0)
    jobs_won: int = Field(default=0, alias="jobsWon")


# ---------------------------------------------------------------------------
# Requests (validated locally before any call)
# ---------------------------------------------------------------------------


class CreateJobRequest(BaseModel):
    """Body for POST /jobs."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(
        ...,
        min_length=50,
        max_length=10_000,
        description="What the worker must deliver; at least 50 characters",
    )
    reward: Decimal = Field(..., gt=0, decimal_places=6)
    currency: str = "USDC"
    poster_wallet: str = Field(
        ...,
        min_length=42,
        max_length=42,
        description="EVM wallet address of the poster (0x-prefixed, 42 chars)",
    )


class CreateJobResponse(BaseModel):
    """POST /jobs answer; carries the one-time poster token."""

    model_config = ConfigDict(extra="allow")

    id: str
    poster_token: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> str:
        return str(value)


class SubmitWorkRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    worker_wallet: str = Field(..., min_length=42, max_length=42)
    content: str = Field(..., min_length=1, max_length=100_000)


class SelectWinnerRequest(BaseModel):
    submission_id: str = Field(..., min_length=1)


class MarkPaidRequest(BaseModel):
    tx_hash: str = ""
