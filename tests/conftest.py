"""Shared test fixtures for the jobs board test suite.

Provides:
    - Settings isolated from the environment and .env
    - Factories for jobs, submissions and escrow records
    - A scripted fake signer and AsyncMock-based chain reader / job store
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from jobs_board.config import Settings
from jobs_board.domain.models import ZERO_ADDRESS, EscrowJobState, EscrowRecord, TxCall
from jobs_board.domain.signer_protocol import TxReceipt
from jobs_board.infrastructure.token_store import InMemoryTokenStore
from jobs_board.schemas.jobs import CreateJobResponse, Job, Submission

POSTER = "0x742d35Cc6634C0532925a3b844Bc9e7595f2bD18"
WORKER = "0x8ba1f109551bD432803012645Ac136ddd64DBA72"
STRANGER = "0x1111111111111111111111111111111111111111"
ESCROW_ADDRESS = "0xD43650250cEDDAF79FF72F44d28e3082F72420Ab"


class FakeSigner:
    """Records every call; failures are scripted per contract function name."""

    def __init__(self, address: str = POSTER) -> None:
        self.address = address
        self.sent: list[TxCall] = []
        self.send_errors: dict[str, Exception] = {}
        self.receipt_errors: dict[str, Exception] = {}
        self._names_by_hash: dict[str, str] = {}

    @property
    def sent_names(self) -> list[str]:
        return [call.name for call in self.sent]

    async def send(self, call: TxCall) -> str:
        self.sent.append(call)
        if call.name in self.send_errors:
            raise self.send_errors[call.name]
        tx_hash = f"0x{len(self.sent):064x}"
        self._names_by_hash[tx_hash] = call.name
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        name = self._names_by_hash[tx_hash]
        if name in self.receipt_errors:
            raise self.receipt_errors[name]
        return TxReceipt(tx_hash=tx_hash, status=1, block_number=100)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        app_env="development",
        signer_private_key="",
        job_store_url="http://jobstore.test/api",
        confirmation_timeout_seconds=5.0,
        chain_read_concurrency=4,
    )


# ---------------------------------------------------------------------------
# Domain factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_job():
    def _make(**overrides: Any) -> Job:
        data: dict[str, Any] = {
            "id": "job_1",
            "title": "Summarize a paper",
            "description": "Write a 500 word summary of the attached research paper in plain English.",
            "reward": Decimal("10.00"),
            "poster_wallet": POSTER,
            "status": "open",
        }
        data.update(overrides)
        return Job.model_validate(data)

    return _make


@pytest.fixture
def make_submission():
    def _make(**overrides: Any) -> Submission:
        data: dict[str, Any] = {
            "id": "sub_1",
            "job_id": "job_1",
            "worker_wallet": WORKER,
            "content": "Here is the summary.",
        }
        data.update(overrides)
        return Submission.model_validate(data)

    return _make


@pytest.fixture
def make_escrow():
    def _make(**overrides: Any) -> EscrowRecord:
        data: dict[str, Any] = {"job_id": "job_1", "amount": Decimal("10")}
        data.update(overrides)
        return EscrowRecord(**data)

    return _make


@pytest.fixture
def escrow_state():
    """Build a raw getJob() state; poster defaults to the zero address (unfunded)."""

    def _make(**overrides: Any) -> EscrowJobState:
        data: dict[str, Any] = {
            "poster": ZERO_ADDRESS,
            "amount": 0,
            "winner": ZERO_ADDRESS,
            "released": False,
            "refunded": False,
            "created_at": 0,
        }
        data.update(overrides)
        return EscrowJobState(**data)

    return _make


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def reader() -> MagicMock:
    """ChainReader double; every query is an AsyncMock with a 'nothing there' default."""
    mock = MagicMock()
    mock.get_balance = AsyncMock(return_value=0)
    mock.get_total_agents = AsyncMock(return_value=0)
    mock.get_owner = AsyncMock(return_value=None)
    mock.get_reputation = AsyncMock(return_value=(0, 0))
    mock.get_escrow_job = AsyncMock(
        return_value=EscrowJobState(ZERO_ADDRESS, 0, ZERO_ADDRESS, False, False, 0)
    )
    mock.get_allowance = AsyncMock(return_value=0)
    mock.get_block_number = AsyncMock(return_value=0)
    mock.get_registrations = AsyncMock(return_value=[])
    mock.escrow.address = ESCROW_ADDRESS
    return mock


@pytest.fixture
def job_store() -> MagicMock:
    mock = MagicMock()
    mock.list_jobs = AsyncMock(return_value=[])
    mock.create_job = AsyncMock(
        return_value=CreateJobResponse(id="job_new", poster_token="tok_new")
    )
    mock.select_winner = AsyncMock(return_value={"success": True})
    mock.mark_paid = AsyncMock(return_value={"success": True})
    mock.list_submissions = AsyncMock(return_value=[])
    mock.submit_work = AsyncMock(return_value={"id": "sub_new"})
    mock.get_stats = AsyncMock()
    mock.get_leaderboard = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()
