"""Escrow Reconciler — overlays on-chain escrow facts onto off-chain jobs.

The job store and the escrow contract evolve independently. Neither is
forced to agree with the other: a JobView exposes both and derives the
display state and the offered actions from the pair.

Overlay updates are keyed by job id and tagged with the generation of the
job list they were requested for, so a slow response for an old job list
never clobbers a newer one.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from jobs_board.domain.enums import Action, EscrowState, JobStatus, PaymentStatus
from jobs_board.domain.models import EscrowRecord, same_address
from jobs_board.domain.money import from_units
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jobs_board.chain.reader import ChainReader
    from jobs_board.schemas.jobs import Job

logger = get_logger(__name__)


class EscrowReconciler:
    """Reads the escrow contract for a list of jobs."""

    def __init__(self, reader: ChainReader, decimals: int = 6, concurrency: int = 8) -> None:
        self._reader = reader
        self._decimals = decimals
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def read_one(self, job_id: str) -> EscrowRecord | None:
        """Escrow record for a job, or None if never funded. Errors propagate."""
        state = await self._reader.get_escrow_job(job_id)
        if not state.is_funded:
            return None
        record = EscrowRecord(
            job_id=job_id,
            amount=from_units(state.amount, self._decimals),
            winner=state.winner,
            released=state.released,
            refunded=state.refunded,
            created_at=state.created_at,
        )
        if not record.is_consistent:
            logger.warning("escrow.inconsistent_record", job_id=job_id)
        return record

    async def reconcile(self, jobs: Iterable[Job]) -> dict[str, EscrowRecord]:
        """One escrow read per job; unfunded and unreadable jobs are omitted."""
        job_ids = list(dict.fromkeys(job.id for job in jobs))

        async def bounded(job_id: str) -> EscrowRecord | None:
            async with self._semaphore:
                try:
                    return await self.read_one(job_id)
                except Exception as exc:
                    logger.warning("escrow.read_failed", job_id=job_id, error=str(exc))
                    return None

        records = await asyncio.gather(*(bounded(job_id) for job_id in job_ids))
        return {record.job_id: record for record in records if record is not None}


class EscrowOverlay:
    """Current {job_id: EscrowRecord} overlay for the displayed job set."""

    def __init__(self) -> None:
        self._records: dict[str, EscrowRecord] = {}
        self._written_by: dict[str, int] = {}
        self._job_ids: set[str] = set()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def records(self) -> dict[str, EscrowRecord]:
        return dict(self._records)

    def get(self, job_id: str) -> EscrowRecord | None:
        return self._records.get(job_id)

    def set_job_set(self, job_ids: Iterable[str], generation: int) -> None:
        """Adopt a new job list; records for jobs no longer listed are dropped."""
        self._job_ids = set(job_ids)
        self._generation = generation
        for job_id in list(self._records):
            if job_id not in self._job_ids:
                del self._records[job_id]
                self._written_by.pop(job_id, None)

    def apply(
        self,
        records: dict[str, EscrowRecord],
        requested_ids: Iterable[str],
        generation: int,
    ) -> None:
        """Merge a reconcile result requested for `generation`.

        Current generation: the requested ids are replaced outright. Older
        generation: only ids still displayed and not already written by a
        newer request are touched.
        """
        requested = set(requested_ids)
        if generation > self._generation:
            logger.debug("escrow.overlay_future_generation", generation=generation)
            return

        if generation == self._generation:
            targets = requested & self._job_ids
        else:
            targets = {
                job_id
                for job_id in requested & self._job_ids
                if self._written_by.get(job_id, -1) <= generation
            }

        for job_id in targets:
            record = records.get(job_id)
            if record is None:
                self._records.pop(job_id, None)
            else:
                self._records[job_id] = record
            self._written_by[job_id] = generation


class JobView:
    """A job as displayed: off-chain record plus optional escrow overlay."""

    def __init__(self, job: Job, escrow: EscrowRecord | None = None) -> None:
        self.job = job
        self.escrow = escrow

    @property
    def is_funded(self) -> bool:
        return self.escrow is not None and self.escrow.funded

    @property
    def escrow_state(self) -> EscrowState:
        if self.escrow is None:
            return EscrowState.NONE
        if self.escrow.released:
            return EscrowState.RELEASED
        if self.escrow.refunded:
            return EscrowState.REFUNDED
        return EscrowState.ESCROWED

    @property
    def payment_badge(self) -> PaymentStatus | None:
        """Off-chain paid/unpaid badge; only shown for completed jobs without escrow."""
        if self.job.status != JobStatus.COMPLETED or self.is_funded:
            return None
        return self.job.payment_status

    @property
    def awaiting_release(self) -> bool:
        """Completed off-chain but the escrowed funds were not released yet."""
        return (
            self.job.status == JobStatus.COMPLETED
            and self.is_funded
            and not self.escrow.released
            and not self.escrow.refunded
        )

    def is_poster(self, wallet: str | None) -> bool:
        return same_address(wallet, self.job.poster_wallet)

    def available_actions(self, viewer_wallet: str | None) -> set[Action]:
        actions = {Action.VIEW_SUBMISSIONS}
        is_open = self.job.status == JobStatus.OPEN
        is_completed = self.job.status == JobStatus.COMPLETED
        poster = self.is_poster(viewer_wallet)
        escrow = self.escrow

        if is_open and not poster:
            actions.add(Action.SUBMIT_WORK)

        if not poster:
            return actions

        if is_open and not self.is_funded:
            actions.add(Action.FUND_ESCROW)

        if (
            is_open
            and escrow is not None
            and not escrow.is_settled
            and not escrow.has_winner
            and not self.job.winner_wallet
        ):
            actions.add(Action.REFUND)

        if is_completed and escrow is not None and not escrow.is_settled:
            actions.add(Action.RELEASE_FUNDS)

        if is_completed and not self.is_funded and not self.job.is_paid:
            actions.add(Action.MARK_PAID)

        if is_completed and (self.job.is_paid or (escrow is not None and escrow.released)):
            actions.add(Action.LEAVE_FEEDBACK)

        return actions
