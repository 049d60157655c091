"""Board View — the state a jobs board screen renders.

Holds the last good job list, stats, leaderboard, escrow overlay and
agent badges. Every refresh degrades instead of failing: jobs keep the
previous list, stats fall back to zeros, and a missing overlay or badge
reads as "not funded" / "not registered".
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Literal

from jobs_board.domain.enums import JobStatus
from jobs_board.domain.models import same_address
from jobs_board.logging_config import get_logger
from jobs_board.schemas.jobs import Stats
from jobs_board.services.escrow_reconciler import EscrowOverlay, JobView

if TYPE_CHECKING:
    from jobs_board.domain.models import AgentIdentity
    from jobs_board.infrastructure.job_store import JobStoreClient
    from jobs_board.schemas.jobs import Job, LeaderboardEntry
    from jobs_board.services.agent_resolver import AgentResolver
    from jobs_board.services.escrow_reconciler import EscrowReconciler

logger = get_logger(__name__)

StatusFilter = Literal["all", "open", "completed"]


class BoardView:
    """Aggregated, refreshable board state."""

    def __init__(
        self,
        job_store: JobStoreClient,
        reconciler: EscrowReconciler,
        resolver: AgentResolver,
    ) -> None:
        self._job_store = job_store
        self._reconciler = reconciler
        self._resolver = resolver
        self.jobs: list[Job] = []
        self.stats = Stats()
        self.leaderboard: list[LeaderboardEntry] = []
        self.agents: dict[str, AgentIdentity] = {}
        self.my_agent: AgentIdentity | None = None
        self.overlay = EscrowOverlay()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def refresh_jobs(self) -> list[Job]:
        try:
            jobs = await self._job_store.list_jobs()
        except Exception as exc:
            logger.warning("board.jobs_refresh_failed", error=str(exc))
            return self.jobs
        self._generation += 1
        self.jobs = jobs
        self.overlay.set_job_set((job.id for job in jobs), self._generation)
        logger.debug("board.jobs_refreshed", count=len(jobs), generation=self._generation)
        return jobs

    async def refresh_stats(self) -> Stats:
        try:
            self.stats = await self._job_store.get_stats()
        except Exception as exc:
            logger.warning("board.stats_refresh_failed", error=str(exc))
            self.stats = Stats()
        return self.stats

    async def refresh_leaderboard(self) -> list[LeaderboardEntry]:
        try:
            self.leaderboard = await self._job_store.get_leaderboard()
        except Exception as exc:
            logger.warning("board.leaderboard_refresh_failed", error=str(exc))
        return self.leaderboard

    async def refresh_escrow(self) -> None:
        """Reconcile the current job list; the result is tagged with its generation."""
        generation = self._generation
        jobs = list(self.jobs)
        records = await self._reconciler.reconcile(jobs)
        self.overlay.apply(records, [job.id for job in jobs], generation)

    async def refresh_agents(self) -> dict[str, AgentIdentity]:
        """Agent badges for leaderboard wallets."""
        self.agents = await self._resolver.resolve_many(entry.wallet for entry in self.leaderboard)
        return self.agents

    async def refresh_all(self) -> None:
        """Jobs, stats and leaderboard together, then the overlays that depend on them."""
        await asyncio.gather(self.refresh_jobs(), self.refresh_stats(), self.refresh_leaderboard())
        await asyncio.gather(self.refresh_escrow(), self.refresh_agents())

    async def check_my_agent(self, wallet: str | None) -> AgentIdentity | None:
        self.my_agent = await self._resolver.resolve(wallet) if wallet else None
        return self.my_agent

    def agent_for(self, wallet: str | None) -> AgentIdentity | None:
        return self.agents.get(wallet.lower()) if wallet else None

    def filtered_jobs(
        self,
        status: StatusFilter = "all",
        mine_only: bool = False,
        wallet: str | None = None,
    ) -> list[Job]:
        jobs = self.jobs
        if status != "all":
            wanted = JobStatus(status)
            jobs = [job for job in jobs if job.status == wanted]
        if mine_only:
            jobs = [job for job in jobs if same_address(job.poster_wallet, wallet)]
        return jobs

    def job_views(
        self,
        status: StatusFilter = "all",
        mine_only: bool = False,
        wallet: str | None = None,
    ) -> list[JobView]:
        return [
            JobView(job, self.overlay.get(job.id))
            for job in self.filtered_jobs(status, mine_only, wallet)
        ]
