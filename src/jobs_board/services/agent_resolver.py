"""Agent Resolver — wallet -> ERC-8004 agent identity and reputation.

The identity registry has no reverse lookup, so the agent id of a wallet
is found either by scanning ownerOf from the newest id down (ScanLookup)
or by asking the locally replayed RegistrationIndex (IndexLookup).

Lookup failures are never fatal: a wallet that cannot be resolved is
simply shown without an agent badge.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol

from jobs_board.config import get_settings
from jobs_board.domain.models import AgentIdentity, Reputation, same_address
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jobs_board.chain.reader import ChainReader
    from jobs_board.config import Settings
    from jobs_board.services.registration_index import RegistrationIndex

logger = get_logger(__name__)


class AgentLookup(Protocol):
    async def find_agent_id(self, wallet: str) -> int | None: ...


class ScanLookup:
    """Descending ownerOf scan over every minted id.

    O(total_agents) calls per wallet in the worst case. The highest id
    owned by the wallet wins.
    """

    def __init__(self, reader: ChainReader) -> None:
        self._reader = reader

    async def find_agent_id(self, wallet: str) -> int | None:
        total = await self._reader.get_total_agents()
        lookups = 0
        found: int | None = None
        for agent_id in range(total, 0, -1):
            lookups += 1
            owner = await self._reader.get_owner(agent_id)
            if owner is not None and same_address(owner, wallet):
                found = agent_id
                break

        logger.info(
            "agent.scan_completed",
            wallet=wallet,
            total_agents=total,
            lookups=lookups,
            agent_id=found,
        )
        return found


class IndexLookup:
    """Reverse lookup through the persistent registration index."""

    def __init__(self, index: RegistrationIndex) -> None:
        self._index = index

    async def find_agent_id(self, wallet: str) -> int | None:
        return await self._index.find_agent_id(wallet)


class AgentResolver:
    """Resolves wallets to agent identities with normalized reputation."""

    def __init__(
        self,
        reader: ChainReader,
        lookup: AgentLookup | None = None,
        concurrency: int = 8,
    ) -> None:
        self._reader = reader
        self._lookup = lookup or ScanLookup(reader)
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    @classmethod
    def from_settings(
        cls,
        reader: ChainReader,
        index: RegistrationIndex | None = None,
        settings: Settings | None = None,
    ) -> AgentResolver:
        settings = settings or get_settings()
        lookup: AgentLookup
        if settings.agent_lookup == "index" and index is not None:
            lookup = IndexLookup(index)
        else:
            lookup = ScanLookup(reader)
        return cls(reader, lookup=lookup, concurrency=settings.chain_read_concurrency)

    async def find_agent_id(self, wallet: str) -> int | None:
        """Agent id owned by `wallet`, or None. Errors propagate."""
        if await self._reader.get_balance(wallet) == 0:
            return None
        return await self._lookup.find_agent_id(wallet)

    async def resolve(self, wallet: str) -> AgentIdentity | None:
        """Identity and reputation for `wallet`; None when unregistered or unreadable."""
        try:
            agent_id = await self.find_agent_id(wallet)
            if agent_id is None:
                return None
            raw_score, count = await self._reader.get_reputation(agent_id)
        except Exception as exc:
            logger.warning("agent.resolve_failed", wallet=wallet, error=str(exc))
            return None

        return AgentIdentity(
            wallet=wallet.lower(),
            agent_id=agent_id,
            reputation=Reputation.from_raw(raw_score, count),
        )

    async def resolve_many(self, wallets: Iterable[str]) -> dict[str, AgentIdentity]:
        """Resolve distinct wallets concurrently; unresolved wallets are omitted."""
        unique = list(dict.fromkeys(w.lower() for w in wallets if w))

        async def bounded(wallet: str) -> AgentIdentity | None:
            async with self._semaphore:
                return await self.resolve(wallet)

        results = await asyncio.gather(*(bounded(w) for w in unique))
        return {wallet: identity for wallet, identity in zip(unique, results) if identity is not None}
