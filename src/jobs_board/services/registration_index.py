"""Registration Index — replays Registered events into a reverse lookup table.

Only registrations are replayed: identities are assumed non-transferable,
so the owner at registration time is the owner now. The index lags the
chain head by `confirmations` blocks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jobs_board.infrastructure.database.repositories import (
    CursorRepository,
    RegistrationRepository,
)
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from jobs_board.chain.reader import ChainReader
    from jobs_board.config import Settings

logger = get_logger(__name__)

CURSOR_NAME = "identity_registry"


class RegistrationIndex:
    """wallet -> agent id, persisted in the index database."""

    def __init__(
        self,
        reader: ChainReader,
        session_factory: async_sessionmaker[AsyncSession],
        start_block: int = 0,
        chunk_size: int = 2000,
        confirmations: int = 1,
    ) -> None:
        self._reader = reader
        self._session_factory = session_factory
        self._start_block = start_block
        self._chunk_size = max(1, chunk_size)
        self._confirmations = max(0, confirmations)

    @classmethod
    def from_settings(
        cls,
        reader: ChainReader,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ) -> RegistrationIndex:
        return cls(
            reader,
            session_factory,
            start_block=settings.index_start_block,
            chunk_size=settings.index_block_chunk,
            confirmations=settings.index_confirmations,
        )

    async def last_block(self) -> int | None:
        async with self._session_factory() as session:
            return await CursorRepository(session).get_last_block(CURSOR_NAME)

    async def sync(self) -> int:
        """Replay new blocks; returns the number of newly indexed agents.

        Each chunk commits its registrations together with the cursor, so
        an interrupted sync resumes at the first unfinished chunk.
        """
        head = await self._reader.get_block_number() - self._confirmations
        last = await self.last_block()
        from_block = self._start_block if last is None else last + 1
        if from_block > head:
            return 0

        total_new = 0
        while from_block <= head:
            to_block = min(from_block + self._chunk_size - 1, head)
            registrations = await self._reader.get_registrations(from_block, to_block)
            async with self._session_factory() as session:
                new = await RegistrationRepository(session).upsert_many(registrations)
                await CursorRepository(session).advance(CURSOR_NAME, to_block, new)
                await session.commit()
            total_new += new
            logger.debug(
                "index.chunk_synced",
                from_block=from_block,
                to_block=to_block,
                events=len(registrations),
            )
            from_block = to_block + 1

        logger.info("index.synced", head=head, new_registrations=total_new)
        return total_new

    async def find_agent_id(self, wallet: str) -> int | None:
        async with self._session_factory() as session:
            return await RegistrationRepository(session).find_agent_id(wallet)

    async def count(self) -> int:
        async with self._session_factory() as session:
            return await RegistrationRepository(session).count()
