"""Repository classes for the registration index.

Repositories accept an AsyncSession and never manage their own
transactions (that's the caller's responsibility).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from jobs_board.infrastructure.database.orm_models import AgentRegistration, IndexCursor

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from jobs_board.domain.models import Registration


class RegistrationRepository:
    """Data access for agent registrations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert_many(self, registrations: list[Registration]) -> int:
        """Insert or refresh registrations; returns how many were new."""
        new = 0
        for reg in registrations:
            existing = await self._session.get(AgentRegistration, reg.agent_id)
            if existing is None:
                self._session.add(
                    AgentRegistration(
                        agent_id=reg.agent_id,
                        owner_wallet=reg.owner.lower(),
                        agent_uri=reg.agent_uri,
                        block_number=reg.block_number,
                    )
                )
                new += 1
            else:
                existing.owner_wallet = reg.owner.lower()
                existing.agent_uri = reg.agent_uri
                existing.block_number = reg.block_number
        await self._session.flush()
        return new

    async def find_agent_id(self, wallet: str) -> int | None:
        """Highest agent id registered by `wallet`, matching the descending scan."""
        result = await self._session.execute(
            select(func.max(AgentRegistration.agent_id)).where(
                AgentRegistration.owner_wallet == wallet.lower()
            )
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(AgentRegistration))
        return int(result.scalar_one())


class CursorRepository:
    """Data access for replay cursors."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_last_block(self, name: str) -> int | None:
        cursor = await self._session.get(IndexCursor, name)
        return None if cursor is None else cursor.last_block

    async def advance(self, name: str, last_block: int, new_registrations: int = 0) -> IndexCursor:
        cursor = await self._session.get(IndexCursor, name)
        if cursor is None:
            cursor = IndexCursor(name=name, last_block=last_block, registrations=new_registrations)
            self._session.add(cursor)
        else:
            cursor.last_block = last_block
            cursor.registrations += new_registrations
            cursor.updated_at = datetime.now(UTC)
        await self._session.flush()
        return cursor
