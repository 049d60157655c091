"""Tests for the registration index against a throwaway SQLite database."""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from jobs_board.domain.models import Registration
from jobs_board.infrastructure.database import create_tables, make_session_factory
from jobs_board.services.registration_index import RegistrationIndex

WORKER = "0x8ba1f109551bD432803012645Ac136ddd64DBA72"
OTHER = "0x2222222222222222222222222222222222222222"


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'index.db'}")
    await create_tables(engine)
    yield make_session_factory(engine)
    await engine.dispose()


def _events(by_block: dict[int, Registration]):
    async def get_registrations(from_block: int, to_block: int) -> list[Registration]:
        return [reg for block, reg in sorted(by_block.items()) if from_block <= block <= to_block]

    return get_registrations


class TestSync:
    @pytest.mark.asyncio
    async def test_replays_in_chunks_behind_head(self, reader: MagicMock, session_factory) -> None:
        reader.get_block_number.return_value = 26
        reader.get_registrations.side_effect = _events(
            {
                3: Registration(1, WORKER, "data:a", 3),
                12: Registration(2, OTHER, "data:b", 12),
                24: Registration(3, WORKER, "data:c", 24),
            }
        )
        index = RegistrationIndex(reader, session_factory, chunk_size=10, confirmations=1)

        assert await index.sync() == 3

        ranges = [c.args for c in reader.get_registrations.await_args_list]
        assert ranges == [(0, 9), (10, 19), (20, 25)]
        assert await index.last_block() == 25
        assert await index.count() == 3

    @pytest.mark.asyncio
    async def test_resumes_after_cursor(self, reader: MagicMock, session_factory) -> None:
        reader.get_block_number.return_value = 11
        index = RegistrationIndex(reader, session_factory, chunk_size=100, confirmations=1)
        await index.sync()

        reader.get_registrations.reset_mock()
        reader.get_block_number.return_value = 21
        await index.sync()

        reader.get_registrations.assert_awaited_once_with(11, 20)

    @pytest.mark.asyncio
    async def test_nothing_new_below_head(self, reader: MagicMock, session_factory) -> None:
        reader.get_block_number.return_value = 0
        index = RegistrationIndex(reader, session_factory, confirmations=1)

        assert await index.sync() == 0
        reader.get_registrations.assert_not_awaited()
        assert await index.last_block() is None

    @pytest.mark.asyncio
    async def test_replayed_events_are_not_double_counted(self, reader: MagicMock, session_factory) -> None:
        reader.get_block_number.return_value = 6
        reader.get_registrations.return_value = [Registration(7, WORKER, "data:a", 5)]
        index = RegistrationIndex(reader, session_factory, confirmations=0, start_block=5)
        assert await index.sync() == 1

        reader.get_block_number.return_value = 7
        assert await index.sync() == 0
        assert await index.count() == 1


class TestLookup:
    @pytest.mark.asyncio
    async def test_highest_agent_id_for_wallet(self, reader: MagicMock, session_factory) -> None:
        reader.get_block_number.return_value = 100
        reader.get_registrations.return_value = [
            Registration(4, WORKER, "", 10),
            Registration(9, WORKER.lower(), "", 20),
            Registration(5, OTHER, "", 30),
        ]
        index = RegistrationIndex(reader, session_factory, chunk_size=1000)
        await index.sync()

        assert await index.find_agent_id(WORKER) == 9
        assert await index.find_agent_id(OTHER) == 5
        assert await index.find_agent_id("0x3333333333333333333333333333333333333333") is None
