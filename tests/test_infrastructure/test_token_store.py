"""Tests for poster token stores."""

from __future__ import annotations

import asyncio
import json
import threading
from unittest.mock import AsyncMock

import pytest

from jobs_board.infrastructure.token_store import (
    FileTokenStore,
    InMemoryTokenStore,
    PosterTokenStore,
    RedisTokenStore,
    build_token_store,
)


class TestFileTokenStore:
    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path) -> None:
        store = FileTokenStore(tmp_path / "tokens.json")
        assert await store.get("job_1") is None
        assert await store.all() == {}

    @pytest.mark.asyncio
    async def test_put_merges_with_existing(self, tmp_path) -> None:
        path = tmp_path / "tokens.json"
        path.write_text(json.dumps({"job_1": "tok_1"}))
        store = FileTokenStore(path)

        await store.put("job_2", "tok_2")

        assert json.loads(path.read_text()) == {"job_1": "tok_1", "job_2": "tok_2"}

    @pytest.mark.asyncio
    async def test_concurrent_puts_keep_every_token(self, tmp_path) -> None:
        store = FileTokenStore(tmp_path / "nested" / "tokens.json")

        await asyncio.gather(*(store.put(f"job_{i}", f"tok_{i}") for i in range(10)))

        assert len(await store.all()) == 10

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_empty(self, tmp_path) -> None:
        path = tmp_path / "tokens.json"
        path.write_text("{not json")
        assert await FileTokenStore(path).all() == {}

    @pytest.mark.asyncio
    async def test_file_access_off_event_loop_thread(self, tmp_path, monkeypatch) -> None:
        store = FileTokenStore(tmp_path / "tokens.json")
        threads: list[int] = []
        read, write = store._read, store._write

        def tracked_read() -> dict[str, str]:
            threads.append(threading.get_ident())
            return read()

        def tracked_write(tokens: dict[str, str]) -> None:
            threads.append(threading.get_ident())
            write(tokens)

        monkeypatch.setattr(store, "_read", tracked_read)
        monkeypatch.setattr(store, "_write", tracked_write)

        await store.put("job_1", "tok_1")
        assert await store.get("job_1") == "tok_1"

        assert len(threads) == 3
        assert threading.get_ident() not in threads


class TestRedisTokenStore:
    @pytest.mark.asyncio
    async def test_uses_one_hash(self) -> None:
        redis = AsyncMock()
        redis.hget.return_value = "tok_1"
        store = RedisTokenStore(redis, key="tokens")

        await store.put("job_1", "tok_1")

        redis.hset.assert_awaited_once_with("tokens", "job_1", "tok_1")
        assert await store.get("job_1") == "tok_1"


class TestBuild:
    @pytest.mark.asyncio
    async def test_default_is_file_store(self, settings, tmp_path) -> None:
        settings = settings.model_copy(update={"token_store_path": str(tmp_path / "t.json")})
        store = await build_token_store(settings)
        assert isinstance(store, FileTokenStore)
        assert isinstance(store, PosterTokenStore)

    def test_in_memory_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryTokenStore(), PosterTokenStore)
