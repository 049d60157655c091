"""Poster token stores.

A poster token is the bearer credential the job store hands out when a job
is created. It lets the original device act as the poster without a
connected wallet. Stores are passed explicitly into the orchestrator.

Writes always merge one job's token into the existing map; no
implementation ever replaces the whole map, so concurrent handlers never
drop each other's tokens.

Backends:
    - InMemoryTokenStore: tests and ephemeral sessions
    - FileTokenStore:     a local JSON file (the default; unsynced, lost if deleted)
    - RedisTokenStore:    a redis hash, for a shared operator deployment
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from jobs_board.config import get_settings
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    import redis.asyncio as aioredis

    from jobs_board.config import Settings

logger = get_logger(__name__)


@runtime_checkable
class PosterTokenStore(Protocol):
    async def get(self, job_id: str) -> str | None: ...

    async def put(self, job_id: str, token: str) -> None: ...

    async def all(self) -> dict[str, str]: ...


class InMemoryTokenStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._tokens: dict[str, str] = dict(initial or {})

    async def get(self, job_id: str) -> str | None:
        return self._tokens.get(job_id)

    async def put(self, job_id: str, token: str) -> None:
        self._tokens[job_id] = token

    async def all(self) -> dict[str, str]:
        return dict(self._tokens)


class FileTokenStore:
    """JSON map {job_id: token} in a local file.

    Every put re-reads the file under a lock, merges, and atomically
    replaces it, so tokens written by another handler in between survive.
    File access runs in a worker thread.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, job_id: str) -> str | None:
        return (await asyncio.to_thread(self._read)).get(job_id)

    async def put(self, job_id: str, token: str) -> None:
        async with self._lock:
            tokens = await asyncio.to_thread(self._read)
            tokens[job_id] = token
            await asyncio.to_thread(self._write, tokens)
        logger.info("token_store.saved", job_id=job_id, backend="file")

    async def all(self) -> dict[str, str]:
        return await asyncio.to_thread(self._read)

    def _read(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw or "{}")
        except json.JSONDecodeError:
            logger.warning("token_store.corrupt_file", path=str(self._path))
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, tokens: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".poster_tokens.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(tokens, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise


class RedisTokenStore:
    """Tokens as fields of one redis hash; HSET merges by construction."""

    def __init__(self, redis: aioredis.Redis, key: str = "jobs_board:poster_tokens") -> None:
        self._redis = redis
        self._key = key

    async def get(self, job_id: str) -> str | None:
        return await self._redis.hget(self._key, job_id)

    async def put(self, job_id: str, token: str) -> None:
        await self._redis.hset(self._key, job_id, token)
        logger.info("token_store.saved", job_id=job_id, backend="redis")

    async def all(self) -> dict[str, str]:
        return dict(await self._redis.hgetall(self._key))


async def build_token_store(settings: Settings | None = None) -> PosterTokenStore:
    """Create the configured token store backend."""
    settings = settings or get_settings()
    if settings.token_store_backend == "redis":
        from jobs_board.infrastructure.redis_client import init_redis

        return RedisTokenStore(await init_redis(settings))
    return FileTokenStore(settings.token_store_file)
