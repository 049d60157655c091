"""FastAPI dependency injection providers.

The upstream job store client and the chain reader are created once in
the application lifespan and stored on app.state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, Request

from jobs_board.config import Settings, get_settings

if TYPE_CHECKING:
    import httpx

    from jobs_board.chain.reader import ChainReader


def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """Provide the shared httpx client pointed at the job store."""
    client = getattr(request.app.state, "upstream", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Upstream client not initialized")
    return client


def get_chain_reader(request: Request) -> ChainReader | None:
    return getattr(request.app.state, "reader", None)


def get_app_settings() -> Settings:
    """Provide the application settings."""
    return get_settings()
