"""Health check endpoint.

Verifies connectivity to the job store and the RPC node, returns
structured status. Used by load balancers and monitoring systems.
"""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends

from jobs_board.api.deps import get_app_settings, get_chain_reader, get_upstream_client
from jobs_board.chain.reader import ChainReader
from jobs_board.config import Settings
from jobs_board.logging_config import get_logger
from jobs_board.schemas.api import HealthResponse

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the proxy and its upstreams.",
)
async def health_check(
    upstream: httpx.AsyncClient = Depends(get_upstream_client),
    reader: ChainReader | None = Depends(get_chain_reader),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """Check connectivity to the job store and the chain."""
    job_store_status = "unknown"
    chain_status = "not configured"

    try:
        response = await upstream.get("/stats")
        response.raise_for_status()
        job_store_status = "healthy"
    except httpx.HTTPError as exc:
        job_store_status = f"unhealthy: {exc}"
        logger.error("health.job_store_check_failed", error=str(exc))

    if reader is not None:
        try:
            block = await reader.get_block_number()
            chain_status = f"healthy (block {block})"
        except Exception as exc:
            chain_status = f"unhealthy: {exc}"
            logger.error("health.chain_check_failed", error=str(exc))

    overall = "ok" if job_store_status == "healthy" and not chain_status.startswith("unhealthy") else "degraded"

    return HealthResponse(
        status=overall,
        version=settings.service_version,
        job_store=job_store_status,
        chain=chain_status,
    )
