"""Job store proxy routes.

The browser board talks to the job store through these routes so it never
has to reach the job store's origin directly. Requests are forwarded
as-is (method, sub-path, query string, JSON body, X-Token / X-Wallet) and
the upstream status code and JSON body are passed back unchanged.

Routes:
    GET|POST /api/jobs
    GET|POST /api/jobs/{path}
    GET      /api/stats
    GET      /api/leaderboard
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from jobs_board.api.deps import get_upstream_client
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

router = APIRouter(prefix="/api", tags=["Proxy"])
logger = get_logger(__name__)

FORWARDED_HEADERS = ("X-Token", "X-Wallet")
EMPTY_STATS = {"open": 0, "completed": 0, "totalRewards": 0, "totalPaid": 0, "totalPending": 0}


def _forward_headers(headers: Mapping[str, str]) -> dict[str, str]:
    forwarded = {"Content-Type": "application/json"}
    for name in FORWARDED_HEADERS:
        value = headers.get(name)
        if value:
            forwarded[name] = value
    return forwarded


def _proxy_error(exc: Exception) -> JSONResponse:
    logger.error("proxy.upstream_failed", error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Proxy error", "details": str(exc)})


@router.api_route("/jobs", methods=["GET", "POST"], summary="Proxy job store /jobs")
@router.api_route("/jobs/{path:path}", methods=["GET", "POST"], summary="Proxy job store /jobs/*")
async def proxy_jobs(
    request: Request,
    path: str = "",
    upstream: httpx.AsyncClient = Depends(get_upstream_client),
) -> JSONResponse:
    target = "/jobs" + (f"/{path.lstrip('/')}" if path else "")
    body = await request.body() if request.method == "POST" else None
    try:
        response = await upstream.request(
            request.method,
            target,
            params=request.query_params,
            content=body or None,
            headers=_forward_headers(request.headers),
        )
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        return _proxy_error(exc)

    logger.debug("proxy.forwarded", method=request.method, target=target, status=response.status_code)
    return JSONResponse(status_code=response.status_code, content=data)


@router.get("/stats", summary="Proxy job store /stats")
async def proxy_stats(upstream: httpx.AsyncClient = Depends(get_upstream_client)) -> JSONResponse:
    """Board totals; zeros plus an error marker when the job store is down."""
    try:
        response = await upstream.get("/stats")
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("proxy.stats_failed", error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Proxy error", **EMPTY_STATS})
    return JSONResponse(status_code=response.status_code, content=data)


@router.get("/leaderboard", summary="Proxy job store /leaderboard")
async def proxy_leaderboard(upstream: httpx.AsyncClient = Depends(get_upstream_client)) -> JSONResponse:
    try:
        response = await upstream.get("/leaderboard")
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        return _proxy_error(exc)
    return JSONResponse(status_code=response.status_code, content=data)
