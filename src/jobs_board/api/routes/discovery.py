"""Agent discovery endpoint — /.well-known/agent.json."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from jobs_board.api.deps import get_app_settings
from jobs_board.config import Settings
from jobs_board.services.manifest import build_agent_manifest

router = APIRouter(tags=["Discovery"])


@router.get(
    "/.well-known/agent.json",
    summary="Agent discovery manifest",
    description="Identity, services, contracts and capabilities of the board.",
)
async def agent_manifest(settings: Settings = Depends(get_app_settings)) -> JSONResponse:
    return JSONResponse(
        content=build_agent_manifest(settings),
        headers={"Access-Control-Allow-Origin": "*"},
    )
