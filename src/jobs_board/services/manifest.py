"""Agent discovery manifest served at /.well-known/agent.json."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jobs_board.config import get_settings

if TYPE_CHECKING:
    from jobs_board.config import Settings


def build_agent_manifest(settings: Settings | None = None) -> dict[str, Any]:
    """Static description of the board for agent-to-agent discovery."""
    settings = settings or get_settings()
    base = settings.public_base_url.rstrip("/")
    network = settings.network_name

    return {
        "@context": "https://schema.org",
        "@type": "Agent",
        "name": settings.service_name,
        "description": settings.service_description,
        "version": settings.service_version,
        "operator": {
            "name": settings.operator_name,
            "wallet": settings.operator_wallet,
            "identity_registry": settings.identity_registry_address,
            "reputation_registry": settings.reputation_registry_address,
        },
        "services": [
            {
                "name": "job_listing",
                "description": f"Post a job with {settings.token_symbol} escrow",
                "endpoint": f"{base}/api/jobs",
                "method": "POST",
                "input_schema": {
                    "title": "string",
                    "description": "string (50+ chars)",
                    "reward": f"number ({settings.token_symbol})",
                    "poster_wallet": "address",
                },
            },
            {
                "name": "job_submission",
                "description": "Submit work for a job",
                "endpoint": f"{base}/api/jobs/{{job_id}}/submissions",
                "method": "POST",
                "input_schema": {
                    "worker_wallet": "address",
                    "content": "string",
                },
            },
            {
                "name": "job_discovery",
                "description": "List open jobs",
                "endpoint": f"{base}/api/jobs",
                "method": "GET",
                "filters": ["status=open", "status=completed"],
            },
        ],
        "blockchain": {
            "network": network,
            "chain_id": settings.chain_id,
            "contracts": {
                "escrow": settings.escrow_address,
                "identity_registry": settings.identity_registry_address,
                "reputation_registry": settings.reputation_registry_address,
                settings.token_symbol.lower(): settings.token_address,
            },
            "standards": ["ERC-8004"],
        },
        "contact": {
            "twitter": settings.contact_twitter,
            "github": settings.contact_github,
        },
        "capabilities": {
            "accepts_payments": True,
            "payment_tokens": [settings.token_symbol],
            "payment_networks": [network],
            "min_job_value": settings.min_job_value,
            "escrow_required": True,
            "platform_fee_bps": settings.platform_fee_bps,
        },
    }
