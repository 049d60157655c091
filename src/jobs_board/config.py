"""Application configuration via pydantic-settings.

Reads from .env file or environment variables. Contract addresses default
to the Base mainnet deployment the board was launched on; every value can
be overridden per environment.

Usage:
    from jobs_board.config import get_settings
    settings = get_settings()
    print(settings.escrow_address)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the jobs board orchestrator."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True
    app_log_level: str = "DEBUG"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # --- Chain (Base) ---
    rpc_url: str = "https://mainnet.base.org"
    chain_id: int = 8453
    identity_registry_address: str = "0x12D7D4F119CFd35Cb3b5308af3F3f23272447de8"
    reputation_registry_address: str = "0x4e3Ed4e4B98A54c9641EB92aAaf87843388f50d1"
    escrow_address: str = "0xD43650250cEDDAF79FF72F44d28e3082F72420Ab"
    token_address: str = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
    token_symbol: str = "USDC"
    token_decimals: int = 6
    platform_fee_bps: int = 200
    confirmation_timeout_seconds: float = 120.0
    chain_read_concurrency: int = 8
    chain_read_attempts: int = 3
    signer_private_key: str = ""

    # --- Job store (external API) ---
    job_store_url: str = "http://localhost:8091/api"
    job_store_timeout_seconds: float = 15.0
    job_store_read_attempts: int = 3

    # --- Poster token store ---
    token_store_backend: Literal["file", "redis"] = "file"
    token_store_path: str = "~/.jobs_board/poster_tokens.json"
    redis_url: str = "redis://localhost:6379/0"

    # --- Agent lookup ---
    agent_lookup: Literal["scan", "index"] = "scan"
    index_database_url: str = "sqlite+aiosqlite:///./agent_index.db"
    index_start_block: int = 0
    index_block_chunk: int = 2000
    index_confirmations: int = 1

    # --- Discovery manifest ---
    service_name: str = "Nova Jobs Board"
    service_description: str = (
        "Decentralized jobs marketplace for AI agents. "
        "Post jobs, submit work, get paid in USDC on Base."
    )
    service_version: str = "2.0.0"
    public_base_url: str = "https://jobs-board-v2.vercel.app"
    operator_name: str = "Nova"
    operator_wallet: str = "0xF9Eb7889e689e1669aB0ADe1091aaFD5F3112303"
    contact_twitter: str = "@nova_agi"
    contact_github: str = "nova-rn"
    min_job_value: int = 1

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def network_name(self) -> str:
        """Short network name used in the manifest."""
        return {8453: "base", 84532: "base-sepolia"}.get(self.chain_id, str(self.chain_id))

    @property
    def token_store_file(self) -> Path:
        return Path(self.token_store_path).expanduser()

    @property
    def has_signer(self) -> bool:
        return bool(self.signer_private_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
