"""ChainReader — read-only facade over the identity, reputation, escrow
and token contracts.

Every query is an independent eth_call with no side effects. "Entity does
not exist" (ownerOf on an unminted id) comes back as None instead of an
exception so callers can probe for existence; every other failure is
wrapped in ChainReadError. Transient failures are retried with backoff;
reverts never are.

Usage:
    reader = ChainReader.from_settings()
    owner = await reader.get_owner(12)
    state = await reader.get_escrow_job("job_abc")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import ContractLogicError

from jobs_board.chain.abis import ERC20_ABI, ESCROW_ABI, IDENTITY_ABI, REPUTATION_ABI
from jobs_board.config import get_settings
from jobs_board.domain.exceptions import ChainReadError
from jobs_board.domain.models import EscrowJobState, Registration, is_zero_address
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from jobs_board.config import Settings

logger = get_logger(__name__)


def _is_transient(exc: BaseException) -> bool:
    return not isinstance(exc, ContractLogicError)


class ChainReader:
    """Read-only queries against the board's contracts."""

    def __init__(
        self,
        identity: Any,
        reputation: Any,
        escrow: Any,
        token: Any,
        w3: AsyncWeb3 | None = None,
        read_attempts: int = 3,
        backoff_seconds: float = 0.5,
    ) -> None:
        self._identity = identity
        self._reputation = reputation
        self._escrow = escrow
        self._token = token
        self._w3 = w3
        self._read_attempts = max(1, read_attempts)
        self._backoff_seconds = backoff_seconds

    @classmethod
    def from_settings(cls, settings: Settings | None = None, w3: AsyncWeb3 | None = None) -> ChainReader:
        """Build contract bindings from configured addresses."""
        settings = settings or get_settings()
        w3 = w3 or AsyncWeb3(AsyncHTTPProvider(settings.rpc_url))

        def bind(address: str, abi: list) -> Any:
            return w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

        return cls(
            identity=bind(settings.identity_registry_address, IDENTITY_ABI),
            reputation=bind(settings.reputation_registry_address, REPUTATION_ABI),
            escrow=bind(settings.escrow_address, ESCROW_ABI),
            token=bind(settings.token_address, ERC20_ABI),
            w3=w3,
            read_attempts=settings.chain_read_attempts,
        )

    @property
    def w3(self) -> AsyncWeb3 | None:
        return self._w3

    @property
    def identity(self) -> Any:
        return self._identity

    @property
    def reputation(self) -> Any:
        return self._reputation

    @property
    def escrow(self) -> Any:
        return self._escrow

    @property
    def token(self) -> Any:
        return self._token

    # ------------------------------------------------------------------
    # Identity registry
    # ------------------------------------------------------------------

    async def get_balance(self, wallet: str) -> int:
        """Number of agent identities owned by `wallet` (0 or 1 expected)."""
        fn = self._identity.functions.balanceOf(Web3.to_checksum_address(wallet))
        return int(await self._call("balanceOf", fn.call))

    async def get_total_agents(self) -> int:
        return int(await self._call("totalAgents", self._identity.functions.totalAgents().call))

    async def get_owner(self, agent_id: int) -> str | None:
        """Owner of `agent_id`, or None if the id was never minted."""
        try:
            owner = await self._read(self._identity.functions.ownerOf(agent_id).call)
        except ContractLogicError:
            return None
        except Exception as exc:
            raise ChainReadError("ownerOf", str(exc)) from exc
        if is_zero_address(owner):
            return None
        return owner

    async def get_registrations(self, from_block: int, to_block: int) -> list[Registration]:
        """Decoded Registered events in [from_block, to_block]."""
        event = self._identity.events.Registered()
        logs = await self._call(
            "Registered.get_logs",
            lambda: event.get_logs(from_block=from_block, to_block=to_block),
        )
        return [
            Registration(
                agent_id=int(log["args"]["agentId"]),
                owner=log["args"]["owner"],
                agent_uri=log["args"].get("agentURI", ""),
                block_number=int(log["blockNumber"]),
            )
            for log in logs
        ]

    # ------------------------------------------------------------------
    # Reputation registry
    # ------------------------------------------------------------------

    async def get_reputation(self, agent_id: int) -> tuple[int, int]:
        """Raw (score scaled by 1e18, feedback count) for an agent."""
        score, count = await self._call(
            "getReputation", self._reputation.functions.getReputation(agent_id).call
        )
        return int(score), int(count)

    # ------------------------------------------------------------------
    # Escrow
    # ------------------------------------------------------------------

    async def get_escrow_job(self, job_id: str) -> EscrowJobState:
        """Escrow state of a job; poster is the zero address when never funded."""
        poster, amount, winner, released, refunded, created_at = await self._call(
            "getJob", self._escrow.functions.getJob(job_id).call
        )
        return EscrowJobState(
            poster=poster,
            amount=int(amount),
            winner=winner,
            released=bool(released),
            refunded=bool(refunded),
            created_at=int(created_at),
        )

    async def get_platform_fee_bps(self) -> int:
        return int(await self._call("platformFeeBps", self._escrow.functions.platformFeeBps().call))

    # ------------------------------------------------------------------
    # ERC-20
    # ------------------------------------------------------------------

    async def get_allowance(self, owner: str, spender: str) -> int:
        fn = self._token.functions.allowance(
            Web3.to_checksum_address(owner),
            Web3.to_checksum_address(spender),
        )
        return int(await self._call("allowance", fn.call))

    # ------------------------------------------------------------------
    # Node
    # ------------------------------------------------------------------

    async def get_block_number(self) -> int:
        if self._w3 is None:
            raise ChainReadError("blockNumber", "no provider configured")
        return int(await self._call("blockNumber", lambda: self._w3.eth.block_number))

    async def _read(self, make: Callable[[], Awaitable[Any]]) -> Any:
        """Await a fresh call per attempt; the last error is re-raised as is."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._read_attempts),
            wait=wait_exponential(multiplier=self._backoff_seconds, max=5),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        ):
            with attempt:
                return await make()
        raise AssertionError("unreachable")  # pragma: no cover

    async def _call(self, name: str, make: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await self._read(make)
        except ChainReadError:
            raise
        except Exception as exc:
            logger.debug("chain.read_failed", call=name, error=str(exc))
            raise ChainReadError(name, str(exc)) from exc
