"""LocalAccountSigner — signs contract writes with a configured private key.

Every failure is classified into the domain taxonomy so the orchestrator
can tell "the signer refused" from "it reverted on-chain" from "the RPC is
down". Nothing in here retries: a failed submission is reported once and
re-issued only by a new user action.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, ProviderConnectionError, TimeExhausted, Web3RPCError

from jobs_board.config import get_settings
from jobs_board.domain.exceptions import (
    ConfirmationTimeoutError,
    JobsBoardError,
    SignerRejectedError,
    TransactionRevertedError,
    TransportError,
)
from jobs_board.domain.signer_protocol import TxReceipt
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    from jobs_board.config import Settings
    from jobs_board.domain.models import TxCall

logger = get_logger(__name__)

# EIP-1193 "user rejected request"
USER_REJECTED_CODE = 4001
_REJECTION_MARKERS = ("user denied", "user rejected", "rejected the request")


def classify_error(exc: BaseException) -> JobsBoardError:
    """Map a web3 / transport exception onto the domain error taxonomy."""
    if isinstance(exc, JobsBoardError):
        return exc
    if isinstance(exc, ContractLogicError):
        return TransactionRevertedError(reason=exc.message or str(exc))
    if isinstance(exc, Web3RPCError):
        error = (exc.rpc_response or {}).get("error") or {}
        message = str(error.get("message") or exc.message or exc)
        if error.get("code") == USER_REJECTED_CODE or any(
            marker in message.lower() for marker in _REJECTION_MARKERS
        ):
            return SignerRejectedError(message)
        return TransportError(f"RPC rejected transaction: {message}")
    if isinstance(exc, (ProviderConnectionError, OSError, asyncio.TimeoutError)):
        return TransportError(f"RPC unreachable: {exc}")
    return TransportError(str(exc) or exc.__class__.__name__)


class LocalAccountSigner:
    """TransactionSigner backed by an eth_account LocalAccount."""

    def __init__(self, w3: AsyncWeb3, private_key: str, chain_id: int) -> None:
        if not private_key:
            raise SignerRejectedError("No signing key configured")
        self._w3 = w3
        self._account = Account.from_key(private_key)
        self._chain_id = chain_id
        self._network_checked = False

    @property
    def address(self) -> str:
        return self._account.address

    async def ensure_network(self) -> None:
        """Refuse to sign against a node on the wrong chain."""
        if self._network_checked:
            return
        try:
            node_chain_id = await self._w3.eth.chain_id
        except Exception as exc:
            raise classify_error(exc) from exc
        if node_chain_id != self._chain_id:
            raise SignerRejectedError(
                f"Wrong network: node is on chain {node_chain_id}, expected {self._chain_id}"
            )
        self._network_checked = True

    async def send(self, call: TxCall) -> str:
        await self.ensure_network()
        try:
            nonce = await self._w3.eth.get_transaction_count(self.address, "pending")
            tx = await call.fn.build_transaction(
                {
                    "from": self.address,
                    "nonce": nonce,
                    "chainId": self._chain_id,
                }
            )
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            error = classify_error(exc)
            logger.warning("signer.send_failed", call=call.name, error=error.message, kind=error.kind)
            raise error from exc

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info("signer.tx_sent", call=call.name, tx_hash=tx_hash_hex)
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as exc:
            raise ConfirmationTimeoutError(tx_hash, timeout) from exc
        except Exception as exc:
            raise classify_error(exc) from exc

        if receipt["status"] != 1:
            reason = await self._revert_reason(tx_hash, receipt["blockNumber"])
            raise TransactionRevertedError(reason=reason, tx_hash=tx_hash)

        return TxReceipt(
            tx_hash=tx_hash,
            status=int(receipt["status"]),
            block_number=int(receipt["blockNumber"]),
            logs=list(receipt.get("logs", [])),
        )

    async def _revert_reason(self, tx_hash: str, block_number: int) -> str | None:
        """Replay a reverted transaction as an eth_call to recover its reason."""
        try:
            tx = await self._w3.eth.get_transaction(tx_hash)
            await self._w3.eth.call(
                {
                    "from": tx["from"],
                    "to": tx["to"],
                    "data": tx["input"],
                    "value": tx.get("value", 0),
                },
                block_number - 1,
            )
        except ContractLogicError as exc:
            return exc.message or str(exc)
        except Exception as exc:
            logger.debug("signer.revert_reason_unavailable", tx_hash=tx_hash, error=str(exc))
        return None


def build_signer(settings: Settings | None = None, w3: Any = None) -> LocalAccountSigner | None:
    """Return a signer for the configured key, or None when no key is set."""
    settings = settings or get_settings()
    if not settings.has_signer:
        return None
    w3 = w3 or AsyncWeb3(AsyncHTTPProvider(settings.rpc_url))
    return LocalAccountSigner(w3, settings.signer_private_key, settings.chain_id)
