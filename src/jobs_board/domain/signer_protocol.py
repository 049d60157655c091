"""Transaction signer protocol.

Defines the interface the orchestrator needs from a wallet. This is a
Protocol (structural subtyping) so a browser-bridged wallet, a local key
or a test double only need to match the shape.

The domain layer has ZERO imports from web3 or eth_account.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from jobs_board.domain.models import TxCall


@dataclass(frozen=True)
class TxReceipt:
    """Confirmed transaction receipt.

    Attributes:
        tx_hash: 0x-prefixed transaction hash.
        status: 1 for success; a reverted receipt is raised, never returned.
        block_number: Block the transaction was mined in.
        logs: Raw receipt logs, for callers that decode events.
    """

    tx_hash: str
    status: int = 1
    block_number: int = 0
    logs: list = field(default_factory=list)


@runtime_checkable
class TransactionSigner(Protocol):
    """Signs, submits and confirms contract writes.

    Implementations must classify failures into the domain taxonomy:
        - SignerRejectedError:        refused / unavailable / wrong network
        - TransactionRevertedError:   reverted on-chain or in estimation
        - ConfirmationTimeoutError:   no receipt within the timeout
        - TransportError:             RPC unreachable
    """

    @property
    def address(self) -> str:
        """Checksummed address of the signing account."""
        ...

    async def send(self, call: TxCall) -> str:
        """Sign and broadcast a contract write; return the tx hash."""
        ...

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        """Block (cooperatively) until `tx_hash` is mined and succeeded."""
        ...
