"""Derived, never-persisted value objects.

These are reconstructed on every refresh from chain reads. Jobs and
submissions (owned by the external job store) live in schemas/jobs.py.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = b"\x00" * 32

REPUTATION_SCALE = Decimal(10) ** 18


def same_address(a: str | None, b: str | None) -> bool:
    """Case-insensitive address comparison; None never matches."""
    if not a or not b:
        return False
    return a.lower() == b.lower()


def is_zero_address(address: str | None) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


@dataclass(frozen=True)
class EscrowJobState:
    """Raw escrow.getJob() tuple, amounts still in token units."""

    poster: str
    amount: int
    winner: str
    released: bool
    refunded: bool
    created_at: int

    @property
    def is_funded(self) -> bool:
        return not is_zero_address(self.poster)


@dataclass(frozen=True)
class EscrowRecord:
    """On-chain escrow overlay for one job.

    Only ever built for a funded job (non-zero poster), so `funded` is
    always True; it is kept as a field because the overlay is read next to
    off-chain records that have no escrow at all.
    """

    job_id: str
    amount: Decimal
    winner: str = ZERO_ADDRESS
    released: bool = False
    refunded: bool = False
    created_at: int = 0
    funded: bool = True

    @property
    def has_winner(self) -> bool:
        return not is_zero_address(self.winner)

    @property
    def is_settled(self) -> bool:
        return self.released or self.refunded

    @property
    def is_consistent(self) -> bool:
        """At most one of released/refunded may be set."""
        return not (self.released and self.refunded)


@dataclass(frozen=True)
class Reputation:
    """Normalized reputation summary of an agent.

    Attributes:
        score: Average rating on a 0-100 scale (raw value / 1e18).
        count: Number of feedback entries.
        display: Human-readable label, "No ratings" when count is 0.
    """

    score: float
    count: int
    display: str

    @classmethod
    def from_raw(cls, raw_score: int, count: int) -> Reputation:
        if count == 0:
            return cls(score=0.0, count=0, display="No ratings")
        normalized = float(Decimal(raw_score) / REPUTATION_SCALE)
        noun = "rating" if count == 1 else "ratings"
        return cls(
            score=normalized,
            count=count,
            display=f"{normalized:.1f}/100 ({count} {noun})",
        )

    @property
    def has_ratings(self) -> bool:
        return self.count > 0


@dataclass(frozen=True)
class AgentIdentity:
    wallet: str
    agent_id: int
    reputation: Reputation | None = None


@dataclass(frozen=True)
class Registration:
    """A decoded Registered(agentId, agentURI, owner) event."""

    agent_id: int
    owner: str
    agent_uri: str = ""
    block_number: int = 0


@dataclass(frozen=True)
class PosterCredentials:
    """Headers that authorize a poster-gated job store request."""

    token: str | None = None
    wallet: str | None = None

    def headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.token:
            headers["X-Token"] = self.token
        if self.wallet:
            headers["X-Wallet"] = self.wallet
        return headers

    @property
    def is_empty(self) -> bool:
        return not self.token and not self.wallet


@dataclass
class TxCall:
    """A contract write waiting to be signed.

    `fn` is a bound web3 contract function (contract.functions.x(*args)).
    """

    name: str
    fn: object
    description: str = ""
    metadata: dict = field(default_factory=dict)
