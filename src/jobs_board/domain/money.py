"""Fixed-point token amounts and the display payout split."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")
BPS_DENOMINATOR = Decimal(10_000)


def to_units(amount: Decimal | str | float, decimals: int = 6) -> int:
    """Convert a human amount to integer token units, truncating extra precision."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation as err:
        raise ValueError(f"Not a number: {amount!r}") from err
    quantum = Decimal(1).scaleb(-decimals)
    return int(value.quantize(quantum, rounding=ROUND_DOWN).scaleb(decimals))


def from_units(units: int, decimals: int = 6) -> Decimal:
    return Decimal(units).scaleb(-decimals)


@dataclass(frozen=True)
class Payout:
    """Display-only split of an escrowed amount.

    The contract computes the real split on release; this is what the
    poster is shown before submitting.
    """

    amount: Decimal
    fee: Decimal
    winner_receives: Decimal
    fee_bps: int

    @property
    def fee_percent(self) -> Decimal:
        return Decimal(self.fee_bps) / Decimal(100)


def compute_payout(amount: Decimal | str | float, fee_bps: int = 200) -> Payout:
    """Split `amount` into platform fee and winner payout, rounded to cents.

    >>> compute_payout(Decimal("10.00")).winner_receives
    Decimal('9.80')
    """
    value = Decimal(str(amount))
    fee = (value * Decimal(fee_bps) / BPS_DENOMINATOR).quantize(CENTS, rounding=ROUND_HALF_UP)
    return Payout(
        amount=value.quantize(CENTS, rounding=ROUND_HALF_UP),
        fee=fee,
        winner_receives=(value - fee).quantize(CENTS, rounding=ROUND_HALF_UP),
        fee_bps=fee_bps,
    )
