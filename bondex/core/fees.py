"""
Trading fee kernel (deterministic, integer-only).

Fees are a rational fraction `rate / scale` of the raw curve amount, rounded
down. A zero fee is a valid outcome and never an error.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import uint


@dataclass(frozen=True)
class CostAndPriceAmounts:
    """Breakdown of a quote: curve amount, fee, and what the trader pays/receives."""

    total: int
    raw: int
    trading_fee: int

    def __post_init__(self) -> None:
        for name, v in (
            ("total", self.total),
            ("raw", self.raw),
            ("trading_fee", self.trading_fee),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")


def trading_fee(amount: int, rate: int, scale: int) -> int:
    """``floor(amount * rate / scale)`` with uint256 overflow checks."""
    return uint.div(uint.mul(amount, rate), scale)


def costs_for_buying(raw_cost: int, rate: int, scale: int) -> CostAndPriceAmounts:
    fee = trading_fee(raw_cost, rate, scale)
    return CostAndPriceAmounts(total=uint.add(raw_cost, fee), raw=raw_cost, trading_fee=fee)


def prices_for_selling(raw_price: int, rate: int, scale: int) -> CostAndPriceAmounts:
    """Seller proceeds after the fee. A fee rate above 100% underflows."""
    fee = trading_fee(raw_price, rate, scale)
    return CostAndPriceAmounts(total=uint.sub(raw_price, fee), raw=raw_price, trading_fee=fee)
