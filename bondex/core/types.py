"""Data types shared by the exchange core and shell.

Units/conventions:
- amounts, costs and prices are 18-decimal fixed point ints,
- `trading_fee_rate / trading_fee_rate_scale` is the fee fraction,
- token identities and addresses are canonical 20-byte hex strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class MarketParams:
    """Curve and fee parameters of one market (read-only here)."""

    base_cost: int
    price_rise: int
    tokens_per_interval: int
    trading_fee_rate: int
    trading_fee_rate_scale: int

    def __post_init__(self) -> None:
        for name, v in (
            ("base_cost", self.base_cost),
            ("price_rise", self.price_rise),
            ("tokens_per_interval", self.tokens_per_interval),
            ("trading_fee_rate", self.trading_fee_rate),
            ("trading_fee_rate_scale", self.trading_fee_rate_scale),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.tokens_per_interval == 0:
            raise ValueError("tokens_per_interval must be positive")
        if self.trading_fee_rate_scale == 0:
            raise ValueError("trading_fee_rate_scale must be positive")


@dataclass(frozen=True)
class TokenIdentity:
    market_id: int
    exists: bool


@dataclass(frozen=True)
class MarketDetails:
    params: Optional[MarketParams]
    exists: bool


@unique
class Event(Enum):
    TOKENS_BOUGHT = "TokensBought"
    TOKENS_SOLD = "TokensSold"
    INTEREST_WITHDRAWN = "InterestWithdrawn"
    NEW_INTEREST_WITHDRAWER = "NewInterestWithdrawer"


@dataclass(frozen=True)
class ExchangeEvent:
    """Record of one committed state change."""

    event: Event
    token: str
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TradeResult:
    """What a committed buy or sell moved."""

    token: str
    amount: int
    raw: int
    trading_fee: int
    total: int
    recipient: str
