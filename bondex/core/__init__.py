"""
Core exchange algorithms (pure, integer-only).
"""

from .curve import (
    PRICE_SCALE,
    cost_from_zero,
    price_at_supply,
    raw_cost_for_buying,
    raw_price_for_selling,
)
from .errors import (
    AlreadyInitialized,
    ArithmeticOverflow,
    ExchangeError,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    LedgerInvariantError,
    NotAuthorized,
    NotInitialized,
    SlippageExceeded,
    TransferFailed,
    UnknownMarket,
    UnknownToken,
)
from .escrow import RATE_SCALE, TokenExchangeInfo, Withdrawal
from .fees import CostAndPriceAmounts, costs_for_buying, prices_for_selling, trading_fee
from .invariants import check_all, check_transition
from .types import Event, ExchangeEvent, MarketDetails, MarketParams, TokenIdentity, TradeResult

__all__ = [
    "PRICE_SCALE",
    "RATE_SCALE",
    "cost_from_zero",
    "price_at_supply",
    "raw_cost_for_buying",
    "raw_price_for_selling",
    "CostAndPriceAmounts",
    "costs_for_buying",
    "prices_for_selling",
    "trading_fee",
    "TokenExchangeInfo",
    "Withdrawal",
    "check_all",
    "check_transition",
    "Event",
    "ExchangeEvent",
    "MarketDetails",
    "MarketParams",
    "TokenIdentity",
    "TradeResult",
    "ExchangeError",
    "UnknownToken",
    "UnknownMarket",
    "SlippageExceeded",
    "InsufficientAllowance",
    "InsufficientBalance",
    "TransferFailed",
    "NotAuthorized",
    "ArithmeticOverflow",
    "InvalidAmount",
    "AlreadyInitialized",
    "NotInitialized",
    "LedgerInvariantError",
]
