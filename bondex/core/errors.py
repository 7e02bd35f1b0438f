"""Exception types for the exchange core.

Every error aborts the whole call. The shell (`integration/exchange.py`) rolls
back any staged state before the exception reaches the caller.
"""

from __future__ import annotations


class ExchangeError(Exception):
    """Base class for all exchange rejections."""


class UnknownToken(ExchangeError):
    """Raised when a token identity is not registered."""


class UnknownMarket(ExchangeError):
    """Raised when a token's market cannot be resolved."""


class SlippageExceeded(ExchangeError):
    """Raised when the final cost/price moved past the caller's bound."""


class InsufficientAllowance(ExchangeError):
    """Raised when the caller has not approved enough reserve asset."""


class InsufficientBalance(ExchangeError):
    """Raised when the caller holds fewer tokens than it tries to sell."""


class TransferFailed(ExchangeError):
    """Raised when a collaborator reports a failed funds movement."""


class NotAuthorized(ExchangeError):
    """Raised when a gated operation is invoked by a non-permitted caller."""


class ArithmeticOverflow(ExchangeError):
    """Raised when a fixed-point computation leaves the uint256 range."""


class InvalidAmount(ExchangeError):
    """Raised when a trade amount is not a positive int."""


class AlreadyInitialized(ExchangeError):
    """Raised on a second call to ``initialize``."""


class NotInitialized(ExchangeError):
    """Raised when an operation runs before ``initialize``."""


class LedgerInvariantError(ExchangeError):
    """Raised when a staged ledger record violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
