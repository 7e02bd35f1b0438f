"""
Per-token interest escrow kernel.

Pure functions over `TokenExchangeInfo` records:
- Inputs are the pre-record and the vault's current exchange rate.
- Outputs are a new record (plus amounts); nothing is mutated in place.

Accounting identity (with `value = interest_shares * rate // RATE_SCALE`):

    pending = value - (dai_in_token + generated_interest - withdrawn_interest)

Pending interest is folded into `generated_interest` at each checkpoint;
`generated_interest - withdrawn_interest` is what the withdrawer may claim, up to
the share value held above principal (see `withdraw`).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from . import uint

RATE_SCALE: int = 10**18


@dataclass(frozen=True)
class TokenExchangeInfo:
    """Escrow record of one token."""

    dai_in_token: int = 0
    interest_shares: int = 0
    generated_interest: int = 0
    withdrawn_interest: int = 0

    def __post_init__(self) -> None:
        for name, v in (
            ("dai_in_token", self.dai_in_token),
            ("interest_shares", self.interest_shares),
            ("generated_interest", self.generated_interest),
            ("withdrawn_interest", self.withdrawn_interest),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.withdrawn_interest > self.generated_interest:
            raise ValueError("withdrawn_interest must be <= generated_interest")


@dataclass(frozen=True)
class Withdrawal:
    """Outcome of an interest withdrawal checkpoint."""

    info: TokenExchangeInfo
    payable: int
    shares_released: int


def shares_value(shares: int, rate: int) -> int:
    """Reserve value of *shares* at exchange rate *rate*, rounded down."""
    return uint.div(uint.mul(shares, rate), RATE_SCALE)


def shares_for_value(value: int, rate: int) -> int:
    """Shares a vault burns to pay out *value*, rounded up."""
    return uint.ceil_div(uint.mul(value, RATE_SCALE), rate)


def pending_interest(info: TokenExchangeInfo, rate: int) -> int:
    """Interest accrued since the last checkpoint; negative results clamp to 0."""
    booked = info.dai_in_token + info.generated_interest - info.withdrawn_interest
    pending = shares_value(info.interest_shares, rate) - booked
    return pending if pending > 0 else 0


def accrue(info: TokenExchangeInfo, rate: int) -> TokenExchangeInfo:
    """Fold pending interest into `generated_interest`."""
    pending = pending_interest(info, rate)
    if pending == 0:
        return info
    return replace(info, generated_interest=uint.add(info.generated_interest, pending))


def releasable_shares(info: TokenExchangeInfo, rate: int) -> int:
    """Shares the record holds beyond those needed to redeem its principal."""
    needed = shares_for_value(info.dai_in_token, rate)
    return info.interest_shares - needed if info.interest_shares > needed else 0


def interest_payable(info: TokenExchangeInfo, rate: int, limit: Optional[int] = None) -> int:
    """What `withdraw` would pay now."""
    return withdraw(info, rate, limit).payable


def withdraw(info: TokenExchangeInfo, rate: int, limit: Optional[int] = None) -> Withdrawal:
    """Checkpoint and pay out generated interest.

    The payout is capped so the shares left behind still redeem the full
    principal, and by *limit* when given (the caller's solvency headroom).
    Whatever the caps hold back stays claimable. The shares backing the payout
    leave the record so the paid value is not counted as pending again. A zero
    payout returns *info* unchanged.
    """
    accrued = accrue(info, rate)
    payable = min(
        accrued.generated_interest - accrued.withdrawn_interest,
        shares_value(releasable_shares(accrued, rate), rate),
    )
    if limit is not None:
        payable = min(payable, limit)
    if payable <= 0:
        return Withdrawal(info=info, payable=0, shares_released=0)
    released = shares_for_value(payable, rate)
    next_info = replace(
        accrued,
        interest_shares=accrued.interest_shares - released,
        withdrawn_interest=accrued.withdrawn_interest + payable,
    )
    return Withdrawal(info=next_info, payable=payable, shares_released=released)


def record_deposit(info: TokenExchangeInfo, principal: int, shares: int) -> TokenExchangeInfo:
    """Attribute bought principal and the vault shares it minted."""
    return replace(
        info,
        dai_in_token=uint.add(info.dai_in_token, principal),
        interest_shares=uint.add(info.interest_shares, shares),
    )


def record_redemption(info: TokenExchangeInfo, redeemed: int, rate: int) -> TokenExchangeInfo:
    """Remove redeemed principal and the shares burned for it at *rate*.

    Both reductions are capped at what the record holds.
    """
    principal = min(redeemed, info.dai_in_token)
    shares = min(info.interest_shares, shares_for_value(redeemed, rate))
    return replace(
        info,
        dai_in_token=info.dai_in_token - principal,
        interest_shares=info.interest_shares - shares,
    )
