"""Staircase bonding-curve math (pure, integer-only).

The unit price starts at `base_cost` and steps up by `price_rise` after every
`tokens_per_interval` tokens. All quantities are 18-decimal fixed point, so the
product of an amount and a price is scaled back down by `PRICE_SCALE` once, at
the end of `cost_from_zero`.

Evaluation order matters for bit-for-bit compatibility: every intermediate is
range-checked as a uint256 (see `uint.py`), including `base_cost - price_rise`,
which rejects curves whose first step would be negative.
"""

from __future__ import annotations

from . import uint

PRICE_SCALE: int = 10**18


def cost_for_completed_intervals(b: int, r: int, t: int, n: int) -> int:
    """Scaled cost of the first *n* complete intervals.

    ``n*t*(b-r) + r*t*(n*(n+1)/2)`` is the closed form of
    ``sum(t * (b + i*r) for i in range(n))``; ``n*(n+1)`` is always even.
    """
    base_part = uint.mul(uint.mul(n, t), uint.sub(b, r))
    rise_part = uint.mul(uint.mul(r, t), uint.div(uint.mul(n, uint.add(n, 1)), 2))
    return uint.add(base_part, rise_part)


def cost_from_zero(b: int, r: int, t: int, amount: int) -> int:
    """Cost, in reserve units, of growing supply from zero to *amount*."""
    n = uint.div(amount, t)
    completed = cost_for_completed_intervals(b, r, t, n)
    remainder = uint.sub(amount, uint.mul(n, t))
    partial = uint.mul(remainder, uint.add(b, uint.mul(n, r)))
    return uint.div(uint.add(completed, partial), PRICE_SCALE)


def raw_cost_for_buying(b: int, r: int, t: int, supply: int, amount: int) -> int:
    """Curve cost (before fees) of minting *amount* on top of *supply*."""
    return uint.sub(
        cost_from_zero(b, r, t, uint.add(supply, amount)),
        cost_from_zero(b, r, t, supply),
    )


def raw_price_for_selling(b: int, r: int, t: int, supply: int, amount: int) -> int:
    """Curve proceeds (before fees) of burning *amount* out of *supply*.

    Raises ``ArithmeticOverflow`` when ``amount > supply``.
    """
    return uint.sub(
        cost_from_zero(b, r, t, supply),
        cost_from_zero(b, r, t, uint.sub(supply, amount)),
    )


def price_at_supply(b: int, r: int, t: int, supply: int) -> int:
    """Marginal price of one whole token when current supply is *supply*."""
    return uint.add(b, uint.mul(uint.div(supply, t), r))
