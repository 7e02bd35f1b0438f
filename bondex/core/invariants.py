"""Invariant checkers for escrow records.

Each function returns True when the invariant holds. `check_all()` returns the
list of violated invariant ids (empty = all pass); `check_transition()` adds the
monotonicity checks that compare a record with its predecessor.
"""

from __future__ import annotations

from typing import Callable

from .escrow import TokenExchangeInfo


def inv_non_negative(s: TokenExchangeInfo) -> bool:
    return (
        s.dai_in_token >= 0
        and s.interest_shares >= 0
        and s.generated_interest >= 0
        and s.withdrawn_interest >= 0
    )


def inv_withdrawn_le_generated(s: TokenExchangeInfo) -> bool:
    return s.withdrawn_interest <= s.generated_interest


INVARIANT_REGISTRY: dict[str, Callable[[TokenExchangeInfo], bool]] = {
    "inv_non_negative": inv_non_negative,
    "inv_withdrawn_le_generated": inv_withdrawn_le_generated,
}


def check_all(state: TokenExchangeInfo) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def check_transition(pre: TokenExchangeInfo, post: TokenExchangeInfo) -> list[str]:
    violations = check_all(post)
    if post.generated_interest < pre.generated_interest:
        violations.append("trans_generated_monotone")
    if post.withdrawn_interest < pre.withdrawn_interest:
        violations.append("trans_withdrawn_monotone")
    return violations
