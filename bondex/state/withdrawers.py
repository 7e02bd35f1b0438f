"""
Authorized interest withdrawer table.

Mutable mapping: token -> address permitted to claim that token's interest.
Who may write an entry is decided by the exchange, not by this table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from .balances import Address


@dataclass
class WithdrawerTable:
    _withdrawers: Dict[Address, Address] = field(default_factory=dict)

    def get(self, token: Address) -> Optional[Address]:
        return self._withdrawers.get(token)

    def set(self, token: Address, withdrawer: Address) -> None:
        self._withdrawers[token] = withdrawer

    def get_all(self) -> Mapping[Address, Address]:
        # Return a shallow copy to avoid accidental mutation during iteration.
        return dict(self._withdrawers)

    def checkpoint(self) -> Dict[Address, Address]:
        return dict(self._withdrawers)

    def rollback(self, snapshot: Dict[Address, Address]) -> None:
        self._withdrawers = dict(snapshot)
