"""
Holder balances for the in-memory reserve asset and market tokens.

One table keys `(holder, asset)` so a single instance can carry every market
token. Amounts stay inside uint256: crediting past the range raises
`ArithmeticOverflow`, debiting more than is held raises `InsufficientBalance`.
Per-asset totals are maintained alongside, so supply reads do not scan.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..core import uint
from ..core.errors import InsufficientBalance

Address = str  # 20-byte account address as lowercase 0x-hex
AssetId = str  # reserve asset or market token address


class BalanceTable:
    def __init__(self) -> None:
        self._held: Dict[Tuple[Address, AssetId], int] = {}
        self._totals: Dict[AssetId, int] = {}

    def balance(self, holder: Address, asset: AssetId) -> int:
        return self._held.get((holder, asset), 0)

    def total(self, asset: AssetId) -> int:
        return self._totals.get(asset, 0)

    def credit(self, holder: Address, asset: AssetId, amount: int) -> None:
        uint.require_uint(amount, "amount")
        total = uint.add(self.total(asset), amount)
        if amount == 0:
            return
        self._held[(holder, asset)] = self.balance(holder, asset) + amount
        self._totals[asset] = total

    def debit(self, holder: Address, asset: AssetId, amount: int) -> None:
        uint.require_uint(amount, "amount")
        held = self.balance(holder, asset)
        if held < amount:
            raise InsufficientBalance(f"{holder} holds {held} of {asset}, needs {amount}")
        if amount == 0:
            return
        if held == amount:
            del self._held[(holder, asset)]
        else:
            self._held[(holder, asset)] = held - amount
        self._totals[asset] = self.total(asset) - amount

    def move(self, sender: Address, to: Address, asset: AssetId, amount: int) -> None:
        """Debit `sender` and credit `to`; the asset total is unchanged."""
        self.debit(sender, asset, amount)
        self.credit(to, asset, amount)

    def holders(self, asset: AssetId) -> Dict[Address, int]:
        """Non-zero balances of `asset`, sorted by holder."""
        return {h: amt for (h, a), amt in sorted(self._held.items()) if a == asset}

    def snapshot(self) -> "BalanceTable":
        clone = BalanceTable()
        clone._held = dict(self._held)
        clone._totals = dict(self._totals)
        return clone

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._held)} entries, {len(self._totals)} assets)"
