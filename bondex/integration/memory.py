"""
In-memory collaborators (registry, token ledger, vault, reserve asset).

These back the test-suite and the offline simulator. Each one implements
`checkpoint()` / `rollback()` so the exchange can make a multi-call operation
all-or-nothing.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from ..core import uint
from ..core.errors import NotAuthorized, TransferFailed
from ..core.escrow import RATE_SCALE
from ..core.types import MarketDetails, MarketParams, TokenIdentity
from ..state.balances import Address, BalanceTable
from ..state.canonical import canonical_address


class InMemoryRegistry:
    """Market registry: token identity -> market id -> curve parameters."""

    def __init__(self) -> None:
        self._markets: Dict[int, MarketParams] = {}
        self._tokens: Dict[Address, int] = {}

    def add_market(self, params: MarketParams, market_id: Optional[int] = None) -> int:
        mid = market_id if market_id is not None else len(self._markets) + 1
        if mid in self._markets:
            raise ValueError(f"market {mid} already registered")
        self._markets[mid] = params
        return mid

    def add_token(self, token: str, market_id: int) -> str:
        tok = canonical_address(token, name="token")
        if tok in self._tokens:
            raise ValueError(f"token {tok} already registered")
        self._tokens[tok] = market_id
        return tok

    def resolve_token_identity(self, token: str) -> TokenIdentity:
        mid = self._tokens.get(token)
        if mid is None:
            return TokenIdentity(market_id=0, exists=False)
        return TokenIdentity(market_id=mid, exists=True)

    def resolve_market(self, market_id: int) -> MarketDetails:
        params = self._markets.get(market_id)
        return MarketDetails(params=params, exists=params is not None)

    def checkpoint(self) -> Tuple[Dict[int, MarketParams], Dict[Address, int]]:
        return dict(self._markets), dict(self._tokens)

    def rollback(self, snapshot: Tuple[Dict[int, MarketParams], Dict[Address, int]]) -> None:
        markets, tokens = snapshot
        self._markets = dict(markets)
        self._tokens = dict(tokens)


class InMemoryReserveAsset:
    """Reserve asset with balances and allowances."""

    def __init__(self, asset_id: str) -> None:
        self.asset_id = canonical_address(asset_id, name="asset_id")
        self._balances = BalanceTable()
        self._allowances: Dict[Tuple[Address, Address], int] = {}

    def balance_of(self, holder: str) -> int:
        return self._balances.balance(holder, self.asset_id)

    def total_supply(self) -> int:
        return self._balances.total(self.asset_id)

    def mint(self, to: str, amount: int) -> None:
        self._balances.credit(to, self.asset_id, amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        uint.require_uint(amount, "amount")
        self._allowances[(owner, spender)] = amount

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        if self.balance_of(sender) < amount:
            return False
        self._balances.move(sender, to, self.asset_id, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if allowed < amount or self.balance_of(owner) < amount:
            return False
        self._allowances[(owner, spender)] = allowed - amount
        self._balances.move(owner, to, self.asset_id, amount)
        return True

    def checkpoint(self) -> Tuple[BalanceTable, Dict[Tuple[Address, Address], int]]:
        return self._balances.snapshot(), dict(self._allowances)

    def rollback(self, snapshot: Tuple[BalanceTable, Dict[Tuple[Address, Address], int]]) -> None:
        balances, allowances = snapshot
        self._balances = balances.snapshot()
        self._allowances = dict(allowances)


class InMemoryTokenLedger:
    """Market tokens: per-token supply and balances; only `minter` may mint or burn."""

    def __init__(self, minter: str) -> None:
        self.minter = canonical_address(minter, name="minter")
        self._balances = BalanceTable()

    def total_supply(self, token: str) -> int:
        return self._balances.total(token)

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.balance(holder, token)

    def holders(self, token: str) -> Dict[Address, int]:
        return self._balances.holders(token)

    def mint(self, minter: str, token: str, recipient: str, amount: int) -> None:
        if minter != self.minter:
            raise NotAuthorized(f"{minter} may not mint {token}")
        self._balances.credit(recipient, token, amount)

    def burn(self, minter: str, token: str, holder: str, amount: int) -> None:
        if minter != self.minter:
            raise NotAuthorized(f"{minter} may not burn {token}")
        self._balances.debit(holder, token, amount)

    def checkpoint(self) -> BalanceTable:
        return self._balances.snapshot()

    def rollback(self, snapshot: BalanceTable) -> None:
        self._balances = snapshot.snapshot()


class InMemoryVault:
    """
    Yield vault holding reserve asset in its own account.

    Shares are priced at the exact ratio backing / total_shares:

    - `invest` mints floor(amount * total_shares / backing) for reserve already
      sent to the vault (the first deposit mints at the current rate),
    - `redeem` burns ceil(amount * total_shares / backing),
    - `simulate_yield` adds reserve without minting shares.

    Rounding favours the vault, so the ratio never falls. Backing left behind
    once every share is burned belongs to no one: any caller may redeem it,
    and the next `invest` folds it into the new shares. `exchange_rate`
    reports that ratio floored to RATE_SCALE as of the last `accrue_interest`.
    """

    def __init__(self, reserve: InMemoryReserveAsset, address: str) -> None:
        self.reserve = reserve
        self.address = canonical_address(address, name="vault")
        self._shares: Dict[Address, int] = {}
        self._total_shares = 0
        self._backing = 0
        self._rate = RATE_SCALE

    def shares_of(self, holder: str) -> int:
        return self._shares.get(holder, 0)

    @property
    def total_shares(self) -> int:
        return self._total_shares

    @property
    def backing(self) -> int:
        return self._backing

    def idle_reserve(self) -> int:
        return self.reserve.balance_of(self.address) - self._backing

    def balance_of_underlying(self, holder: str) -> int:
        """Reserve that `holder`'s shares redeem for right now."""
        if self._total_shares == 0:
            return 0
        return uint.mul(self.shares_of(holder), self._backing) // self._total_shares

    def invest(self, caller: str, amount: int) -> int:
        if amount > self.idle_reserve():
            raise TransferFailed(f"vault holds less than {amount} idle reserve")
        if self._total_shares == 0:
            minted = uint.div(uint.mul(amount, RATE_SCALE), self._rate)
        else:
            minted = uint.div(uint.mul(amount, self._total_shares), self._backing)
        self._shares[caller] = self.shares_of(caller) + minted
        self._total_shares += minted
        self._backing += amount
        return minted

    def redeem(self, caller: str, recipient: str, amount: int) -> bool:
        if amount > self._backing:
            return False
        if self._total_shares == 0:
            burned = 0
        else:
            burned = uint.ceil_div(uint.mul(amount, self._total_shares), self._backing)
        if burned > self.shares_of(caller):
            return False
        if not self.reserve.transfer(self.address, recipient, amount):
            return False
        self._shares[caller] = self.shares_of(caller) - burned
        self._total_shares -= burned
        self._backing -= amount
        return True

    def simulate_yield(self, amount: int) -> None:
        self.reserve.mint(self.address, amount)
        self._backing += amount

    def accrue_interest(self) -> None:
        if self._total_shares > 0:
            self._rate = max(self._rate, self._backing * RATE_SCALE // self._total_shares)

    def exchange_rate(self) -> int:
        return self._rate

    def checkpoint(self) -> Tuple[Dict[Address, int], int, int, int]:
        return dict(self._shares), self._total_shares, self._backing, self._rate

    def rollback(self, snapshot: Tuple[Dict[Address, int], int, int, int]) -> None:
        shares, total, backing, rate = snapshot
        self._shares = dict(shares)
        self._total_shares = total
        self._backing = backing
        self._rate = rate


def registry_from_markets(
    markets: Mapping[int, MarketParams],
    tokens: Mapping[str, int],
) -> InMemoryRegistry:
    registry = InMemoryRegistry()
    for mid, params in sorted(markets.items()):
        registry.add_market(params, market_id=mid)
    for token, mid in tokens.items():
        registry.add_token(token, mid)
    return registry
