"""
Narrow collaborator interfaces consumed by the exchange.

There is no implicit message sender in Python, so every operation that a
collaborator authorizes by caller takes the acting address explicitly.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..core.types import MarketDetails, TokenIdentity


class Registry(Protocol):
    def resolve_token_identity(self, token: str) -> TokenIdentity: ...

    def resolve_market(self, market_id: int) -> MarketDetails: ...


class TokenLedger(Protocol):
    def total_supply(self, token: str) -> int: ...

    def balance_of(self, token: str, holder: str) -> int: ...

    def mint(self, minter: str, token: str, recipient: str, amount: int) -> None: ...

    def burn(self, minter: str, token: str, holder: str, amount: int) -> None: ...


class Vault(Protocol):
    address: str

    def invest(self, caller: str, amount: int) -> int:
        """Convert *amount* of idle reserve into shares; returns shares minted."""
        ...

    def redeem(self, caller: str, recipient: str, amount: int) -> bool: ...

    def balance_of_underlying(self, holder: str) -> int:
        """Reserve that *holder*'s shares would redeem for now."""
        ...

    def accrue_interest(self) -> None: ...

    def exchange_rate(self) -> int:
        """Reserve value per share, scaled by `RATE_SCALE`."""
        ...


class ReserveAsset(Protocol):
    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...

    def allowance(self, owner: str, spender: str) -> int: ...


@runtime_checkable
class Journaled(Protocol):
    """State holder that can snapshot and restore itself."""

    def checkpoint(self) -> Any: ...

    def rollback(self, snapshot: Any) -> None: ...
