"""
Escrow ledger: token identity -> TokenExchangeInfo.

Records are immutable; the shell stages a new record and writes it with `set`
once every collaborator call of an operation has succeeded. Unknown tokens read
as a zero record and are created on first write. Records are never deleted.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..core.escrow import TokenExchangeInfo
from .balances import Address

# Field order of the serialized record (single source of truth).
RECORD_FIELDS: tuple[str, ...] = tuple(TokenExchangeInfo.__dataclass_fields__)

_ZERO = TokenExchangeInfo()


class EscrowLedger:
    """Keyed store of per-token escrow records."""

    def __init__(self) -> None:
        self._records: Dict[Address, TokenExchangeInfo] = {}

    def get(self, token: Address) -> TokenExchangeInfo:
        return self._records.get(token, _ZERO)

    def set(self, token: Address, info: TokenExchangeInfo) -> None:
        if not isinstance(info, TokenExchangeInfo):
            raise TypeError("info must be a TokenExchangeInfo")
        self._records[token] = info

    def get_all(self) -> Dict[Address, TokenExchangeInfo]:
        return dict(self._records)

    # -- journal -------------------------------------------------------------

    def checkpoint(self) -> Dict[Address, TokenExchangeInfo]:
        # Records are frozen, so a shallow copy is a full snapshot.
        return dict(self._records)

    def rollback(self, snapshot: Dict[Address, TokenExchangeInfo]) -> None:
        self._records = dict(snapshot)

    # -- serialization -------------------------------------------------------

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            token: {name: getattr(info, name) for name in RECORD_FIELDS}
            for token, info in sorted(self._records.items())
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "EscrowLedger":
        """Inverse of `to_dict`. Raises KeyError on missing fields."""
        ledger = cls()
        for token, raw in data.items():
            kwargs: dict[str, int] = {}
            for name in RECORD_FIELDS:
                val = raw[name]
                if not isinstance(val, int) or isinstance(val, bool):
                    raise TypeError(f"ledger field {name!r} must be int, got {type(val).__name__}")
                kwargs[name] = int(val)
            ledger.set(token, TokenExchangeInfo(**kwargs))
        return ledger

    def __repr__(self) -> str:
        return f"EscrowLedger({len(self._records)} tokens)"
