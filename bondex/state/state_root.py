"""
Deterministic escrow state root (v1).

This is intended for:
- debugging / audit (stable hashes for the same logical ledger),
- comparing two deployments that replayed the same trades.
"""

from __future__ import annotations

from .canonical import address_bytes, domain_sep_bytes, encode_bytes, encode_uvarint, sha256_hex
from .ledger import RECORD_FIELDS, EscrowLedger
from .withdrawers import WithdrawerTable


STATE_ROOT_VERSION = 1


def _encode_ledger_section(ledger: EscrowLedger) -> bytes:
    entries = []
    for token, info in ledger.get_all().items():
        entries.append((address_bytes(token, name="token"), info))
    entries.sort(key=lambda t: t[0])

    out = bytearray(encode_uvarint(len(entries)))
    for token_b, info in entries:
        out += encode_bytes(token_b)
        for name in RECORD_FIELDS:
            out += encode_uvarint(getattr(info, name))
    return bytes(out)


def _encode_withdrawer_section(withdrawers: WithdrawerTable) -> bytes:
    entries = sorted(
        (
            address_bytes(token, name="token"),
            address_bytes(addr, name="withdrawer"),
        )
        for token, addr in withdrawers.get_all().items()
    )
    out = bytearray(encode_uvarint(len(entries)))
    for token_b, addr_b in entries:
        out += encode_bytes(token_b)
        out += encode_bytes(addr_b)
    return bytes(out)


def compute_ledger_root(ledger: EscrowLedger, withdrawers: WithdrawerTable) -> str:
    """SHA-256 over the domain-separated ledger and withdrawer sections."""
    payload = (
        domain_sep_bytes("escrow_state_root", STATE_ROOT_VERSION)
        + _encode_ledger_section(ledger)
        + _encode_withdrawer_section(withdrawers)
    )
    return sha256_hex(payload)
