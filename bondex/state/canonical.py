"""
Canonical forms for addresses and the byte encodings behind the ledger root.

Addresses are 20 bytes, written as lowercase `0x`-hex everywhere inside the
exchange. `canonical_address` is the single entry point that normalizes
caller input; `address_bytes` accepts only the normalized form, so a record
keyed by a non-canonical string cannot be hashed.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any

ADDRESS_BYTES = 20

_ADDRESS_BODY_RE = re.compile(r"^[0-9a-fA-F]{%d}$" % (2 * ADDRESS_BYTES))


def canonical_address(address: str, *, name: str = "address") -> str:
    """Normalize `address` to lowercase `0x`-hex; the prefix is optional on input."""
    if not isinstance(address, str):
        raise TypeError(f"{name} must be a str")
    body = address.strip()
    if body[:2] in ("0x", "0X"):
        body = body[2:]
    if not _ADDRESS_BODY_RE.fullmatch(body):
        raise ValueError(f"{name} must be a {ADDRESS_BYTES}-byte hex address: {address!r}")
    return "0x" + body.lower()


def address_bytes(address: str, *, name: str = "address") -> bytes:
    """Raw bytes of an already-canonical address."""
    if not isinstance(address, str):
        raise TypeError(f"{name} must be a str")
    if canonical_address(address, name=name) != address:
        raise ValueError(f"{name} is not in canonical form: {address!r}")
    return bytes.fromhex(address[2:])


def _check_json_value(value: Any, path: str) -> None:
    if isinstance(value, float):
        raise TypeError(f"float at {path}: amounts must be ints")
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"non-str key at {path}: {k!r}")
            _check_json_value(v, f"{path}.{k}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_json_value(item, f"{path}[{i}]")


def canonical_json_bytes(value: Any) -> bytes:
    """Compact, key-sorted UTF-8 JSON; floats anywhere in `value` are rejected."""
    _check_json_value(value, "$")
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def domain_sep_bytes(label: str, version: int) -> bytes:
    """NUL-terminated `bondex:<label>:v<version>` prefix for hashed payloads."""
    if not label or not label.isascii() or "\x00" in label:
        raise ValueError(f"bad domain label: {label!r}")
    if isinstance(version, bool) or not isinstance(version, int) or version <= 0:
        raise ValueError(f"bad domain version: {version!r}")
    return f"bondex:{label}:v{version}".encode("ascii") + b"\x00"


def encode_uvarint(value: int) -> bytes:
    """Unsigned LEB128; record fields are uint256, so at most 37 bytes."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"uvarint must be a non-negative int, got {value!r}")
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_bytes(value: bytes) -> bytes:
    """Length-prefixed bytes."""
    return encode_uvarint(len(value)) + bytes(value)


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()
