"""Checked uint256 arithmetic.

Python ints never wrap, so every helper here enforces the uint256 domain
explicitly. Division is floor division (`//`), which for non-negative operands
matches truncating integer division bit for bit.
"""

from __future__ import annotations

from .errors import ArithmeticOverflow

UINT256_MAX: int = (1 << 256) - 1


def _check(value: int, op: str) -> int:
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflow(f"uint256 {op} out of range")
    return value


def require_uint(value: int, name: str) -> int:
    """Validate that *value* is a plain int inside the uint256 domain."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflow(f"{name} outside uint256 range: {value}")
    return value


def add(a: int, b: int) -> int:
    return _check(a + b, "add")


def sub(a: int, b: int) -> int:
    return _check(a - b, "sub")


def mul(a: int, b: int) -> int:
    return _check(a * b, "mul")


def div(a: int, b: int) -> int:
    if b == 0:
        raise ArithmeticOverflow("uint256 division by zero")
    return a // b


def ceil_div(a: int, b: int) -> int:
    if b == 0:
        raise ArithmeticOverflow("uint256 division by zero")
    return -(-a // b)
