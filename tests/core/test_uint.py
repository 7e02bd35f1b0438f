from __future__ import annotations

import pytest

from bondex.core import uint
from bondex.core.errors import ArithmeticOverflow


def test_add_overflow() -> None:
    assert uint.add(uint.UINT256_MAX - 1, 1) == uint.UINT256_MAX
    with pytest.raises(ArithmeticOverflow):
        uint.add(uint.UINT256_MAX, 1)


def test_sub_underflow() -> None:
    assert uint.sub(5, 5) == 0
    with pytest.raises(ArithmeticOverflow):
        uint.sub(0, 1)


def test_mul_overflow() -> None:
    with pytest.raises(ArithmeticOverflow):
        uint.mul(1 << 128, 1 << 128)


def test_division() -> None:
    assert uint.div(7, 2) == 3
    assert uint.ceil_div(7, 2) == 4
    assert uint.ceil_div(0, 3) == 0
    with pytest.raises(ArithmeticOverflow):
        uint.div(1, 0)
    with pytest.raises(ArithmeticOverflow):
        uint.ceil_div(1, 0)


@pytest.mark.parametrize("value", [1.0, "1", True, None])
def test_require_uint_type(value) -> None:
    with pytest.raises(TypeError):
        uint.require_uint(value, "x")


def test_require_uint_range() -> None:
    assert uint.require_uint(0, "x") == 0
    with pytest.raises(ArithmeticOverflow):
        uint.require_uint(-1, "x")
    with pytest.raises(ArithmeticOverflow):
        uint.require_uint(1 << 256, "x")
