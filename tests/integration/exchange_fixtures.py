"""Shared in-memory deployment for the exchange integration tests."""

from __future__ import annotations

from typing import Any, Dict

from bondex.integration.config import parse_deployment_config
from bondex.integration.deployment import Deployment, build_in_memory_deployment

E18 = 10**18

OWNER = "0x" + "0a" * 20
FEE_RECIPIENT = "0x" + "fe" * 20
TRADER = "0x" + "a1" * 20
OTHER = "0x" + "a2" * 20
WITHDRAWER = "0x" + "b0" * 20
TOKEN_A = "0x" + "70" * 20
TOKEN_B = "0x" + "71" * 20

ENV_VARS = (
    "BONDEX_OWNER",
    "BONDEX_FEE_RECIPIENT",
    "BONDEX_ATTRIBUTE_TRADES",
    "BONDEX_LOG_LEVEL",
    "BONDEX_LOG_JSON",
)


def deployment_doc(*, attribute: bool = True, fee_rate: int = 50) -> Dict[str, Any]:
    # Unit price 1.0, +0.1 every 1000 tokens, 0.5% fee.
    return {
        "exchange": {
            "owner": OWNER,
            "fee_recipient": FEE_RECIPIENT,
            "attribute_trades_to_escrow": attribute,
        },
        "markets": [
            {
                "id": 1,
                "name": "test",
                "base_cost": E18,
                "price_rise": E18 // 10,
                "tokens_per_interval": 1000 * E18,
                "trading_fee_rate": fee_rate,
                "trading_fee_rate_scale": 10_000,
            }
        ],
        "tokens": [
            {"address": TOKEN_A, "market": 1, "withdrawer": WITHDRAWER},
            {"address": TOKEN_B, "market": 1},
        ],
    }


def make_deployment(*, attribute: bool = True, fee_rate: int = 50, funds: int = 10_000 * E18) -> Deployment:
    dep = build_in_memory_deployment(parse_deployment_config(deployment_doc(attribute=attribute, fee_rate=fee_rate)))
    dep.reserve.mint(TRADER, funds)
    dep.reserve.approve(TRADER, dep.exchange.address, funds)
    return dep
