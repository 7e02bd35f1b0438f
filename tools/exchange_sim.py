#!/usr/bin/env python3
"""
Offline exchange simulator.

Builds an in-memory deployment (from a YAML config or the built-in default) and
runs a scripted sequence of steps against one token, e.g.:

    tools/exchange_sim.py buy:500 buy:700 yield:30 withdraw sell:200

Token and reserve amounts on the command line are whole units (scaled by 1e18).
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional, Sequence

from bondex.core.curve import PRICE_SCALE
from bondex.core.errors import ExchangeError
from bondex.integration.config import load_deployment_config, parse_deployment_config
from bondex.integration.deployment import build_in_memory_deployment
from bondex.state.canonical import canonical_json_bytes

TRADER = "0x" + "a1" * 20
OWNER = "0x" + "0a" * 20
FEE_RECIPIENT = "0x" + "fe" * 20
TOKEN = "0x" + "70" * 20

DEFAULT_CONFIG = {
    "exchange": {"owner": OWNER, "fee_recipient": FEE_RECIPIENT},
    "logging": {"level": "WARNING"},
    "markets": [
        {
            "id": 1,
            "name": "default",
            "base_cost": 10**17,
            "price_rise": 10**14,
            "tokens_per_interval": 100 * 10**18,
            "trading_fee_rate": 50,
            "trading_fee_rate_scale": 10_000,
        }
    ],
    "tokens": [{"address": TOKEN, "market": 1, "withdrawer": OWNER}],
}


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Run a scripted bonding-curve exchange session in memory.")
    ap.add_argument("steps", nargs="*", default=["buy:500", "yield:10", "withdraw", "sell:250"])
    ap.add_argument("--config", type=Path, default=None, help="deployment YAML (default: built-in)")
    ap.add_argument("--token", default=None, help="token address (default: first configured token)")
    ap.add_argument("--funds", type=int, default=1_000_000, help="reserve minted to the trader (whole units)")
    ap.add_argument("--json", action="store_true", help="print the final ledger as canonical JSON")
    return ap.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    config = load_deployment_config(args.config) if args.config else parse_deployment_config(DEFAULT_CONFIG)
    if not config.tokens:
        print("[sim] FAIL: config lists no tokens")
        return 2
    dep = build_in_memory_deployment(config, setup_logging=True)
    ex = dep.exchange
    token = args.token or config.tokens[0].address
    owner = config.exchange.owner

    dep.reserve.mint(TRADER, args.funds * PRICE_SCALE)
    dep.reserve.approve(TRADER, ex.address, args.funds * PRICE_SCALE)

    for raw_step in args.steps:
        op, _, arg = raw_step.partition(":")
        units = int(arg) * PRICE_SCALE if arg else 0
        try:
            if op == "buy":
                r = ex.buy_tokens(TRADER, token, units, max_cost=args.funds * PRICE_SCALE, recipient=TRADER)
                print(f"[sim] buy {arg}: raw={r.raw} fee={r.trading_fee} total={r.total}")
            elif op == "sell":
                r = ex.sell_tokens(TRADER, token, units, min_price=0, recipient=TRADER)
                print(f"[sim] sell {arg}: raw={r.raw} fee={r.trading_fee} total={r.total}")
            elif op == "quote":
                q = ex.get_costs_for_buying_tokens(token, units)
                print(f"[sim] quote {arg}: raw={q.raw} fee={q.trading_fee} total={q.total}")
            elif op == "yield":
                dep.vault.simulate_yield(units)
                print(f"[sim] yield {arg}: payable={ex.get_interest_payable(token)}")
            elif op == "withdraw":
                paid = ex.withdraw_interest(ex.get_authorized_withdrawer(token) or owner, token)
                print(f"[sim] withdraw: paid={paid}")
            else:
                print(f"[sim] FAIL: unknown step {raw_step!r}")
                return 2
        except ExchangeError as exc:
            print(f"[sim] step {raw_step!r} rejected: {type(exc).__name__}: {exc}")
            return 1

    print(f"[sim] supply={dep.tokens.total_supply(token)} trader_reserve={dep.reserve.balance_of(TRADER)}")
    print(f"[sim] ledger_root={ex.state_root()}")
    if args.json:
        print(canonical_json_bytes(ex.ledger_snapshot()).decode("utf-8"))
    else:
        print(json.dumps(ex.ledger_snapshot(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
