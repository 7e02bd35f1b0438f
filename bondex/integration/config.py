"""
Deployment configuration: exchange roles, logging, markets and tokens.

Configuration comes from a YAML document (PyYAML `safe_load`) with optional
environment overrides:

    BONDEX_OWNER, BONDEX_FEE_RECIPIENT, BONDEX_ATTRIBUTE_TRADES,
    BONDEX_LOG_LEVEL, BONDEX_LOG_JSON

Integer amounts may be written as YAML ints or decimal strings; floats are
rejected so 18-decimal values stay exact.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from ..core.types import MarketParams
from ..state.canonical import canonical_address

try:
    import yaml  # type: ignore
except ImportError:  # pragma: no cover
    yaml = None

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ExchangeConfig:
    """Process-wide roles and policy, fixed at initialization."""

    owner: str
    fee_recipient: str
    # When False, trades leave the escrow ledger untouched and tokens accrue
    # interest only on records seeded some other way.
    attribute_trades_to_escrow: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "owner", canonical_address(self.owner, name="owner"))
        object.__setattr__(
            self, "fee_recipient", canonical_address(self.fee_recipient, name="fee_recipient")
        )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}: {self.log_level!r}")
        object.__setattr__(self, "log_level", self.log_level.upper())


@dataclass(frozen=True)
class MarketConfig:
    market_id: int
    name: str
    params: MarketParams


@dataclass(frozen=True)
class TokenConfig:
    address: str
    market_id: int
    withdrawer: Optional[str] = None


@dataclass(frozen=True)
class DeploymentConfig:
    exchange: ExchangeConfig
    markets: Tuple[MarketConfig, ...] = field(default_factory=tuple)
    tokens: Tuple[TokenConfig, ...] = field(default_factory=tuple)


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return value == 1
    if isinstance(value, str):
        v = value.strip().lower()
        if v in ("1", "true", "yes", "on"):
            return True
        if v in ("0", "false", "no", "off"):
            return False
    raise ValueError(f"{name} must be a boolean flag, got {value!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_str(name, None)
    return default if raw is None else _as_bool(raw, name)


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"{name} must be an integer, got {value!r}")


def _require_mapping(obj: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ValueError(f"{name} must be a mapping")
    return obj


def _parse_market(raw: Any, index: int) -> MarketConfig:
    m = _require_mapping(raw, f"markets[{index}]")
    try:
        params = MarketParams(
            base_cost=_as_int(m["base_cost"], "base_cost"),
            price_rise=_as_int(m["price_rise"], "price_rise"),
            tokens_per_interval=_as_int(m["tokens_per_interval"], "tokens_per_interval"),
            trading_fee_rate=_as_int(m.get("trading_fee_rate", 0), "trading_fee_rate"),
            trading_fee_rate_scale=_as_int(m.get("trading_fee_rate_scale", 10_000), "trading_fee_rate_scale"),
        )
    except KeyError as exc:
        raise ValueError(f"markets[{index}] missing field {exc.args[0]!r}") from exc
    return MarketConfig(
        market_id=_as_int(m.get("id", index + 1), "id"),
        name=str(m.get("name", f"market-{index + 1}")),
        params=params,
    )


def _parse_token(raw: Any, index: int) -> TokenConfig:
    t = _require_mapping(raw, f"tokens[{index}]")
    if "address" not in t or "market" not in t:
        raise ValueError(f"tokens[{index}] requires 'address' and 'market'")
    withdrawer = t.get("withdrawer")
    return TokenConfig(
        address=canonical_address(str(t["address"]), name="token"),
        market_id=_as_int(t["market"], "market"),
        withdrawer=canonical_address(str(withdrawer), name="withdrawer") if withdrawer else None,
    )


def parse_deployment_config(doc: Mapping[str, Any]) -> DeploymentConfig:
    """Build a `DeploymentConfig` from an already-decoded document."""
    root = _require_mapping(doc, "config")
    ex = _require_mapping(root.get("exchange", {}), "exchange")
    log = _require_mapping(root.get("logging", {}), "logging")

    owner = _env_str("BONDEX_OWNER", ex.get("owner"))
    fee_recipient = _env_str("BONDEX_FEE_RECIPIENT", ex.get("fee_recipient"))
    if owner is None or fee_recipient is None:
        raise ValueError("exchange.owner and exchange.fee_recipient are required")

    exchange = ExchangeConfig(
        owner=owner,
        fee_recipient=fee_recipient,
        attribute_trades_to_escrow=_env_bool(
            "BONDEX_ATTRIBUTE_TRADES",
            _as_bool(ex.get("attribute_trades_to_escrow", True), "exchange.attribute_trades_to_escrow"),
        ),
        log_level=_env_str("BONDEX_LOG_LEVEL", str(log.get("level", "INFO"))) or "INFO",
        log_json=_env_bool("BONDEX_LOG_JSON", _as_bool(log.get("json", False), "logging.json")),
    )

    markets_raw = root.get("markets") or []
    tokens_raw = root.get("tokens") or []
    if not isinstance(markets_raw, list) or not isinstance(tokens_raw, list):
        raise ValueError("markets and tokens must be lists")
    markets = tuple(_parse_market(m, i) for i, m in enumerate(markets_raw))
    tokens = tuple(_parse_token(t, i) for i, t in enumerate(tokens_raw))

    known = {m.market_id for m in markets}
    if len(known) != len(markets):
        raise ValueError("duplicate market id")
    for tok in tokens:
        if tok.market_id not in known:
            raise ValueError(f"token {tok.address} references unknown market {tok.market_id}")
    return DeploymentConfig(exchange=exchange, markets=markets, tokens=tokens)


def load_deployment_config(path: Path) -> DeploymentConfig:
    if yaml is None:
        raise RuntimeError("PyYAML is required to load deployment config files")
    doc = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if doc is None:
        raise ValueError(f"empty config: {path}")
    return parse_deployment_config(doc)

