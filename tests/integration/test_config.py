"""Deployment config parsing, environment overrides and YAML loading."""

from __future__ import annotations

import pytest

from bondex.integration import config as config_module
from bondex.integration.config import ExchangeConfig, load_deployment_config, parse_deployment_config
from bondex.integration.deployment import build_in_memory_deployment

from exchange_fixtures import E18, FEE_RECIPIENT, OTHER, OWNER, TOKEN_A, WITHDRAWER, deployment_doc


def test_parse_full_document() -> None:
    cfg = parse_deployment_config(deployment_doc())
    assert cfg.exchange.owner == OWNER
    assert cfg.exchange.attribute_trades_to_escrow is True
    assert cfg.exchange.log_level == "INFO"
    (market,) = cfg.markets
    assert market.market_id == 1
    assert market.params.tokens_per_interval == 1000 * E18
    assert cfg.tokens[0].withdrawer == WITHDRAWER
    assert cfg.tokens[1].withdrawer is None


def test_defaults_and_decimal_strings() -> None:
    doc = {
        "exchange": {"owner": OWNER.upper().replace("0X", "0x"), "fee_recipient": FEE_RECIPIENT},
        "markets": [{"base_cost": "1000000000000000000", "price_rise": 0, "tokens_per_interval": "5"}],
    }
    cfg = parse_deployment_config(doc)
    params = cfg.markets[0].params
    assert params.base_cost == E18
    assert params.tokens_per_interval == 5
    assert (params.trading_fee_rate, params.trading_fee_rate_scale) == (0, 10_000)
    assert cfg.markets[0].market_id == 1
    assert cfg.exchange.owner == OWNER
    assert cfg.tokens == ()


def test_float_amount_rejected() -> None:
    doc = deployment_doc()
    doc["markets"][0]["base_cost"] = 1.5
    with pytest.raises(ValueError, match="base_cost"):
        parse_deployment_config(doc)


def test_missing_market_field() -> None:
    doc = deployment_doc()
    del doc["markets"][0]["price_rise"]
    with pytest.raises(ValueError, match="price_rise"):
        parse_deployment_config(doc)


def test_missing_owner() -> None:
    doc = deployment_doc()
    del doc["exchange"]["owner"]
    with pytest.raises(ValueError, match="owner"):
        parse_deployment_config(doc)


def test_unknown_market_reference() -> None:
    doc = deployment_doc()
    doc["tokens"][0]["market"] = 7
    with pytest.raises(ValueError, match="unknown market"):
        parse_deployment_config(doc)


def test_duplicate_market_id() -> None:
    doc = deployment_doc()
    doc["markets"].append(dict(doc["markets"][0]))
    with pytest.raises(ValueError, match="duplicate"):
        parse_deployment_config(doc)


def test_zero_interval_rejected() -> None:
    doc = deployment_doc()
    doc["markets"][0]["tokens_per_interval"] = 0
    with pytest.raises(ValueError):
        parse_deployment_config(doc)


def test_invalid_log_level() -> None:
    with pytest.raises(ValueError):
        ExchangeConfig(owner=OWNER, fee_recipient=FEE_RECIPIENT, log_level="LOUD")


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("BONDEX_OWNER", OTHER)
    monkeypatch.setenv("BONDEX_ATTRIBUTE_TRADES", "off")
    monkeypatch.setenv("BONDEX_LOG_LEVEL", "debug")
    monkeypatch.setenv("BONDEX_LOG_JSON", "1")
    cfg = parse_deployment_config(deployment_doc())
    assert cfg.exchange.owner == OTHER
    assert cfg.exchange.attribute_trades_to_escrow is False
    assert cfg.exchange.log_level == "DEBUG"
    assert cfg.exchange.log_json is True


def test_env_bool_must_be_a_flag(monkeypatch) -> None:
    monkeypatch.setenv("BONDEX_ATTRIBUTE_TRADES", "maybe")
    with pytest.raises(ValueError, match="BONDEX_ATTRIBUTE_TRADES"):
        parse_deployment_config(deployment_doc())


def test_yaml_flag_strings_are_parsed_strictly() -> None:
    doc = deployment_doc()
    doc["exchange"]["attribute_trades_to_escrow"] = "no"
    doc["logging"] = {"json": "on"}
    cfg = parse_deployment_config(doc)
    assert cfg.exchange.attribute_trades_to_escrow is False
    assert cfg.exchange.log_json is True

    doc["exchange"]["attribute_trades_to_escrow"] = "maybe"
    with pytest.raises(ValueError, match="attribute_trades_to_escrow"):
        parse_deployment_config(doc)

    doc["exchange"]["attribute_trades_to_escrow"] = 2
    with pytest.raises(ValueError, match="attribute_trades_to_escrow"):
        parse_deployment_config(doc)


def test_load_yaml(tmp_path) -> None:
    path = tmp_path / "deploy.yaml"
    path.write_text(
        "\n".join(
            [
                "exchange:",
                f"  owner: '{OWNER}'",
                f"  fee_recipient: '{FEE_RECIPIENT}'",
                "logging:",
                "  level: warning",
                "markets:",
                "  - id: 3",
                "    name: yaml",
                "    base_cost: 100000000000000000",
                "    price_rise: 100000000000000",
                "    tokens_per_interval: 100000000000000000000",
                "    trading_fee_rate: 30",
                "tokens:",
                f"  - address: '{TOKEN_A}'",
                "    market: 3",
                f"    withdrawer: '{WITHDRAWER}'",
                "",
            ]
        ),
        encoding="utf-8",
    )
    cfg = load_deployment_config(path)
    assert cfg.exchange.log_level == "WARNING"
    assert cfg.markets[0].market_id == 3
    assert cfg.markets[0].params.trading_fee_rate == 30

    dep = build_in_memory_deployment(cfg)
    assert dep.exchange.get_authorized_withdrawer(TOKEN_A) == WITHDRAWER
    assert dep.exchange.get_cost_for_buying_tokens(TOKEN_A, 100 * E18) == 10 * E18 + 3 * E18 // 100


def test_load_empty_yaml(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError, match="empty"):
        load_deployment_config(path)


def test_load_without_pyyaml(tmp_path, monkeypatch) -> None:
    path = tmp_path / "deploy.yaml"
    path.write_text("exchange: {}\n", encoding="utf-8")
    monkeypatch.setattr(config_module, "yaml", None)
    with pytest.raises(RuntimeError, match="PyYAML"):
        load_deployment_config(path)
