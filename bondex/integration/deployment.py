"""
Wire an exchange to in-memory collaborators from a `DeploymentConfig`.

Used by the offline simulator and the integration tests.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..logging_config import configure_logging
from .config import DeploymentConfig
from .exchange import TokenExchange
from .memory import InMemoryRegistry, InMemoryReserveAsset, InMemoryTokenLedger, InMemoryVault

EXCHANGE_ADDRESS = "0x" + "e0" * 20
VAULT_ADDRESS = "0x" + "c0" * 20
RESERVE_ADDRESS = "0x" + "da" * 20


@dataclass(frozen=True)
class Deployment:
    exchange: TokenExchange
    registry: InMemoryRegistry
    tokens: InMemoryTokenLedger
    vault: InMemoryVault
    reserve: InMemoryReserveAsset


def build_in_memory_deployment(config: DeploymentConfig, *, setup_logging: bool = False) -> Deployment:
    """Create collaborators, register markets and tokens, and initialize the exchange.

    Token withdrawers listed in the config are authorized by the owner.
    """
    if setup_logging:
        configure_logging(level=config.exchange.log_level, format_json=config.exchange.log_json)

    reserve = InMemoryReserveAsset(RESERVE_ADDRESS)
    vault = InMemoryVault(reserve, VAULT_ADDRESS)
    exchange = TokenExchange(EXCHANGE_ADDRESS)
    tokens = InMemoryTokenLedger(minter=exchange.address)
    registry = InMemoryRegistry()

    for market in config.markets:
        registry.add_market(market.params, market_id=market.market_id)
    for token in config.tokens:
        registry.add_token(token.address, token.market_id)

    exchange.initialize_from_config(config.exchange, registry, tokens, vault, reserve)
    for token in config.tokens:
        if token.withdrawer is not None:
            exchange.authorize_interest_withdrawer(config.exchange.owner, token.address, token.withdrawer)

    return Deployment(exchange=exchange, registry=registry, tokens=tokens, vault=vault, reserve=reserve)
