"""
Integration layer: the exchange service, its collaborator interfaces, in-memory
collaborators and deployment configuration.
"""

from .config import DeploymentConfig, ExchangeConfig, MarketConfig, TokenConfig, load_deployment_config, parse_deployment_config
from .deployment import Deployment, build_in_memory_deployment
from .exchange import ExchangeSettings, TokenExchange
from .journal import atomic
from .memory import InMemoryRegistry, InMemoryReserveAsset, InMemoryTokenLedger, InMemoryVault

__all__ = [
    "DeploymentConfig",
    "ExchangeConfig",
    "MarketConfig",
    "TokenConfig",
    "load_deployment_config",
    "parse_deployment_config",
    "Deployment",
    "build_in_memory_deployment",
    "ExchangeSettings",
    "TokenExchange",
    "atomic",
    "InMemoryRegistry",
    "InMemoryReserveAsset",
    "InMemoryTokenLedger",
    "InMemoryVault",
]
