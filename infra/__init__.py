"""
Infrastructure module exports.

Configuration and bootstrap for the provider clients.
"""

from .config import InfraConfig, get_config
from .bootstrap import InfraBootstrap, bootstrap_infrastructure

__all__ = [
    "InfraConfig",
    "get_config",
    "InfraBootstrap",
    "bootstrap_infrastructure",
]
