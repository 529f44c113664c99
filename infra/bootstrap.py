"""
Infrastructure initialization and bootstrap.

Singleton pattern for creating the retry executor and every provider
client from one configuration. The executor is shared, so a default
policy update reaches both providers.
"""

from typing import Optional

import httpx

from providers.cronhooks import CronhooksClient
from providers.wasender import WasenderClient
from resilience import RetryExecutor
from services.notification import NotificationService

from .config import InfraConfig, get_config


class InfraBootstrap:
    """
    Bootstrap infrastructure based on configuration.

    Singleton pattern - single instance per process.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(
        self,
        config: Optional[InfraConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.retry_executor = self.config.create_retry_executor()
        self.wasender = self.config.create_wasender_client(self.retry_executor, transport)
        self.cronhooks = self.config.create_cronhooks_client(self.retry_executor, transport)
        self.notifications = self.config.create_notification_service(transport)

    @classmethod
    def get_instance(cls, config: Optional[InfraConfig] = None) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton InfraBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def set_instance(cls, instance: "InfraBootstrap") -> None:
        """Install a pre-built instance (for testing)."""
        cls._instance = instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_retry_executor(self) -> RetryExecutor:
        return self.retry_executor

    def get_wasender_client(self) -> WasenderClient:
        return self.wasender

    def get_cronhooks_client(self) -> CronhooksClient:
        return self.cronhooks

    def get_notification_service(self) -> NotificationService:
        return self.notifications

    def __repr__(self) -> str:
        """String representation showing configured providers."""
        return (
            f"InfraBootstrap(wasender={'disabled' if self.wasender.disabled else 'enabled'}, "
            f"cronhooks={'disabled' if self.cronhooks.disabled else 'enabled'}, "
            f"notifications={self.notifications.get_enabled_channels()}, "
            f"max_retries={self.retry_executor.default_policy.max_retries})"
        )


def bootstrap_infrastructure(config: Optional[InfraConfig] = None) -> InfraBootstrap:
    """
    Bootstrap all infrastructure backends.

    Args:
        config: Optional custom configuration

    Returns:
        InfraBootstrap instance with all clients initialized
    """
    return InfraBootstrap.get_instance(config)
