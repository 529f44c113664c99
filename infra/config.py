"""
Infrastructure configuration system.

Environment-based provider settings and the default retry policy.
Built once at start-up; nothing here is mutated per request.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

import httpx

from providers.cronhooks import CronhooksClient
from providers.wasender import WasenderClient
from resilience import RetryExecutor, RetryPolicy
from services.notification import NotificationConfig, NotificationService


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # Wasender (messaging)
    wasender_api_url: str
    wasender_api_token: str

    # Cronhooks (scheduling)
    cronhooks_api_url: str
    cronhooks_api_token: str
    webhook_base_url: str
    default_timezone: str

    # HTTP
    timeout_ms: int

    # Retry
    retry_policy: RetryPolicy

    # Notifications
    notifications: NotificationConfig = field(default_factory=NotificationConfig)

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        Missing tokens are allowed: the matching client starts disabled.
        """
        return cls(
            wasender_api_url=os.getenv("WASENDER_API_URL", "https://www.wasenderapi.com/api"),
            wasender_api_token=os.getenv("WASENDER_API_TOKEN", ""),
            cronhooks_api_url=os.getenv("CRONHOOKS_API_URL", "https://api.cronhooks.io"),
            cronhooks_api_token=os.getenv("CRONHOOKS_API_TOKEN", ""),
            webhook_base_url=os.getenv("WEBHOOK_BASE_URL", "http://localhost:3000"),
            default_timezone=os.getenv("DEFAULT_TIMEZONE", "UTC"),
            timeout_ms=int(os.getenv("DEFAULT_TIMEOUT_MS", "30000")),
            retry_policy=RetryPolicy.from_env(),
            notifications=NotificationConfig.from_env(),
        )

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000

    def create_retry_executor(self) -> RetryExecutor:
        return RetryExecutor(default_policy=self.retry_policy)

    def create_wasender_client(
        self,
        executor: RetryExecutor,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> WasenderClient:
        return WasenderClient(
            base_url=self.wasender_api_url,
            api_token=self.wasender_api_token,
            timeout=self.timeout_s,
            executor=executor,
            transport=transport,
        )

    def create_cronhooks_client(
        self,
        executor: RetryExecutor,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> CronhooksClient:
        return CronhooksClient(
            base_url=self.cronhooks_api_url,
            api_token=self.cronhooks_api_token,
            webhook_base_url=self.webhook_base_url,
            timeout=self.timeout_s,
            executor=executor,
            default_timezone=self.default_timezone,
            transport=transport,
        )

    def create_notification_service(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> NotificationService:
        return NotificationService(self.notifications, transport=transport)


def get_config() -> InfraConfig:
    """Get infrastructure configuration from the current environment."""
    return InfraConfig.from_env()
