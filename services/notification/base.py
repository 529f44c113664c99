"""
Notification channel interface.

Role: deliver an operator notification to one destination.

Rules:
- Channels never raise; failures are logged and reported as False
- No retries
- No secrets in log records
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional


NotificationType = Literal["success", "error", "warning", "info"]

DEFAULT_SOURCE = "WhatsApp Scheduler Backend"


@dataclass
class NotificationData:
    """A single notification fanned out to every enabled channel."""

    type: NotificationType
    title: str
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = DEFAULT_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
        }


@dataclass
class NotificationConfig:
    """Channel switches and destinations."""

    slack_enabled: bool = False
    slack_webhook_url: Optional[str] = None

    webhook_enabled: bool = False
    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None

    email_enabled: bool = False
    email_to: Optional[str] = None
    email_from: Optional[str] = None

    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "NotificationConfig":
        return cls(
            slack_enabled=os.getenv("SLACK_NOTIFICATIONS_ENABLED", "false").lower() == "true",
            slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL") or None,
            webhook_enabled=os.getenv("WEBHOOK_NOTIFICATIONS_ENABLED", "false").lower() == "true",
            webhook_url=os.getenv("NOTIFICATION_WEBHOOK_URL") or None,
            webhook_secret=os.getenv("NOTIFICATION_WEBHOOK_SECRET") or None,
            email_enabled=os.getenv("EMAIL_NOTIFICATIONS_ENABLED", "false").lower() == "true",
            email_to=os.getenv("TO_EMAIL") or None,
            email_from=os.getenv("FROM_EMAIL") or None,
        )


class NotificationChannel(ABC):
    """Abstract delivery boundary."""

    name: str = "channel"

    @abstractmethod
    async def send(self, notification: NotificationData) -> bool:
        """
        Deliver one notification.

        Returns:
            True if delivered, False if it failed (never raises)
        """
        raise NotImplementedError
