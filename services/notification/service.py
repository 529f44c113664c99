"""
Notification Service

Fans operator notifications out to every enabled channel concurrently.
All-settled: a failing channel never affects the others or the caller.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import NotificationChannel, NotificationConfig, NotificationData
from .channels import EmailLogChannel, SlackChannel, WebhookChannel

logger = logging.getLogger(__name__)


def _error_text(error: Any) -> Any:
    if isinstance(error, BaseException):
        return getattr(error, "message", None) or str(error)
    return error


class NotificationService:
    """Operator notifications for delivery, schedule and webhook events."""

    def __init__(
        self,
        config: Optional[NotificationConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or NotificationConfig()
        self._transport = transport
        self.channels = self._build_channels()

    def _build_channels(self) -> List[NotificationChannel]:
        channels: List[NotificationChannel] = []
        cfg = self.config

        if cfg.slack_enabled and cfg.slack_webhook_url:
            channels.append(SlackChannel(cfg.slack_webhook_url, cfg.timeout, self._transport))

        if cfg.webhook_enabled and cfg.webhook_url:
            channels.append(
                WebhookChannel(cfg.webhook_url, cfg.webhook_secret, cfg.timeout, self._transport)
            )

        if cfg.email_enabled:
            channels.append(EmailLogChannel(cfg.email_to, cfg.email_from))

        return channels

    def get_enabled_channels(self) -> List[str]:
        return [channel.name for channel in self.channels]

    def get_configuration(self) -> Dict[str, Any]:
        """Channel status without URLs or secrets."""
        cfg = self.config
        return {
            "slack": {"enabled": cfg.slack_enabled, "configured": bool(cfg.slack_webhook_url)},
            "webhook": {
                "enabled": cfg.webhook_enabled,
                "configured": bool(cfg.webhook_url),
                "has_secret": bool(cfg.webhook_secret),
            },
            "email": {"enabled": cfg.email_enabled, "configured": bool(cfg.email_to)},
        }

    async def send_notification(self, notification: NotificationData) -> Dict[str, bool]:
        """
        Deliver to all enabled channels.

        Returns:
            {channel_name: delivered}
        """
        logger.info(
            "Sending notification",
            extra={
                "notification_type": notification.type,
                "title": notification.title,
                "channels": self.get_enabled_channels(),
            },
        )

        if not self.channels:
            return {}

        outcomes = await asyncio.gather(
            *(channel.send(notification) for channel in self.channels),
            return_exceptions=True,
        )

        results = {}
        for channel, outcome in zip(self.channels, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"Notification channel {channel.name} failed: {outcome}",
                    exc_info=outcome,
                )
                results[channel.name] = False
            else:
                results[channel.name] = bool(outcome)

        logger.debug("Notification dispatched", extra={"results": results})
        return results

    async def notify(
        self,
        notification_type: str,
        title: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, bool]:
        return await self.send_notification(
            NotificationData(type=notification_type, title=title, message=message, details=details)
        )

    async def notify_success(self, title: str, message: str, details: Optional[Dict[str, Any]] = None):
        return await self.notify("success", title, message, details)

    async def notify_error(self, title: str, message: str, details: Optional[Dict[str, Any]] = None):
        return await self.notify("error", title, message, details)

    async def notify_warning(self, title: str, message: str, details: Optional[Dict[str, Any]] = None):
        return await self.notify("warning", title, message, details)

    async def notify_info(self, title: str, message: str, details: Optional[Dict[str, Any]] = None):
        return await self.notify("info", title, message, details)

    # ------------------------------------------------------------------
    # Domain helpers
    # ------------------------------------------------------------------

    async def notify_message_success(
        self,
        phone_number: str,
        message_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        return await self.notify_success(
            "Message Sent Successfully",
            f"Message delivered to {phone_number}",
            {"phone_number": phone_number, "message_id": message_id, "context": context},
        )

    async def notify_message_failure(
        self,
        phone_number: Optional[str],
        error: Any,
        context: Optional[Dict[str, Any]] = None,
    ):
        return await self.notify_error(
            "Message Delivery Failed",
            f"Failed to send message to {phone_number}",
            {"phone_number": phone_number, "error": _error_text(error), "context": context},
        )

    async def notify_schedule_failure(
        self,
        schedule_id: Optional[str],
        error: Any,
        context: Optional[Dict[str, Any]] = None,
    ):
        return await self.notify_error(
            "Schedule Execution Failed",
            f"Failed to execute schedule {schedule_id}",
            {"schedule_id": schedule_id, "error": _error_text(error), "context": context},
        )

    async def notify_webhook_failure(self, webhook_url: str, error: Any, payload: Any = None):
        return await self.notify_error(
            "Webhook Processing Failed",
            f"Failed to process webhook from {webhook_url}",
            {"webhook_url": webhook_url, "error": _error_text(error), "payload": payload},
        )
