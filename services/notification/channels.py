"""
Notification channels: Slack incoming webhook, generic webhook, email (log only).
"""

import json
import logging
from typing import Optional

import httpx

from .base import NotificationChannel, NotificationData

logger = logging.getLogger(__name__)

USER_AGENT = "WhatsApp-Scheduler-Backend/1.0.0"

_SLACK_COLORS = {
    "success": "good",
    "error": "danger",
    "warning": "warning",
}


def slack_color(notification_type: str) -> str:
    return _SLACK_COLORS.get(notification_type, "#36a64f")


class SlackChannel(NotificationChannel):
    name = "slack"

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport

    def build_payload(self, notification: NotificationData) -> dict:
        fields = [
            {"title": "Type", "value": notification.type.upper(), "short": True},
            {"title": "Source", "value": notification.source, "short": True},
            {"title": "Timestamp", "value": notification.timestamp.isoformat(), "short": True},
        ]
        if notification.details:
            fields.append({
                "title": "Details",
                "value": f"```{json.dumps(notification.details, indent=2, default=str)}```",
                "short": False,
            })

        return {
            "text": notification.title,
            "attachments": [{
                "color": slack_color(notification.type),
                "title": notification.title,
                "text": notification.message,
                "fields": fields,
                "footer": "WhatsApp Scheduler",
                "ts": int(notification.timestamp.timestamp()),
            }],
        }

    async def send(self, notification: NotificationData) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.webhook_url, json=self.build_payload(notification))
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send Slack notification: {e}", exc_info=True)
            return False

        logger.debug("Slack notification sent")
        return True


class WebhookChannel(NotificationChannel):
    name = "webhook"

    def __init__(
        self,
        url: str,
        secret: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.secret = secret
        self.timeout = timeout
        self._transport = transport

    async def send(self, notification: NotificationData) -> bool:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self.secret:
            headers["X-Webhook-Secret"] = self.secret

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    content=json.dumps(notification.to_dict(), default=str),
                    headers=headers,
                )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook notification: {e}", exc_info=True)
            return False

        logger.debug("Webhook notification sent")
        return True


class EmailLogChannel(NotificationChannel):
    """Email placeholder: logs what would be sent. No SMTP."""

    name = "email"

    def __init__(self, to_email: Optional[str] = None, from_email: Optional[str] = None):
        self.to_email = to_email
        self.from_email = from_email

    async def send(self, notification: NotificationData) -> bool:
        logger.info(
            "Email notification would be sent here",
            extra={
                "to": self.to_email,
                "sender": self.from_email,
                "subject": notification.title,
                "body": notification.message,
            },
        )
        return True
