"""
Notification service exports.
"""

from .base import NotificationChannel, NotificationConfig, NotificationData, NotificationType
from .channels import EmailLogChannel, SlackChannel, WebhookChannel
from .service import NotificationService

__all__ = [
    "NotificationChannel",
    "NotificationConfig",
    "NotificationData",
    "NotificationType",
    "EmailLogChannel",
    "SlackChannel",
    "WebhookChannel",
    "NotificationService",
]
