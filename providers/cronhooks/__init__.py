"""Cronhooks scheduling provider."""

from .client import CronhooksClient
from .schemas import (
    CronhookListResponse,
    CronhookResponse,
    CronhookSchedule,
    CronhookWebhookPayload,
    ScheduleMessageRequest,
    ScheduleUpdateRequest,
)

__all__ = [
    "CronhooksClient",
    "CronhookListResponse",
    "CronhookResponse",
    "CronhookSchedule",
    "CronhookWebhookPayload",
    "ScheduleMessageRequest",
    "ScheduleUpdateRequest",
]
