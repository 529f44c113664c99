"""
Webhook API

Inbound callbacks from Cronhooks. The message trigger is the URL every
schedule points at; it relays the stored message through Wasender.
"""

import hmac
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, Request

from config import Config
from providers.cronhooks import CronhooksClient, CronhookWebhookPayload
from providers.cronhooks.client import MESSAGE_TRIGGER_PATH
from providers.errors import UnauthorizedError
from providers.wasender import WasenderClient
from services.notification import NotificationService

from .deps import get_cronhooks, get_notifications, get_wasender
from .errors import error_response, ok, request_id_of
from .schemas import FailureNotification, GenericNotification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["Webhooks"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def verify_webhook_secret(x_webhook_secret: Optional[str] = Header(None)) -> None:
    """Reject callbacks whose X-Webhook-Secret does not match, when a secret is configured."""
    expected = Config.WEBHOOK_SECRET
    if not expected:
        return

    if not x_webhook_secret or not hmac.compare_digest(
        x_webhook_secret.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.error(
            "Webhook secret validation failed",
            extra={"received_present": bool(x_webhook_secret)},
        )
        raise UnauthorizedError("Invalid webhook secret")


@router.post("/message-trigger", dependencies=[Depends(verify_webhook_secret)])
async def message_trigger(
    payload: CronhookWebhookPayload,
    request: Request,
    wasender: WasenderClient = Depends(get_wasender),
    notifications: NotificationService = Depends(get_notifications),
):
    """Send the message a Cronhooks schedule fired for."""
    logger.info(
        "Webhook received: cronhooks-message-trigger",
        extra={
            "cronhook_id": payload.cronhook_id,
            "phone_number": payload.phone_number,
            "contact_name": payload.contact_name,
            "request_id": request_id_of(request),
        },
    )

    context = {
        "cronhook_id": payload.cronhook_id,
        "contact_name": payload.contact_name,
        "trigger_type": "webhook",
    }

    try:
        result = await wasender.send_text_message(payload.phone_number, payload.message)
    except Exception as e:
        logger.error(
            f"Webhook processing failed: {e}",
            extra={"cronhook_id": payload.cronhook_id, "phone_number": payload.phone_number},
        )
        await notifications.notify_webhook_failure(
            request.url.path, e, payload.model_dump(by_alias=True)
        )
        raise

    data = result.message_data
    if not result.success:
        error = result.error or "Failed to send message"
        logger.error(
            "Webhook message sending failed",
            extra={"cronhook_id": payload.cronhook_id, "phone_number": payload.phone_number},
        )
        await notifications.notify_message_failure(payload.phone_number, error, context)
        return error_response(request, 500, error, "MESSAGE_SEND_FAILED")

    logger.info(
        "Webhook message sent successfully",
        extra={
            "cronhook_id": payload.cronhook_id,
            "message_id": data.id if data else None,
            "status": data.status if data else None,
        },
    )
    await notifications.notify_message_success(
        payload.phone_number, data.id if data else None, context
    )

    return ok(
        {
            "cronhook_id": payload.cronhook_id,
            "message_id": data.id if data else None,
            "status": data.status if data else None,
            "timestamp": _now(),
        },
        "Message sent successfully via webhook",
    )


@router.post("/test")
async def test_webhook(body: Optional[Dict[str, Any]] = Body(None)):
    """Connectivity check; echoes the body back."""
    logger.info("Webhook received: test-webhook", extra={"payload": body})
    return ok(
        {
            "received": body,
            "processed_at": _now(),
            "message": "Test webhook processed successfully",
        },
        "Test webhook received and processed",
    )


@router.post("/failure-notification", dependencies=[Depends(verify_webhook_secret)])
async def failure_notification(
    payload: FailureNotification,
    notifications: NotificationService = Depends(get_notifications),
):
    schedule_id = payload.resolved_schedule_id
    error = payload.resolved_error

    logger.error(
        "Received failure notification from Cronhooks",
        extra={"schedule_id": schedule_id, "error": error},
    )
    await notifications.notify_schedule_failure(
        schedule_id,
        error,
        {"source": "cronhooks-webhook", "payload": payload.model_dump(by_alias=True)},
    )

    return ok(
        {"schedule_id": schedule_id, "processed_at": _now()},
        "Failure notification processed",
    )


@router.post("/notification", dependencies=[Depends(verify_webhook_secret)])
async def generic_notification(
    payload: GenericNotification,
    notifications: NotificationService = Depends(get_notifications),
):
    await notifications.notify(payload.type, payload.title, payload.message, payload.details)

    logger.info(
        "Generic notification processed",
        extra={"notification_type": payload.type, "title": payload.title},
    )
    return ok(
        {"type": payload.type, "processed_at": _now()},
        "Notification processed successfully",
    )


@router.get("/health")
async def webhook_health(cronhooks: CronhooksClient = Depends(get_cronhooks)):
    return ok(
        {
            "service": "webhooks",
            "status": "healthy",
            "timestamp": _now(),
            "endpoints": {
                "message_trigger": MESSAGE_TRIGGER_PATH,
                "test": "/webhook/test",
                "failure_notification": "/webhook/failure-notification",
                "generic_notification": "/webhook/notification",
            },
            "configuration": {
                "has_webhook_secret": bool(Config.WEBHOOK_SECRET),
                "webhook_url": cronhooks.webhook_url,
            },
        },
        "Webhook service is healthy",
    )
