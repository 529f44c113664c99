"""
Messages API

Immediate sends go to Wasender; scheduled sends become Cronhooks
schedules that call back into /webhook/message-trigger.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from providers.cronhooks import CronhooksClient, ScheduleMessageRequest, ScheduleUpdateRequest
from providers.wasender import SendMessageRequest, WasenderClient
from services.notification import NotificationService

from .deps import authenticate, get_cronhooks, get_notifications, get_wasender
from .errors import ok, request_id_of
from .schemas import CronValidationRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/messages",
    tags=["Messages"],
    dependencies=[Depends(authenticate)],
)


# ============================================================================
# IMMEDIATE SEND
# ============================================================================

@router.post("/send")
async def send_message(
    payload: SendMessageRequest,
    request: Request,
    wasender: WasenderClient = Depends(get_wasender),
    notifications: NotificationService = Depends(get_notifications),
):
    """Send a WhatsApp message now."""
    logger.info(
        "Processing immediate message send request",
        extra={
            "phone_number": payload.phone_number,
            "message_type": payload.message_type,
            "request_id": request_id_of(request),
        },
    )

    try:
        result = await wasender.send_message(payload)
    except Exception as e:
        logger.error(
            f"Failed to send message: {e}",
            extra={"phone_number": payload.phone_number, "message_type": payload.message_type},
        )
        await notifications.notify_message_failure(
            payload.phone_number, e, {"message_type": payload.message_type}
        )
        raise

    data = result.message_data
    if result.success:
        await notifications.notify_message_success(
            payload.phone_number,
            data.id if data else None,
            {"message_type": payload.message_type},
        )

    logger.info(
        "Message sent successfully",
        extra={
            "phone_number": payload.phone_number,
            "message_id": data.id if data else None,
            "status": data.status if data else None,
        },
    )

    return ok(result, "Message sent successfully")


# ============================================================================
# SCHEDULING
# ============================================================================

async def _schedule(
    payload: ScheduleMessageRequest,
    request: Request,
    cronhooks: CronhooksClient,
    notifications: NotificationService,
):
    logger.info(
        "Processing schedule message request",
        extra={
            "phone_number": payload.phone_number,
            "contact_name": payload.contact_name,
            "is_recurring": payload.is_recurring,
            "scheduled_date_time": payload.scheduled_date_time,
            "request_id": request_id_of(request),
        },
    )

    try:
        result = await cronhooks.create_schedule(payload)
    except Exception as e:
        logger.error(
            f"Failed to schedule message: {e}",
            extra={"phone_number": payload.phone_number, "contact_name": payload.contact_name},
        )
        await notifications.notify_schedule_failure(
            "unknown",
            e,
            {"phone_number": payload.phone_number, "contact_name": payload.contact_name},
        )
        raise

    logger.info(
        "Message scheduled successfully",
        extra={
            "schedule_id": result.id,
            "phone_number": payload.phone_number,
            "is_recurring": payload.is_recurring,
        },
    )
    return ok(result, "Message scheduled successfully", status.HTTP_201_CREATED)


@router.post("/schedule", status_code=status.HTTP_201_CREATED)
async def schedule_message(
    payload: ScheduleMessageRequest,
    request: Request,
    cronhooks: CronhooksClient = Depends(get_cronhooks),
    notifications: NotificationService = Depends(get_notifications),
):
    """Schedule a one-time (or recurring, if flagged) message."""
    return await _schedule(payload, request, cronhooks, notifications)


@router.post("/schedule-recurring", status_code=status.HTTP_201_CREATED)
async def schedule_recurring_message(
    request: Request,
    body: Dict[str, Any] = Body(...),
    cronhooks: CronhooksClient = Depends(get_cronhooks),
    notifications: NotificationService = Depends(get_notifications),
):
    """Schedule a recurring message; `isRecurring` is forced on."""
    fields = {k: v for k, v in body.items() if k != "is_recurring"}
    fields["isRecurring"] = True
    try:
        payload = ScheduleMessageRequest.model_validate(fields)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    return await _schedule(payload, request, cronhooks, notifications)


@router.get("/schedules")
async def list_schedules(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    cronhooks: CronhooksClient = Depends(get_cronhooks),
):
    result = await cronhooks.list_schedules(skip, limit)
    return ok(result.data, "Schedules retrieved successfully", pagination=result.pagination)


# Registered before /schedules/{schedule_id} so "stats" is not taken as an id
@router.get("/schedules/stats")
async def schedule_stats(cronhooks: CronhooksClient = Depends(get_cronhooks)):
    stats = await cronhooks.get_general_stats()
    return ok(stats, "Schedule statistics retrieved successfully")


@router.get("/schedules/{schedule_id}")
async def get_schedule(schedule_id: str, cronhooks: CronhooksClient = Depends(get_cronhooks)):
    result = await cronhooks.get_schedule(schedule_id)
    return ok(result, "Schedule retrieved successfully")


@router.put("/schedules/{schedule_id}")
async def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdateRequest,
    cronhooks: CronhooksClient = Depends(get_cronhooks),
):
    result = await cronhooks.update_schedule(schedule_id, payload.to_wire())
    return ok(result, "Schedule updated successfully")


@router.delete("/schedules/{schedule_id}")
async def delete_schedule(schedule_id: str, cronhooks: CronhooksClient = Depends(get_cronhooks)):
    result = await cronhooks.delete_schedule(schedule_id)
    return ok(result, "Schedule deleted successfully")


@router.post("/schedules/{schedule_id}/pause")
async def pause_schedule(schedule_id: str, cronhooks: CronhooksClient = Depends(get_cronhooks)):
    result = await cronhooks.pause_schedule(schedule_id)
    return ok(result, "Schedule paused successfully")


@router.post("/schedules/{schedule_id}/resume")
async def resume_schedule(schedule_id: str, cronhooks: CronhooksClient = Depends(get_cronhooks)):
    result = await cronhooks.resume_schedule(schedule_id)
    return ok(result, "Schedule resumed successfully")


@router.post("/schedules/{schedule_id}/trigger")
async def trigger_schedule(schedule_id: str, cronhooks: CronhooksClient = Depends(get_cronhooks)):
    result = await cronhooks.trigger_schedule(schedule_id)
    return ok(result, "Schedule triggered successfully")


@router.get("/schedules/{schedule_id}/stats")
async def get_schedule_stats(schedule_id: str, cronhooks: CronhooksClient = Depends(get_cronhooks)):
    result = await cronhooks.get_schedule_stats(schedule_id)
    return ok(result, "Schedule statistics retrieved successfully")


@router.get("/schedules/{schedule_id}/history")
async def get_schedule_history(
    schedule_id: str,
    limit: int = Query(20, ge=1, le=100),
    cronhooks: CronhooksClient = Depends(get_cronhooks),
):
    result = await cronhooks.get_schedule_history(schedule_id, limit)
    return ok(result, "Schedule history retrieved successfully")


# ============================================================================
# CRON HELPERS
# ============================================================================

@router.post("/cron/validate")
async def validate_cron(
    payload: CronValidationRequest,
    cronhooks: CronhooksClient = Depends(get_cronhooks),
):
    """Ask Cronhooks whether an expression is valid and when it fires next."""
    valid = await cronhooks.validate_cron_expression(payload.cron_expression)
    next_run = await cronhooks.get_next_run_time(payload.cron_expression, payload.timezone) if valid else None
    return ok(
        {"cron_expression": payload.cron_expression, "valid": valid, "next_run": next_run},
        "Cron expression is valid" if valid else "Cron expression is invalid",
    )
