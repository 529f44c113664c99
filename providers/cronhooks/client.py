"""
Cronhooks Client

Scheduling provider adapter. Creates one-time and recurring triggers that
POST back to /webhook/message-trigger, and manages their lifecycle.
Remote calls go through the retry executor with the Cronhooks predicate,
except the cron helper endpoints which degrade to False/None.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from resilience import RetryExecutor

from ..base import ProviderClient
from ..errors import ValidationError
from .schemas import (
    CronhookListResponse,
    CronhookResponse,
    CronhookSchedule,
    ScheduleMessageRequest,
)

logger = logging.getLogger(__name__)

MESSAGE_TRIGGER_PATH = "/webhook/message-trigger"


def _preview(text: str) -> str:
    return f"{text[:50]}..."


class CronhooksClient(ProviderClient):
    """Client for the Cronhooks REST API."""

    provider_name = "Cronhooks"

    def __init__(
        self,
        base_url: str,
        api_token: str,
        webhook_base_url: str,
        timeout: float,
        executor: RetryExecutor,
        default_timezone: str = "UTC",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, api_token, timeout, executor, transport=transport)
        self.webhook_base_url = webhook_base_url.rstrip("/")
        self.default_timezone = default_timezone

    @property
    def webhook_url(self) -> str:
        return f"{self.webhook_base_url}{MESSAGE_TRIGGER_PATH}"

    def _callback_payload(self, request: ScheduleMessageRequest) -> Dict[str, Any]:
        return {
            "phoneNumber": request.phone_number,
            "message": request.message,
            "contactName": request.contact_name,
        }

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_one_time_schedule(self, request: ScheduleMessageRequest) -> CronhookResponse:
        self._ensure_enabled()

        schedule = CronhookSchedule(
            title=f"WhatsApp Message to {request.contact_name}",
            description=f"Automated message: {_preview(request.message)}",
            url=self.webhook_url,
            timezone=request.timezone or self.default_timezone,
            method="POST",
            headers={"Content-Type": "application/json"},
            payload=self._callback_payload(request),
            content_type="application/json",
            is_recurring=False,
            run_at=request.scheduled_date_time,
            send_cronhook_object=True,
            send_failure_alert=True,
            retry_count="3",
            retry_interval_seconds="60",
        )

        async def operation():
            logger.info(
                "Creating one-time schedule",
                extra={
                    "contact_name": request.contact_name,
                    "phone_number": request.phone_number,
                    "scheduled_date_time": request.scheduled_date_time,
                },
            )
            body = await self._request("POST", "/schedules", json=schedule.to_wire())
            result = CronhookResponse(**body)
            logger.info(
                "Cronhooks.createOneTimeSchedule succeeded",
                extra={"schedule_id": result.id, "contact_name": request.contact_name},
            )
            return result

        return await self.executor.execute_cronhooks_operation(operation, "createOneTimeSchedule")

    async def create_recurring_schedule(self, request: ScheduleMessageRequest) -> CronhookResponse:
        self._ensure_enabled()

        if not request.cron_expression:
            raise ValidationError("Cron expression is required for recurring schedules")

        schedule = CronhookSchedule(
            title=f"Recurring WhatsApp Message to {request.contact_name}",
            description=f"Automated recurring message: {_preview(request.message)}",
            url=self.webhook_url,
            timezone=request.timezone or self.default_timezone,
            method="POST",
            headers={"Content-Type": "application/json"},
            payload=self._callback_payload(request),
            content_type="application/json",
            is_recurring=True,
            cron_expression=request.cron_expression,
            starts_at=request.starts_at,
            ends_at=request.ends_at,
            send_cronhook_object=True,
            send_failure_alert=True,
        )

        async def operation():
            logger.info(
                "Creating recurring schedule",
                extra={
                    "contact_name": request.contact_name,
                    "phone_number": request.phone_number,
                    "cron_expression": request.cron_expression,
                    "starts_at": request.starts_at,
                    "ends_at": request.ends_at,
                },
            )
            body = await self._request("POST", "/schedules", json=schedule.to_wire())
            result = CronhookResponse(**body)
            logger.info(
                "Cronhooks.createRecurringSchedule succeeded",
                extra={"schedule_id": result.id, "contact_name": request.contact_name},
            )
            return result

        return await self.executor.execute_cronhooks_operation(operation, "createRecurringSchedule")

    async def create_schedule(self, request: ScheduleMessageRequest) -> CronhookResponse:
        self._ensure_enabled()
        if request.is_recurring:
            return await self.create_recurring_schedule(request)
        return await self.create_one_time_schedule(request)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def get_schedule(self, schedule_id: str) -> CronhookSchedule:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching schedule", extra={"schedule_id": schedule_id})
            body = await self._request("GET", f"/schedules/{schedule_id}")
            return CronhookSchedule(**body)

        return await self.executor.execute_cronhooks_operation(operation, "getSchedule")

    async def list_schedules(self, skip: int = 0, limit: int = 50) -> CronhookListResponse:
        self._ensure_enabled()

        async def operation():
            logger.info("Listing schedules", extra={"skip": skip, "limit": limit})
            body = await self._request("GET", "/schedules", params={"skip": skip, "limit": limit})
            result = CronhookListResponse(**body)
            logger.info(
                "Cronhooks.listSchedules succeeded",
                extra={"total_schedules": result.pagination.total, "returned_count": len(result.data)},
            )
            return result

        return await self.executor.execute_cronhooks_operation(operation, "listSchedules")

    async def update_schedule(self, schedule_id: str, update_data: Dict[str, Any]) -> CronhookResponse:
        self._ensure_enabled()

        async def operation():
            logger.info(
                "Updating schedule",
                extra={"schedule_id": schedule_id, "updated_fields": sorted(update_data)},
            )
            body = await self._request("PUT", f"/schedules/{schedule_id}", json=update_data)
            return CronhookResponse(**body)

        return await self.executor.execute_cronhooks_operation(operation, "updateSchedule")

    async def _schedule_action(self, schedule_id: str, method: str, suffix: str, name: str) -> CronhookResponse:
        self._ensure_enabled()

        async def operation():
            logger.info(f"Cronhooks.{name}", extra={"schedule_id": schedule_id})
            body = await self._request(
                method,
                f"/schedules/{schedule_id}{suffix}",
                json={} if method == "POST" else None,
            )
            return CronhookResponse(**body)

        return await self.executor.execute_cronhooks_operation(operation, name)

    async def delete_schedule(self, schedule_id: str) -> CronhookResponse:
        return await self._schedule_action(schedule_id, "DELETE", "", "deleteSchedule")

    async def pause_schedule(self, schedule_id: str) -> CronhookResponse:
        return await self._schedule_action(schedule_id, "POST", "/pause", "pauseSchedule")

    async def resume_schedule(self, schedule_id: str) -> CronhookResponse:
        return await self._schedule_action(schedule_id, "POST", "/resume", "resumeSchedule")

    async def trigger_schedule(self, schedule_id: str) -> CronhookResponse:
        return await self._schedule_action(schedule_id, "POST", "/trigger", "triggerSchedule")

    async def get_schedule_stats(self, schedule_id: str) -> Any:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching schedule statistics", extra={"schedule_id": schedule_id})
            return await self._request("GET", f"/schedules/{schedule_id}/stats")

        return await self.executor.execute_cronhooks_operation(operation, "getScheduleStats")

    async def get_schedule_history(self, schedule_id: str, limit: int = 20) -> Any:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching schedule history", extra={"schedule_id": schedule_id, "limit": limit})
            return await self._request(
                "GET", f"/schedules/{schedule_id}/history", params={"limit": limit}
            )

        return await self.executor.execute_cronhooks_operation(operation, "getScheduleHistory")

    # ------------------------------------------------------------------
    # Cron helpers (no retry, never raise)
    # ------------------------------------------------------------------

    async def validate_cron_expression(self, cron_expression: str) -> bool:
        if self.disabled:
            logger.warning("validate_cron_expression called while client disabled")
            return False

        try:
            body = await self._request("POST", "/validate-cron", json={"expression": cron_expression})
        except Exception as e:
            logger.error(
                f"Failed to validate cron expression: {e}",
                extra={"cron_expression": cron_expression},
            )
            return False

        is_valid = bool(body.get("valid")) if isinstance(body, dict) else False
        logger.info(
            "Cron expression validation",
            extra={"cron_expression": cron_expression, "is_valid": is_valid},
        )
        return is_valid

    async def get_next_run_time(self, cron_expression: str, timezone: Optional[str] = None) -> Optional[str]:
        if self.disabled:
            logger.warning("get_next_run_time called while client disabled")
            return None

        try:
            body = await self._request(
                "POST",
                "/cron-next-run",
                json={"expression": cron_expression, "timezone": timezone or self.default_timezone},
            )
        except Exception as e:
            logger.error(
                f"Failed to get next run time: {e}",
                extra={"cron_expression": cron_expression, "timezone": timezone},
            )
            return None

        return body.get("nextRun") if isinstance(body, dict) else None

    # ------------------------------------------------------------------
    # Account / stats
    # ------------------------------------------------------------------

    async def get_account_info(self) -> Any:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching account information")
            return await self._request("GET", "/account")

        return await self.executor.execute_cronhooks_operation(operation, "getAccountInfo")

    async def validate_configuration(self) -> bool:
        """Probe the account endpoint once. Never raises."""
        if self.disabled:
            logger.warning("Cronhooks client disabled - skipping configuration validation")
            return False

        try:
            await self._request("GET", "/account")
        except Exception as e:
            logger.error(f"Cronhooks configuration is invalid: {e}")
            return False

        logger.info("Cronhooks configuration is valid")
        return True

    async def get_active_schedules(self) -> List[CronhookSchedule]:
        listing = await self.list_schedules(0, 1000)
        return [s for s in listing.data if s.status == "active"]

    async def get_general_stats(self) -> Dict[str, int]:
        listing = await self.list_schedules(0, 1000)
        schedules = listing.data

        stats = {
            "total": len(schedules),
            "active": sum(1 for s in schedules if s.status == "active"),
            "paused": sum(1 for s in schedules if s.status == "paused"),
            "completed": sum(1 for s in schedules if s.status == "completed"),
            "recurring": sum(1 for s in schedules if s.is_recurring),
            "one_time": sum(1 for s in schedules if not s.is_recurring),
        }

        logger.info("Generated schedule statistics", extra={"stats": stats})
        return stats

    def get_service_stats(self) -> Dict[str, Any]:
        stats = super().get_service_stats()
        stats["webhook_url"] = self.webhook_url
        return stats
