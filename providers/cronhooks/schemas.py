"""
Cronhooks Schemas

PURE DATA MODELS - NO LOGIC
Wire contract of the scheduling provider plus the schedule requests.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from providers.wasender.schemas import PHONE_PATTERN


# minute hour day-of-month month day-of-week; numbers, `*` or `*/n`
CRON_PATTERN = (
    r"^(\*|[0-5]?[0-9]|\*/[0-5]?[0-9]) "
    r"(\*|1?[0-9]|2[0-3]|\*/(1?[0-9]|2[0-3])) "
    r"(\*|[1-9]|[12][0-9]|3[01]|\*/([1-9]|[12][0-9]|3[01])) "
    r"(\*|[1-9]|1[0-2]|\*/([1-9]|1[0-2])) "
    r"(\*|[0-6]|\*/[0-6])$"
)


# ============================================================================
# SCHEDULE REQUESTS (INPUT)
# ============================================================================

class ScheduleMessageRequest(BaseModel):
    """
    Request to schedule a WhatsApp message.

    One-time schedules need `scheduled_date_time`; recurring ones need
    `cron_expression`.
    """

    phone_number: str = Field(..., alias="phoneNumber", pattern=PHONE_PATTERN)
    message: str = Field(..., min_length=1, max_length=4096)
    contact_name: str = Field(..., alias="contactName", min_length=1, max_length=100)
    is_recurring: bool = Field(False, alias="isRecurring")
    scheduled_date_time: Optional[str] = Field(None, alias="scheduledDateTime")
    cron_expression: Optional[str] = Field(None, alias="cronExpression", pattern=CRON_PATTERN)
    starts_at: Optional[str] = Field(None, alias="startsAt")
    ends_at: Optional[str] = Field(None, alias="endsAt")
    timezone: Optional[str] = None

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def check_schedule_fields(self):
        if not self.is_recurring and not self.scheduled_date_time:
            raise ValueError("Scheduled date time is required for one-time messages")
        if self.is_recurring and not self.cron_expression:
            raise ValueError("Cron expression is required for recurring messages")
        return self


class ScheduleUpdateRequest(BaseModel):
    """Partial update of an existing schedule. At least one field."""

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    cron_expression: Optional[str] = Field(None, alias="cronExpression", pattern=CRON_PATTERN)
    starts_at: Optional[str] = Field(None, alias="startsAt")
    ends_at: Optional[str] = Field(None, alias="endsAt")
    timezone: Optional[str] = None

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided for update")
        return self

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# CRONHOOKS API PAYLOADS
# ============================================================================

class CronhookSchedule(BaseModel):
    """Schedule object as sent to and returned by Cronhooks."""

    id: Optional[Union[str, int]] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    timezone: Optional[str] = None
    method: Literal["GET", "POST", "PUT", "DELETE"] = "POST"
    headers: Optional[Dict[str, str]] = None
    payload: Optional[Any] = None
    content_type: str = Field("application/json", alias="contentType")
    is_recurring: bool = Field(False, alias="isRecurring")
    run_at: Optional[str] = Field(None, alias="runAt")
    cron_expression: Optional[str] = Field(None, alias="cronExpression")
    starts_at: Optional[str] = Field(None, alias="startsAt")
    ends_at: Optional[str] = Field(None, alias="endsAt")
    send_cronhook_object: bool = Field(True, alias="sendCronhookObject")
    send_failure_alert: bool = Field(True, alias="sendFailureAlert")
    retry_count: Optional[str] = Field(None, alias="retryCount")
    retry_interval_seconds: Optional[str] = Field(None, alias="retryIntervalSeconds")
    status: Optional[str] = None  # active, paused, completed

    class Config:
        populate_by_name = True
        extra = "allow"

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CronhookResponse(BaseModel):
    success: bool = True
    id: Optional[Union[str, int]] = None
    data: Optional[Any] = None
    error: Optional[str] = None

    class Config:
        extra = "allow"


class Pagination(BaseModel):
    skip: int = 0
    limit: int = 50
    total: int = 0


class CronhookListResponse(BaseModel):
    data: List[CronhookSchedule] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class CronhookWebhookPayload(BaseModel):
    """Body Cronhooks POSTs to /webhook/message-trigger."""

    cronhook_id: str = Field(..., alias="_cronhook_id")
    random: Optional[str] = Field(None, alias="_random")
    uuid: Optional[str] = Field(None, alias="_uuid")
    timestamp: Optional[str] = Field(None, alias="_timestamp")
    phone_number: str = Field(..., alias="phoneNumber", pattern=PHONE_PATTERN)
    message: str = Field(..., min_length=1, max_length=4096)
    contact_name: Optional[str] = Field(None, alias="contactName", max_length=100)

    class Config:
        populate_by_name = True
        extra = "allow"
