"""
API request schemas not owned by a provider.

Provider-facing requests (SendMessageRequest, ScheduleMessageRequest, ...)
live next to their clients in providers/.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class SessionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    phone_number: Optional[str] = None

    class Config:
        extra = "allow"


class SessionUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=50)

    class Config:
        extra = "allow"

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided for update")
        return self


class RetryPolicyUpdate(BaseModel):
    """Partial update of the default retry policy."""

    max_retries: Optional[int] = Field(None, alias="maxRetries", ge=0)
    base_delay_ms: Optional[float] = Field(None, alias="baseDelayMs", gt=0)
    max_delay_ms: Optional[float] = Field(None, alias="maxDelayMs", gt=0)
    backoff_multiplier: Optional[float] = Field(None, alias="backoffMultiplier", gt=1)
    jitter_enabled: Optional[bool] = Field(None, alias="jitterEnabled")

    class Config:
        populate_by_name = True
        extra = "forbid"

    def overrides(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class FailureNotification(BaseModel):
    """Cronhooks failure alert. Field names vary, so everything is optional."""

    schedule_id: Optional[str] = Field(None, alias="scheduleId")
    cronhook_id: Optional[str] = Field(None, alias="_cronhook_id")
    error: Optional[str] = None
    message: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"

    @property
    def resolved_schedule_id(self) -> Optional[str]:
        return self.schedule_id or self.cronhook_id

    @property
    def resolved_error(self) -> str:
        return self.error or self.message or "Unknown failure"


class GenericNotification(BaseModel):
    type: Literal["success", "error", "warning", "info"] = "info"
    title: str = "Generic Notification"
    message: str = "No message provided"
    details: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"


class CronValidationRequest(BaseModel):
    cron_expression: str = Field(..., alias="cronExpression", min_length=1, max_length=100)
    timezone: Optional[str] = None

    class Config:
        populate_by_name = True
