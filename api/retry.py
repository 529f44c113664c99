"""
Retry policy administration.

Reads and replaces the default policy of the shared retry executor.
Calls already in flight keep the policy they started with.
"""

import logging

from fastapi import APIRouter, Depends

from providers.errors import ValidationError
from resilience import RetryExecutor

from .deps import authenticate, get_retry_executor
from .errors import ok
from .schemas import RetryPolicyUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/retry",
    tags=["Retry"],
    dependencies=[Depends(authenticate)],
)


@router.get("/policy")
async def get_policy(executor: RetryExecutor = Depends(get_retry_executor)):
    return ok(executor.default_policy.to_dict(), "Retry policy retrieved")


@router.put("/policy")
async def update_policy(
    payload: RetryPolicyUpdate,
    executor: RetryExecutor = Depends(get_retry_executor),
):
    try:
        policy = executor.update_default_policy(**payload.overrides())
    except ValueError as e:
        raise ValidationError(str(e)) from e

    return ok(policy.to_dict(), "Retry policy updated")
