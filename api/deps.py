"""
FastAPI dependencies: provider access and the auth passthrough.

Auth is deliberately open: `authenticate` lets every request through and
only logs; `optional_authenticate` records whether a presented API key is
known, without rejecting.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from config import Config
from infra import InfraBootstrap
from providers.cronhooks import CronhooksClient
from providers.wasender import WasenderClient
from resilience import RetryExecutor
from services.notification import NotificationService

logger = logging.getLogger(__name__)


# ============================================================================
# PROVIDERS
# ============================================================================

def get_bootstrap() -> InfraBootstrap:
    return InfraBootstrap.get_instance()


def get_wasender() -> WasenderClient:
    return get_bootstrap().get_wasender_client()


def get_cronhooks() -> CronhooksClient:
    return get_bootstrap().get_cronhooks_client()


def get_notifications() -> NotificationService:
    return get_bootstrap().get_notification_service()


def get_retry_executor() -> RetryExecutor:
    return get_bootstrap().get_retry_executor()


# ============================================================================
# AUTH
# ============================================================================

@dataclass(frozen=True)
class AuthInfo:
    """What optional auth saw on the request."""

    api_key_present: bool
    is_valid: bool
    source: Optional[str] = None  # header | query


async def authenticate(request: Request) -> None:
    """Passthrough: all requests are allowed."""
    logger.debug(
        "Authentication passthrough - allowing request",
        extra={"path": request.url.path, "method": request.method},
    )


async def optional_authenticate(request: Request) -> AuthInfo:
    """Check X-API-Key header / apiKey query param without rejecting."""
    header_key = request.headers.get("X-API-Key")
    query_key = request.query_params.get("apiKey")
    api_key = header_key or query_key

    if not api_key:
        info = AuthInfo(api_key_present=False, is_valid=False)
    else:
        info = AuthInfo(
            api_key_present=True,
            is_valid=api_key in Config.API_KEYS,
            source="header" if header_key else "query",
        )
        if info.is_valid:
            logger.debug("Optional authentication successful", extra={"path": request.url.path})
        else:
            logger.warning("Optional authentication failed: invalid API key", extra={"path": request.url.path})

    request.state.auth = info
    return info
