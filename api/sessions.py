"""
Wasender API

Session management and account/health introspection for the messaging
provider.
"""

import logging

from fastapi import APIRouter, Depends

from providers.wasender import WasenderClient

from .deps import authenticate, get_wasender
from .errors import ok
from .schemas import SessionCreateRequest, SessionUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/wasender",
    tags=["Wasender"],
    dependencies=[Depends(authenticate)],
)


@router.get("/sessions")
async def list_sessions(wasender: WasenderClient = Depends(get_wasender)):
    sessions = await wasender.get_sessions()
    return ok(sessions, "Sessions retrieved successfully")


@router.post("/sessions", status_code=201)
async def create_session(
    payload: SessionCreateRequest,
    wasender: WasenderClient = Depends(get_wasender),
):
    session = await wasender.create_session(payload.model_dump(exclude_none=True))
    return ok(session, "Session created successfully", 201)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, wasender: WasenderClient = Depends(get_wasender)):
    session = await wasender.get_session_info(session_id)
    return ok(session, "Session retrieved successfully")


@router.put("/sessions/{session_id}")
async def update_session(
    session_id: str,
    payload: SessionUpdateRequest,
    wasender: WasenderClient = Depends(get_wasender),
):
    session = await wasender.update_session(session_id, payload.model_dump(exclude_none=True))
    return ok(session, "Session updated successfully")


@router.post("/sessions/{session_id}/connect")
async def connect_session(session_id: str, wasender: WasenderClient = Depends(get_wasender)):
    result = await wasender.connect_session(session_id)
    return ok(result, "Session connect requested")


@router.post("/sessions/{session_id}/disconnect")
async def disconnect_session(session_id: str, wasender: WasenderClient = Depends(get_wasender)):
    result = await wasender.disconnect_session(session_id)
    return ok(result, "Session disconnected")


@router.get("/messages/{message_id}")
async def get_message_info(message_id: str, wasender: WasenderClient = Depends(get_wasender)):
    result = await wasender.get_message_info(message_id)
    return ok(result, "Message info retrieved successfully")


@router.get("/connection-status")
async def connection_status(wasender: WasenderClient = Depends(get_wasender)):
    connected = await wasender.check_connection_status()
    return ok({"connected": connected}, "Connection status retrieved")


@router.get("/account")
async def account_info(wasender: WasenderClient = Depends(get_wasender)):
    account = await wasender.get_account_info()
    return ok(account, "Account information retrieved successfully")


@router.get("/validate-config")
async def validate_config(wasender: WasenderClient = Depends(get_wasender)):
    valid = await wasender.validate_configuration()
    return ok({"valid": valid}, "Configuration is valid" if valid else "Configuration is invalid")


@router.get("/stats")
async def service_stats(wasender: WasenderClient = Depends(get_wasender)):
    return ok(wasender.get_service_stats(), "Service statistics retrieved")


@router.get("/health")
async def wasender_health(wasender: WasenderClient = Depends(get_wasender)):
    """Provider health; never fails the request."""
    if wasender.disabled:
        return ok({"status": "disabled", "connected": False}, "Wasender is disabled")

    try:
        connected = await wasender.check_connection_status()
    except Exception as e:
        logger.warning(f"Wasender health check failed: {e}")
        return ok({"status": "unhealthy", "connected": False, "error": str(e)}, "Wasender is unreachable")

    return ok(
        {"status": "healthy" if connected else "degraded", "connected": connected},
        "Wasender health retrieved",
    )
