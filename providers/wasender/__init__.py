"""Wasender messaging provider."""

from .client import WasenderClient, build_send_payload
from .schemas import (
    SendMessageRequest,
    WasenderAccountInfo,
    WasenderMessage,
    WasenderResponse,
    WasenderSession,
)

__all__ = [
    "WasenderClient",
    "build_send_payload",
    "SendMessageRequest",
    "WasenderAccountInfo",
    "WasenderMessage",
    "WasenderResponse",
    "WasenderSession",
]
