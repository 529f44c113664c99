"""
HTTP API routers.

Each router owns one URL prefix; main.py mounts them all.
"""

from .messages import router as messages_router
from .retry import router as retry_router
from .sessions import router as sessions_router
from .webhooks import router as webhooks_router

__all__ = [
    "messages_router",
    "retry_router",
    "sessions_router",
    "webhooks_router",
]
