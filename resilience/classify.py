"""
Retryability predicates.

Layered decision:
  1. Network failure or no status at all   -> retry
  2. 5xx / 429 / 408                       -> retry
  3. Other 4xx                             -> give up
  4. Anything else                         -> retry
Provider filters AND a message-substring veto on top of the HTTP layer.
"""

from typing import Iterable, Optional

import httpx


NETWORK_ERROR_CODES = frozenset({"ECONNRESET", "ENOTFOUND", "ECONNREFUSED"})

RETRYABLE_STATUSES = frozenset({408, 429})

# Subsumed by the general 4xx rule; listed so the intent is explicit.
NON_RETRYABLE_STATUSES = frozenset({400, 401, 403, 404, 422})

CRONHOOKS_NON_RETRYABLE_MESSAGES = (
    "invalid api key",
    "unauthorized",
    "forbidden",
    "invalid schedule format",
    "invalid cron expression",
)

WASENDER_NON_RETRYABLE_MESSAGES = (
    "invalid token",
    "unauthorized",
    "forbidden",
    "invalid phone number",
    "session not found",
    "session not connected",
)


def get_status_code(error: BaseException) -> Optional[int]:
    """Upstream HTTP status carried by an error, if any."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code

    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)

    return status if isinstance(status, int) else None


def get_network_code(error: BaseException) -> Optional[str]:
    return getattr(error, "network_code", None)


def is_retryable_http_error(error: BaseException) -> bool:
    """HTTP/network-level retryability. Unknown shapes fail open."""
    if get_network_code(error) in NETWORK_ERROR_CODES:
        return True

    if isinstance(error, httpx.RequestError):
        return True

    status = get_status_code(error)
    if status is None:
        return True

    if status >= 500:
        return True

    if status in RETRYABLE_STATUSES:
        return True

    if status in NON_RETRYABLE_STATUSES or 400 <= status < 500:
        return False

    return True


def message_matches(error: BaseException, needles: Iterable[str]) -> bool:
    """Case-insensitive substring match against the error message."""
    text = (getattr(error, "message", None) or str(error) or "").lower()
    return any(needle in text for needle in needles)


def is_retryable_cronhooks_error(error: BaseException) -> bool:
    if not is_retryable_http_error(error):
        return False
    return not message_matches(error, CRONHOOKS_NON_RETRYABLE_MESSAGES)


def is_retryable_wasender_error(error: BaseException) -> bool:
    if not is_retryable_http_error(error):
        return False
    return not message_matches(error, WASENDER_NON_RETRYABLE_MESSAGES)
