"""Resilience Layer - Module Exports"""

from .classify import (
    CRONHOOKS_NON_RETRYABLE_MESSAGES,
    NETWORK_ERROR_CODES,
    NON_RETRYABLE_STATUSES,
    WASENDER_NON_RETRYABLE_MESSAGES,
    is_retryable_cronhooks_error,
    is_retryable_http_error,
    is_retryable_wasender_error,
)
from .executor import RetryExecutor, RetryOperation, RetryPredicate
from .policy import RetryPolicy, compute_delay

__all__ = [
    # Policy
    "RetryPolicy",
    "compute_delay",
    # Executor
    "RetryExecutor",
    "RetryOperation",
    "RetryPredicate",
    # Classification
    "is_retryable_http_error",
    "is_retryable_cronhooks_error",
    "is_retryable_wasender_error",
    "NETWORK_ERROR_CODES",
    "NON_RETRYABLE_STATUSES",
    "CRONHOOKS_NON_RETRYABLE_MESSAGES",
    "WASENDER_NON_RETRYABLE_MESSAGES",
]
