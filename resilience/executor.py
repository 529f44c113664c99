"""
Retry Executor

Runs an async operation with bounded exponential-backoff retry.

Rules:
- Attempts are strictly sequential within one call
- The original exception is re-raised unchanged (never wrapped)
- Logging is observational only
- No cancellation: once started, a retry sequence runs to the end
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from .classify import is_retryable_cronhooks_error, is_retryable_wasender_error
from .policy import RetryPolicy, compute_delay

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
RetryPredicate = Callable[[BaseException], bool]
Sleeper = Callable[[float], Awaitable[Any]]


@dataclass
class RetryOperation:
    """One entry of a fan-out batch."""

    operation: Operation
    name: str
    overrides: Dict[str, Any] = field(default_factory=dict)


class RetryExecutor:
    """
    Retry executor bound to a default policy.

    Built once at start-up and injected into each provider client.
    The default policy is immutable; `update_default_policy` swaps it
    for calls that start afterwards.
    """

    def __init__(
        self,
        default_policy: Optional[RetryPolicy] = None,
        sleep: Sleeper = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ):
        self._default_policy = default_policy or RetryPolicy()
        self._sleep = sleep
        self._rand = rand

    @property
    def default_policy(self) -> RetryPolicy:
        return self._default_policy

    def update_default_policy(self, **overrides) -> RetryPolicy:
        """
        Replace the default policy for subsequent calls.

        In-flight calls keep the policy they started with.

        Raises:
            ValueError: If the merged policy is invalid
        """
        self._default_policy = self._default_policy.merged(overrides)
        logger.info(
            "Default retry policy updated",
            extra={"policy": self._default_policy.to_dict()},
        )
        return self._default_policy

    def resolve_policy(
        self,
        policy: Optional[RetryPolicy] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> RetryPolicy:
        """Explicit policy, else the default, with partial overrides on top."""
        base = policy or self._default_policy
        return base.merged(overrides)

    def delay_for(self, attempt: int, policy: RetryPolicy) -> int:
        return compute_delay(attempt, policy, self._rand)

    async def execute(
        self,
        operation: Operation,
        operation_name: str,
        policy: Optional[RetryPolicy] = None,
        should_retry: Optional[RetryPredicate] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Run `operation` until it succeeds, is rejected, or runs out of budget.

        Args:
            operation: Zero-argument callable returning an awaitable
            operation_name: Used in log records only
            policy: Policy for this call (defaults to the executor default)
            should_retry: Returns False for errors not worth retrying.
                None means retry everything until exhausted.
            overrides: Partial policy fields merged over `policy`

        Returns:
            Whatever the operation returns

        Raises:
            The last exception raised by the operation, unchanged
        """
        config = self.resolve_policy(policy, overrides)
        attempt = 1

        while True:
            try:
                result = await operation()
            except Exception as error:
                if attempt > config.max_retries:
                    logger.error(
                        f"Operation failed after {config.max_retries} retries",
                        extra={
                            "operation": operation_name,
                            "attempt": attempt,
                            "max_attempts": config.max_attempts,
                            "error": str(error),
                        },
                    )
                    raise

                if should_retry is not None and not should_retry(error):
                    logger.warning(
                        "Operation failed with non-retryable error",
                        extra={
                            "operation": operation_name,
                            "attempt": attempt,
                            "max_attempts": config.max_attempts,
                            "error": str(error),
                        },
                    )
                    raise

                delay_ms = self.delay_for(attempt, config)

                logger.warning(
                    f"Retry attempt {attempt}/{config.max_retries} for {operation_name}: {error}",
                    extra={
                        "operation": operation_name,
                        "attempt": attempt,
                        "max_attempts": config.max_attempts,
                        "delay_ms": delay_ms,
                        "error": str(error),
                    },
                )

                await self._sleep(delay_ms / 1000)
                attempt += 1
                continue

            if attempt > 1:
                logger.info(
                    f"Operation succeeded after {attempt - 1} retries",
                    extra={
                        "operation": operation_name,
                        "attempt": attempt,
                        "max_attempts": config.max_attempts,
                    },
                )
            return result

    async def execute_cronhooks_operation(
        self,
        operation: Operation,
        operation_name: str,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> T:
        return await self.execute(
            operation,
            f"Cronhooks.{operation_name}",
            should_retry=is_retryable_cronhooks_error,
            overrides=overrides,
        )

    async def execute_wasender_operation(
        self,
        operation: Operation,
        operation_name: str,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> T:
        return await self.execute(
            operation,
            f"Wasender.{operation_name}",
            should_retry=is_retryable_wasender_error,
            overrides=overrides,
        )

    async def execute_many(
        self,
        operations: List[RetryOperation],
        settle: bool = False,
    ) -> List[Any]:
        """
        Run several operations concurrently, each under its own retry budget.

        Default (settle=False) is fail-fast: the first operation to exhaust
        its budget raises here, while siblings keep running in the
        background until they finish. Their late failures are logged.

        With settle=True every operation is awaited and exceptions are
        returned in place of results.

        Results keep input order.
        """
        tasks = [
            asyncio.ensure_future(
                self.execute(op.operation, op.name, overrides=op.overrides)
            )
            for op in operations
        ]

        if settle:
            return await asyncio.gather(*tasks, return_exceptions=True)

        for task, op in zip(tasks, operations):
            task.add_done_callback(_make_orphan_logger(op.name))

        return await asyncio.gather(*tasks)


def _make_orphan_logger(name: str) -> Callable[["asyncio.Future[Any]"], None]:
    def _log_result(task: "asyncio.Future[Any]") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(
                "Fan-out operation finished with error",
                extra={"operation": name, "error": str(error)},
            )

    return _log_result
