"""
tests/resilience/test_retry_executor.py

Tests for RetryExecutor.

Verifies:
✔ Attempt counts and backoff delays handed to sleep
✔ The original exception instance is re-raised
✔ Predicate short-circuit, never consulted after the last attempt
✔ Default policy swaps do not affect in-flight calls
✔ Fan-out: fail-fast and settle modes
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from providers.errors import ProviderError
from resilience import RetryExecutor, RetryOperation, RetryPolicy


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────


def make_executor(**policy_kwargs):
    policy_kwargs.setdefault("jitter_enabled", False)
    sleep = AsyncMock()
    return RetryExecutor(default_policy=RetryPolicy(**policy_kwargs), sleep=sleep), sleep


def failing_then(result, failures):
    """Operation that raises each error in `failures` in turn, then returns `result`."""
    errors = list(failures)
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if errors:
            raise errors.pop(0)
        return result

    return operation, calls


def slept(sleep):
    return [c.args[0] for c in sleep.await_args_list]


def server_error():
    return ProviderError("Service Unavailable", provider="Wasender", status_code=503)


# ─────────────────────────────────────────────────────
# Single operation
# ─────────────────────────────────────────────────────


class TestExecute:
    @pytest.mark.asyncio
    async def test_success_first_attempt_never_sleeps(self):
        executor, sleep = make_executor()
        operation, calls = failing_then("ok", [])

        assert await executor.execute(operation, "op") == "ok"
        assert calls["count"] == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_after_three_failures_with_backoff(self):
        executor, sleep = make_executor()
        operation, calls = failing_then("ok", [server_error(), server_error(), server_error()])

        assert await executor.execute(operation, "op") == "ok"
        assert calls["count"] == 4
        assert slept(sleep) == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_same_instance(self):
        executor, sleep = make_executor(max_retries=2)
        error = server_error()

        async def operation():
            raise error

        with pytest.raises(ProviderError) as exc_info:
            await executor.execute(operation, "op")

        assert exc_info.value is error
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_exhaustion_call_count(self):
        executor, _ = make_executor(max_retries=3)
        operation, calls = failing_then("never", [server_error()] * 10)

        with pytest.raises(ProviderError):
            await executor.execute(operation, "op")

        assert calls["count"] == 4

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self):
        executor, sleep = make_executor(max_retries=0)
        operation, calls = failing_then("never", [server_error()])

        with pytest.raises(ProviderError):
            await executor.execute(operation, "op")

        assert calls["count"] == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_predicate_rejection_stops_immediately(self):
        executor, sleep = make_executor()
        error = ProviderError("auth failed", provider="Wasender", status_code=401)
        operation, calls = failing_then("never", [error])

        with pytest.raises(ProviderError) as exc_info:
            await executor.execute(operation, "op", should_retry=lambda e: False)

        assert exc_info.value is error
        assert calls["count"] == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_predicate_not_consulted_after_last_attempt(self):
        executor, _ = make_executor(max_retries=1)
        predicate = MagicMock(return_value=True)
        operation, calls = failing_then("never", [server_error(), server_error()])

        with pytest.raises(ProviderError):
            await executor.execute(operation, "op", should_retry=predicate)

        assert calls["count"] == 2
        assert predicate.call_count == 1

    @pytest.mark.asyncio
    async def test_per_call_overrides(self):
        executor, sleep = make_executor()
        operation, calls = failing_then("never", [server_error()] * 5)

        with pytest.raises(ProviderError):
            await executor.execute(
                operation, "op", overrides={"max_retries": 1, "base_delay_ms": 50}
            )

        assert calls["count"] == 2
        assert slept(sleep) == [0.05]
        assert executor.default_policy.max_retries == 3

    @pytest.mark.asyncio
    async def test_explicit_policy(self):
        executor, sleep = make_executor()
        policy = RetryPolicy(max_retries=2, base_delay_ms=10, jitter_enabled=False)
        operation, _ = failing_then("ok", [server_error(), server_error()])

        assert await executor.execute(operation, "op", policy=policy) == "ok"
        assert slept(sleep) == [0.01, 0.02]

    @pytest.mark.asyncio
    async def test_jitter_uses_injected_random(self):
        sleep = AsyncMock()
        executor = RetryExecutor(RetryPolicy(), sleep=sleep, rand=lambda: 0.5)
        operation, _ = failing_then("ok", [server_error()])

        await executor.execute(operation, "op")

        assert slept(sleep) == [1.05]


class TestProviderWrappers:
    @pytest.mark.asyncio
    async def test_wasender_unauthorized_is_single_attempt(self):
        executor, sleep = make_executor()
        error = ProviderError("Wasender auth failed", provider="Wasender", status_code=401)
        operation, calls = failing_then("never", [error])

        with pytest.raises(ProviderError):
            await executor.execute_wasender_operation(operation, "sendTextMessage")

        assert calls["count"] == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cronhooks_server_error_is_retried(self):
        executor, sleep = make_executor()
        error = ProviderError("boom", provider="Cronhooks", status_code=500)
        operation, calls = failing_then({"id": "sched_1"}, [error])

        result = await executor.execute_cronhooks_operation(operation, "createSchedule")

        assert result == {"id": "sched_1"}
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_cronhooks_message_veto(self):
        executor, _ = make_executor()
        error = ProviderError("Invalid cron expression", provider="Cronhooks", status_code=500)
        operation, calls = failing_then("never", [error])

        with pytest.raises(ProviderError):
            await executor.execute_cronhooks_operation(operation, "createRecurringSchedule")

        assert calls["count"] == 1


# ─────────────────────────────────────────────────────
# Default policy updates
# ─────────────────────────────────────────────────────


class TestDefaultPolicy:
    def test_update_replaces_default(self):
        executor, _ = make_executor()
        before = executor.default_policy

        after = executor.update_default_policy(max_retries=5)

        assert after.max_retries == 5
        assert executor.default_policy is after
        assert before.max_retries == 3

    def test_invalid_update_keeps_previous_default(self):
        executor, _ = make_executor()
        before = executor.default_policy

        with pytest.raises(ValueError):
            executor.update_default_policy(backoff_multiplier=0)

        assert executor.default_policy is before

    @pytest.mark.asyncio
    async def test_in_flight_call_keeps_its_policy(self):
        executor, _ = make_executor(max_retries=3)
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            if calls["count"] == 1:
                executor.update_default_policy(max_retries=0)
            raise server_error()

        with pytest.raises(ProviderError):
            await executor.execute(operation, "op")

        assert calls["count"] == 4
        assert executor.default_policy.max_retries == 0


# ─────────────────────────────────────────────────────
# Fan-out
# ─────────────────────────────────────────────────────


class TestExecuteMany:
    @pytest.mark.asyncio
    async def test_results_keep_input_order(self):
        executor, _ = make_executor()

        async def slow():
            await asyncio.sleep(0.01)
            return "slow"

        async def fast():
            return "fast"

        results = await executor.execute_many(
            [RetryOperation(slow, "slow"), RetryOperation(fast, "fast")]
        )

        assert results == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_each_operation_has_its_own_budget(self):
        executor, _ = make_executor(max_retries=1)
        first, first_calls = failing_then("a", [server_error()])
        second, second_calls = failing_then("b", [server_error()])

        results = await executor.execute_many(
            [RetryOperation(first, "first"), RetryOperation(second, "second")]
        )

        assert results == ["a", "b"]
        assert first_calls["count"] == 2
        assert second_calls["count"] == 2

    @pytest.mark.asyncio
    async def test_settle_returns_errors_in_place(self):
        executor, _ = make_executor()
        error = server_error()
        failing, _ = failing_then("never", [error] * 10)
        succeeding, _ = failing_then("ok", [])

        results = await executor.execute_many(
            [
                RetryOperation(failing, "failing", {"max_retries": 0}),
                RetryOperation(succeeding, "succeeding"),
            ],
            settle=True,
        )

        assert results[0] is error
        assert results[1] == "ok"

    @pytest.mark.asyncio
    async def test_fail_fast_leaves_siblings_running(self):
        executor, _ = make_executor()
        release = asyncio.Event()
        finished = {"sibling": False}
        error = server_error()

        async def failing():
            raise error

        async def sibling():
            await release.wait()
            finished["sibling"] = True
            return "done"

        with pytest.raises(ProviderError) as exc_info:
            await executor.execute_many(
                [
                    RetryOperation(failing, "failing", {"max_retries": 0}),
                    RetryOperation(sibling, "sibling"),
                ]
            )

        assert exc_info.value is error
        assert finished["sibling"] is False

        release.set()
        for _ in range(5):
            await asyncio.sleep(0)

        assert finished["sibling"] is True

    @pytest.mark.asyncio
    async def test_one_exhausted_operation_rejects_the_batch(self):
        executor, _ = make_executor(max_retries=3)
        error = server_error()
        failing, failing_calls = failing_then("never", [error] * 10)
        first, first_calls = failing_then("a", [])
        second, second_calls = failing_then("b", [])

        with pytest.raises(ProviderError) as exc_info:
            await executor.execute_many(
                [
                    RetryOperation(failing, "failing"),
                    RetryOperation(first, "first"),
                    RetryOperation(second, "second"),
                ]
            )

        assert exc_info.value is error
        assert failing_calls["count"] == 4
        assert first_calls["count"] == 1
        assert second_calls["count"] == 1
