"""
tests/resilience/test_retry_policy.py

Tests for RetryPolicy and compute_delay.

Verifies:
✔ Defaults and validation
✔ merged() ignores None and rejects unknown fields
✔ Exponential growth, cap, then jitter, then floor
✔ Environment loading
"""

import dataclasses

import pytest

from resilience import RetryPolicy, compute_delay


def no_jitter(**kwargs):
    return RetryPolicy(jitter_enabled=False, **kwargs)


# ─────────────────────────────────────────────────────
# Policy value object
# ─────────────────────────────────────────────────────


class TestRetryPolicy:
    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_retries == 3
        assert policy.base_delay_ms == 1000
        assert policy.max_delay_ms == 30000
        assert policy.backoff_multiplier == 2
        assert policy.jitter_enabled is True
        assert policy.max_attempts == 4

    def test_is_immutable(self):
        policy = RetryPolicy()
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.max_retries = 10

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_retries": -1},
            {"base_delay_ms": 0},
            {"base_delay_ms": 5000, "max_delay_ms": 1000},
            {"backoff_multiplier": 1},
            {"backoff_multiplier": 0.5},
            {"max_delay_ms": float("nan")},
            {"base_delay_ms": float("nan")},
            {"backoff_multiplier": float("nan")},
            {"max_delay_ms": float("inf")},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_zero_retries_allowed(self):
        assert RetryPolicy(max_retries=0).max_attempts == 1

    def test_merged_returns_new_policy(self):
        policy = RetryPolicy()
        merged = policy.merged({"max_retries": 5}, base_delay_ms=200)

        assert merged.max_retries == 5
        assert merged.base_delay_ms == 200
        assert policy.max_retries == 3
        assert policy.base_delay_ms == 1000

    def test_merged_ignores_none(self):
        policy = RetryPolicy()
        assert policy.merged({"max_retries": None}) is policy

    def test_merged_rejects_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown retry policy fields"):
            RetryPolicy().merged({"retries": 2})

    def test_merged_validates_result(self):
        with pytest.raises(ValueError):
            RetryPolicy().merged(max_delay_ms=10)

    def test_to_dict(self):
        assert RetryPolicy().to_dict() == {
            "max_retries": 3,
            "base_delay_ms": 1000,
            "max_delay_ms": 30000,
            "backoff_multiplier": 2,
            "jitter_enabled": True,
        }

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_MAX_RETRIES", "5")
        monkeypatch.setenv("DEFAULT_RETRY_DELAY_MS", "250")
        monkeypatch.setenv("DEFAULT_MAX_DELAY_MS", "4000")
        monkeypatch.setenv("DEFAULT_BACKOFF_MULTIPLIER", "3")
        monkeypatch.setenv("RETRY_JITTER_ENABLED", "false")

        policy = RetryPolicy.from_env()

        assert policy == RetryPolicy(
            max_retries=5,
            base_delay_ms=250,
            max_delay_ms=4000,
            backoff_multiplier=3,
            jitter_enabled=False,
        )


# ─────────────────────────────────────────────────────
# Delay computation
# ─────────────────────────────────────────────────────


class TestComputeDelay:
    def test_exponential_sequence_is_capped(self):
        policy = no_jitter()
        delays = [compute_delay(attempt, policy) for attempt in range(1, 8)]
        assert delays == [1000, 2000, 4000, 8000, 16000, 30000, 30000]

    def test_fractional_delay_is_floored(self):
        policy = no_jitter(base_delay_ms=150, backoff_multiplier=1.5)
        assert compute_delay(2, policy) == 225
        assert compute_delay(3, policy) == 337

    def test_jitter_lower_bound(self):
        assert compute_delay(1, RetryPolicy(), rand=lambda: 0.0) == 1000

    def test_jitter_upper_bound_stays_below_ten_percent(self):
        assert compute_delay(1, RetryPolicy(), rand=lambda: 0.999999) == 1099

    def test_jitter_applied_after_cap(self):
        # 1000 * 2^9 is capped to 30000 first, then +5%
        assert compute_delay(10, RetryPolicy(), rand=lambda: 0.5) == 31500

    @pytest.mark.parametrize("attempt", [1, 2, 3, 4, 5, 6])
    def test_jitter_within_bounds(self, attempt):
        policy = RetryPolicy()
        base = compute_delay(attempt, dataclasses.replace(policy, jitter_enabled=False))
        for _ in range(50):
            delay = compute_delay(attempt, policy)
            assert base <= delay <= base * 1.1

    def test_very_late_attempt_stays_at_cap(self):
        policy = no_jitter(
            max_retries=2000,
            base_delay_ms=1000.0,
            max_delay_ms=30000.0,
            backoff_multiplier=2.0,
        )
        assert compute_delay(1100, policy) == 30000
        assert compute_delay(2000, policy) == 30000

    def test_attempt_must_be_positive(self):
        with pytest.raises(ValueError):
            compute_delay(0, RetryPolicy())
