"""
Retry policy value object and backoff computation.

Pure data + one pure function. No I/O, no logging.
"""

import math
import os
import random
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Optional


@dataclass(frozen=True)
class RetryPolicy:
    """
    Capped exponential backoff settings for one executor invocation.

    Immutable. Build variants with `merged()` instead of mutating.
    """

    max_retries: int = 3
    base_delay_ms: float = 1000
    max_delay_ms: float = 30000
    backoff_multiplier: float = 2
    jitter_enabled: bool = True

    def __post_init__(self):
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ValueError("max_retries must be an integer")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        for name in ("base_delay_ms", "max_delay_ms", "backoff_multiplier"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number")
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be > 0")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        if self.backoff_multiplier <= 1:
            raise ValueError("backoff_multiplier must be > 1")

    @property
    def max_attempts(self) -> int:
        """First attempt plus the retry budget."""
        return self.max_retries + 1

    def merged(self, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> "RetryPolicy":
        """
        Return a copy with the given fields replaced.

        Keys set to None are ignored so partial request bodies can be
        passed straight through.

        Raises:
            ValueError: unknown field, or the result violates an invariant
        """
        changes = dict(overrides or {})
        changes.update(kwargs)
        changes = {k: v for k, v in changes.items() if v is not None}

        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown retry policy fields: {', '.join(sorted(unknown))}")

        if not changes:
            return self
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls) -> "RetryPolicy":
        """Load the process default from environment variables."""
        return cls(
            max_retries=int(os.getenv("DEFAULT_MAX_RETRIES", "3")),
            base_delay_ms=float(os.getenv("DEFAULT_RETRY_DELAY_MS", "1000")),
            max_delay_ms=float(os.getenv("DEFAULT_MAX_DELAY_MS", "30000")),
            backoff_multiplier=float(os.getenv("DEFAULT_BACKOFF_MULTIPLIER", "2")),
            jitter_enabled=os.getenv("RETRY_JITTER_ENABLED", "true").lower() == "true",
        )


def compute_delay(
    attempt: int,
    policy: RetryPolicy,
    rand: Callable[[], float] = random.random,
) -> int:
    """
    Delay in milliseconds to wait after the given failed attempt.

    delay = min(base * multiplier^(attempt-1), max)
    then up to +10% jitter, applied after the cap, then floored.

    Args:
        attempt: 1-based ordinal of the attempt that just failed
        policy: Backoff settings
        rand: Uniform [0, 1) source, injectable for tests

    Returns:
        Whole milliseconds
    """
    if attempt < 1:
        raise ValueError("attempt must be >= 1")

    try:
        delay = policy.base_delay_ms * policy.backoff_multiplier ** (attempt - 1)
    except OverflowError:
        # Far past the cap; float power left the representable range.
        delay = policy.max_delay_ms
    delay = min(delay, policy.max_delay_ms)

    if policy.jitter_enabled:
        delay += delay * 0.1 * rand()

    return math.floor(delay)
