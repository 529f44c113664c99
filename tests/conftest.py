"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from resilience import RetryExecutor, RetryPolicy  # noqa: E402


@pytest.fixture
def no_sleep():
    """Stand-in for asyncio.sleep; records the requested delays."""
    return AsyncMock()


@pytest.fixture
def executor(no_sleep):
    """Default policy, jitter off, no real waiting."""
    return RetryExecutor(RetryPolicy(jitter_enabled=False), sleep=no_sleep)


@pytest.fixture
def scripted_transport():
    """
    Build an httpx.MockTransport that replays a script of responses.

    Each step is a (status, json_body) tuple, an exception to raise, or a
    callable taking the request. The last step repeats once the script
    runs out. Returns (transport, recorded_requests).
    """

    def _make(*steps):
        script = list(steps)
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            step = script.pop(0) if len(script) > 1 else script[0]
            if isinstance(step, Exception):
                raise step
            if callable(step):
                return step(request)
            status, body = step
            return httpx.Response(status, json=body)

        return httpx.MockTransport(handler), requests

    return _make
