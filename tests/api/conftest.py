"""Fixtures for HTTP API tests: a bootstrap wired to a mocked transport."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from infra import InfraBootstrap, InfraConfig
from resilience import RetryPolicy
from services.notification import NotificationService


def make_config(wasender_token="w-token", cronhooks_token="c-token"):
    return InfraConfig(
        wasender_api_url="https://wasender.test/api",
        wasender_api_token=wasender_token,
        cronhooks_api_url="https://cronhooks.test",
        cronhooks_api_token=cronhooks_token,
        webhook_base_url="https://relay.test",
        default_timezone="UTC",
        timeout_ms=5000,
        # 1ms backoff keeps retry paths fast
        retry_policy=RetryPolicy(base_delay_ms=1, max_delay_ms=1, jitter_enabled=False),
    )


@pytest.fixture
def api(scripted_transport):
    """
    Factory: api(*steps, **tokens) -> (client, upstream_requests, bootstrap).

    Notifications are replaced by an AsyncMock so tests can assert on them.
    """

    def _make(*steps, wasender_token="w-token", cronhooks_token="c-token"):
        from main import app

        transport, requests = scripted_transport(*(steps or [(200, {})]))
        bootstrap = InfraBootstrap(
            make_config(wasender_token, cronhooks_token),
            transport=transport,
        )
        bootstrap.notifications = AsyncMock(spec=NotificationService)
        bootstrap.notifications.get_configuration.return_value = (
            NotificationService().get_configuration()
        )
        InfraBootstrap.set_instance(bootstrap)
        return TestClient(app), requests, bootstrap

    yield _make
    InfraBootstrap.reset()
