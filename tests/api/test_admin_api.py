"""
tests/api/test_admin_api.py

HTTP tests for retry policy administration, Wasender sessions and the
top-level health / metrics endpoints.
"""

from config import Config


class TestRetryPolicyApi:
    def test_get_policy(self, api):
        client, _, _ = api()

        response = client.get("/api/v1/retry/policy")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "max_retries": 3,
            "base_delay_ms": 1,
            "max_delay_ms": 1,
            "backoff_multiplier": 2,
            "jitter_enabled": False,
        }

    def test_update_policy(self, api):
        client, _, bootstrap = api()
        executor = bootstrap.retry_executor

        response = client.put("/api/v1/retry/policy", json={"maxRetries": 1, "maxDelayMs": 5})

        assert response.status_code == 200
        assert response.json()["data"]["max_retries"] == 1
        assert executor.default_policy.max_retries == 1
        assert executor.default_policy.max_delay_ms == 5

    def test_updated_policy_reaches_providers(self, api):
        client, requests, _ = api((503, {"message": "down"}))

        client.put("/api/v1/retry/policy", json={"maxRetries": 0})
        response = client.post(
            "/api/v1/messages/send",
            json={"phoneNumber": "+15551234567", "messageType": "text", "message": "hi"},
        )

        assert response.status_code == 502
        assert len(requests) == 1

    def test_inconsistent_policy_is_rejected(self, api):
        client, _, bootstrap = api()

        response = client.put("/api/v1/retry/policy", json={"baseDelayMs": 5000})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert bootstrap.retry_executor.default_policy.base_delay_ms == 1

    def test_unknown_field_is_rejected(self, api):
        client, _, _ = api()

        response = client.put("/api/v1/retry/policy", json={"retries": 2})

        assert response.status_code == 400

    def test_multiplier_must_exceed_one(self, api):
        client, _, _ = api()

        response = client.put("/api/v1/retry/policy", json={"backoffMultiplier": 1})

        assert response.status_code == 400


class TestSessionsApi:
    def test_list_sessions(self, api):
        client, requests, _ = api((200, {"data": [{"id": 1, "name": "main", "status": "connected"}]}))

        response = client.get("/api/v1/wasender/sessions")

        assert response.status_code == 200
        assert response.json()["data"][0]["name"] == "main"
        assert requests[0].url.path == "/api/whatsapp-sessions"

    def test_create_session(self, api):
        client, requests, _ = api((201, {"data": {"id": 5, "name": "sales", "status": "qr_code"}}))

        response = client.post("/api/v1/wasender/sessions", json={"name": "sales"})

        assert response.status_code == 201
        assert response.json()["data"]["id"] == 5
        assert requests[0].method == "POST"

    def test_create_session_requires_name(self, api):
        client, requests, _ = api()

        response = client.post("/api/v1/wasender/sessions", json={"name": ""})

        assert response.status_code == 400
        assert requests == []

    def test_connection_status(self, api):
        client, _, _ = api((200, [{"id": 1, "status": "connected"}]))

        response = client.get("/api/v1/wasender/connection-status")

        assert response.json()["data"] == {"connected": True}

    def test_health_when_disabled(self, api):
        client, requests, _ = api(wasender_token="")

        response = client.get("/api/v1/wasender/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "disabled"
        assert requests == []

    def test_stats(self, api):
        client, _, _ = api()

        response = client.get("/api/v1/wasender/stats")

        data = response.json()["data"]
        assert data["base_url"] == "https://wasender.test/api"
        assert data["has_api_token"] is True


class TestHealth:
    def test_healthz(self, api):
        client, requests, _ = api()

        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert requests == []

    def test_health_all_providers_reachable(self, api):
        client, _, _ = api((200, {}))

        response = client.get("/health")

        assert response.status_code == 200
        payload = response.json()
        assert payload["success"] is True
        assert payload["data"]["status"] == "healthy"
        assert payload["data"]["services"]["wasender"]["status"] == "healthy"
        assert payload["data"]["services"]["cronhooks"]["status"] == "healthy"

    def test_health_degraded_still_200(self, api):
        client, _, _ = api(wasender_token="", cronhooks_token="")

        response = client.get("/health")

        assert response.status_code == 200
        payload = response.json()
        assert payload["success"] is False
        assert payload["data"]["status"] == "degraded"

    def test_unknown_route(self, api):
        client, _, _ = api()

        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestMetrics:
    def test_known_api_key(self, api, monkeypatch):
        monkeypatch.setattr(Config, "API_KEYS", ["key-1"])
        client, _, _ = api()

        response = client.get("/metrics", headers={"X-API-Key": "key-1"})

        assert response.status_code == 200
        assert response.json()["data"]["auth"] == {"api_key_present": True, "authenticated": True}

    def test_unknown_api_key_is_not_rejected(self, api, monkeypatch):
        monkeypatch.setattr(Config, "API_KEYS", ["key-1"])
        client, _, _ = api()

        response = client.get("/metrics", params={"apiKey": "nope"})

        assert response.status_code == 200
        assert response.json()["data"]["auth"]["authenticated"] is False
