"""
Shared HTTP plumbing for provider clients.

One request = one httpx.AsyncClient. Errors are translated into
ProviderError here so retry predicates see upstream status codes.
No retries in this module; callers wrap `_request` in the executor.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from resilience import RetryExecutor

from .errors import (
    ServiceUnavailableError,
    provider_error_from_request_error,
    provider_error_from_response,
)

logger = logging.getLogger(__name__)

USER_AGENT = "WhatsApp-Scheduler-Backend/1.0.0"


class ProviderClient:
    """
    Base class for Wasender / Cronhooks clients.

    A client without a token runs in disabled mode: it never touches the
    network and its operations raise ServiceUnavailableError.
    """

    provider_name = "Provider"

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: float,
        executor: RetryExecutor,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token or ""
        self.timeout = timeout
        self.executor = executor
        self._transport = transport
        self.disabled = not self._api_token

        if self.disabled:
            logger.warning(
                f"{self.provider_name} API token is not configured - "
                f"{self.provider_name} client running in disabled mode"
            )

    @property
    def has_api_token(self) -> bool:
        return bool(self._api_token)

    def _ensure_enabled(self) -> None:
        if self.disabled:
            raise ServiceUnavailableError(self.provider_name)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform one HTTP call and return the decoded JSON body.

        Raises:
            ProviderError: Non-2xx response or transport failure
        """
        url = f"{self.base_url}{path}"

        logger.debug(
            f"Making request to {method} {url}",
            extra={
                "provider": self.provider_name,
                "params": params,
                "headers": {**self._headers(), "Authorization": "[REDACTED]"},
            },
        )

        try:
            async with httpx.AsyncClient(
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, json=json, params=params)
        except httpx.RequestError as e:
            error = provider_error_from_request_error(self.provider_name, e)
            logger.error(
                f"{self.provider_name} request failed: {method} {url}",
                extra={
                    "provider": self.provider_name,
                    "network_code": error.network_code,
                    "error": str(e),
                },
            )
            raise error from e

        if response.status_code >= 400:
            error = provider_error_from_response(self.provider_name, response)
            logger.error(
                f"{self.provider_name} API error: {response.status_code} {method} {url}",
                extra={
                    "provider": self.provider_name,
                    "status_code": response.status_code,
                    "error_body": response.text,
                },
            )
            raise error

        logger.debug(
            f"Response from {method} {url}",
            extra={"provider": self.provider_name, "status_code": response.status_code},
        )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"raw": response.text}

    def get_service_stats(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "has_api_token": self.has_api_token,
            "configured_timeout": self.timeout,
            "disabled": self.disabled,
        }
