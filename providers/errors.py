"""
Error taxonomy shared by provider clients and the HTTP API.

Provider errors keep the upstream status (`status_code`) for retry
classification and separately carry the status the API returns
(`http_status`).
"""

from typing import Any, Optional

import httpx


class AppError(Exception):
    """Operational error with an HTTP status and machine-readable code."""

    http_status: int = 500
    code: str = "GENERIC_ERROR"

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status
        if code is not None:
            self.code = code
        self.details = details


class ValidationError(AppError):
    http_status = 400
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    http_status = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class UnauthorizedError(AppError):
    http_status = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(AppError):
    http_status = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class ServiceUnavailableError(AppError):
    http_status = 503
    code = "SERVICE_UNAVAILABLE"

    def __init__(self, service: str):
        super().__init__(f"{service} service is currently unavailable")
        self.service = service


class ProviderError(AppError):
    """
    Failure talking to an external provider.

    Attributes:
        provider: "Wasender" or "Cronhooks"
        status_code: Upstream HTTP status, None for transport failures
        network_code: ECONNRESET / ENOTFOUND / ECONNREFUSED / ETIMEDOUT / ENETWORK
        body: Decoded upstream response body, if any
    """

    http_status = 502
    code = "PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        network_code: Optional[str] = None,
        http_status: Optional[int] = None,
        code: Optional[str] = None,
        body: Any = None,
    ):
        super().__init__(message, http_status=http_status, code=code)
        self.provider = provider
        self.status_code = status_code
        self.network_code = network_code
        self.body = body

    def __repr__(self) -> str:
        return (
            f"ProviderError(provider={self.provider!r}, status_code={self.status_code}, "
            f"network_code={self.network_code!r}, code={self.code!r}, message={self.message!r})"
        )


def network_code_for(error: httpx.RequestError) -> str:
    """Map an httpx transport failure onto a socket-style error code."""
    text = str(error).lower()

    if isinstance(error, httpx.TimeoutException):
        return "ETIMEDOUT"

    if isinstance(error, httpx.ConnectError):
        if "name or service not known" in text or "getaddrinfo" in text or "nodename" in text:
            return "ENOTFOUND"
        return "ECONNREFUSED"

    if isinstance(error, (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)):
        return "ECONNRESET"

    return "ENETWORK"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _validation_details(body: Any) -> list:
    if not isinstance(body, dict) or not isinstance(body.get("errors"), dict):
        return []

    details = []
    for value in body["errors"].values():
        if isinstance(value, list):
            details.extend(str(v) for v in value)
        else:
            details.append(str(value))
    return details


def _upstream_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or fallback
    if isinstance(body, str) and body:
        return body
    return fallback


def provider_error_from_response(provider: str, response: httpx.Response) -> ProviderError:
    """
    Translate a non-2xx provider response.

    401 -> 401, 403 -> 403, 400/422 -> 400 with validation details,
    other 4xx -> same status, 5xx -> 502.
    """
    status = response.status_code
    body = _response_body(response)
    base_message = _upstream_message(body, f"{provider} API error")
    prefix = provider.upper()

    if status == 401:
        return ProviderError(
            f"{provider} auth failed: {base_message}",
            provider=provider,
            status_code=status,
            http_status=401,
            code=f"{prefix}_UNAUTHORIZED",
            body=body,
        )

    if status == 403:
        return ProviderError(
            f"{provider} permission denied: {base_message}",
            provider=provider,
            status_code=status,
            http_status=403,
            code=f"{prefix}_FORBIDDEN",
            body=body,
        )

    if status in (400, 422):
        details = _validation_details(body)
        message = f"{base_message} - {', '.join(details)}" if details else base_message
        return ProviderError(
            message,
            provider=provider,
            status_code=status,
            http_status=400,
            code=f"{prefix}_VALIDATION_ERROR",
            body=body,
        )

    return ProviderError(
        f"{provider} API error ({status}): {base_message}",
        provider=provider,
        status_code=status,
        http_status=502 if status >= 500 else status,
        code=f"{prefix}_API_ERROR",
        body=body,
    )


def provider_error_from_request_error(provider: str, error: httpx.RequestError) -> ProviderError:
    network_code = network_code_for(error)
    return ProviderError(
        f"Network error: {network_code} - {error}",
        provider=provider,
        network_code=network_code,
        http_status=502,
        code=f"{provider.upper()}_NETWORK_ERROR",
    )
