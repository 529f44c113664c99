"""
Error handlers and response envelopes.

Success: {"success": true, "data": ..., "message": "..."}
Error:   {"success": false, "error": "...", "code": "...", "request_id": "..."}
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from providers.errors import AppError

logger = logging.getLogger(__name__)


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID", "unknown")


def ok(data: Any = None, message: str = "OK", status_code: int = status.HTTP_200_OK, **extra) -> JSONResponse:
    body = {"success": True, "data": data, "message": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error_response(
    request: Request,
    status_code: int,
    error: str,
    code: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    body = {
        "success": False,
        "error": error,
        "code": code,
        "request_id": request_id_of(request),
    }
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def _log(request: Request, status_code: int, error: BaseException) -> None:
    extra = {
        "request_id": request_id_of(request),
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "error": str(error),
    }
    if status_code < 500:
        logger.warning("Client error occurred", extra=extra)
    else:
        logger.error("Server error occurred", extra=extra, exc_info=error)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    _log(request, exc.http_status, exc)
    return error_response(request, exc.http_status, exc.message, exc.code, exc.details)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    _log(request, status.HTTP_400_BAD_REQUEST, exc)
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        "VALIDATION_ERROR",
        details,
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    _log(request, exc.status_code, exc)
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
    return error_response(request, exc.status_code, str(exc.detail), code)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    _log(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
