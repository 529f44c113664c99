"""
FastAPI Application Entry Point

Integrates:
  - Messages API (immediate sends and Cronhooks scheduling)
  - Wasender session API
  - Retry policy administration
  - Cronhooks webhooks
  - Health checks
  - Middleware for request IDs, security headers & logging

Run: uvicorn main:app --reload --host 0.0.0.0 --port 3000
"""

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api import messages_router, retry_router, sessions_router, webhooks_router
from api.deps import AuthInfo, optional_authenticate
from api.errors import ok, register_exception_handlers
from config import Config
from infra import InfraBootstrap, bootstrap_infrastructure

VERSION = "1.0.0"
SERVICE_NAME = "whatsapp-scheduler-backend"

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def _uptime() -> float:
    return round(time.monotonic() - STARTED_AT, 3)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.

    A missing provider token leaves that provider disabled; startup never
    fails on configuration so /healthz keeps answering.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("WhatsApp Scheduler starting up...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")

    bootstrap = bootstrap_infrastructure()
    logger.info(f"Providers: {bootstrap}")
    logger.info(f"Retry policy: {bootstrap.retry_executor.default_policy.to_dict()}")

    missing = Config.missing()
    if missing:
        logger.warning(f"Missing configuration: {', '.join(missing)} (affected providers disabled)")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("WhatsApp Scheduler shutting down...")


# Create FastAPI app
app = FastAPI(
    title="WhatsApp Scheduler API",
    description="Relay between Cronhooks schedules and the Wasender WhatsApp API",
    version=VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in Config.CORS_ORIGIN.split(",")],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key", "X-Request-ID", "X-Webhook-Secret"],
)


# Middleware for request IDs and logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag every request with an ID, log it, and add security headers."""
    request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:12]}"
    request.state.request_id = request_id
    started = time.monotonic()

    logger.debug(f"{request.method} {request.url.path}", extra={"request_id": request_id})
    response = await call_next(request)

    duration_ms = round((time.monotonic() - started) * 1000)
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {duration_ms}ms",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )

    response.headers["X-Request-ID"] = request_id
    for header, value in SECURITY_HEADERS.items():
        response.headers[header] = value
    return response


register_exception_handlers(app)

# Include routers
app.include_router(messages_router)
app.include_router(sessions_router)
app.include_router(retry_router)
app.include_router(webhooks_router)


# Health check endpoints
@app.get("/healthz")
async def healthz():
    """Dependency-free liveness check."""
    return {"status": "ok", "uptime": _uptime()}


@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check (Kubernetes readiness probe)."""
    missing = Config.missing()
    if missing:
        return {"status": "not_ready", "reason": f"Missing configuration: {', '.join(missing)}"}
    return {"status": "ready"}


@app.get("/health")
async def health():
    """
    Provider health. Always 200 so external probes do not restart the
    service; a failing provider reports "degraded".
    """
    bootstrap = InfraBootstrap.get_instance()
    started = time.monotonic()

    wasender_result, cronhooks_result = await asyncio.gather(
        bootstrap.wasender.validate_configuration(),
        bootstrap.cronhooks.validate_configuration(),
        return_exceptions=True,
    )

    def _service(result):
        if isinstance(result, BaseException):
            return {"status": "unhealthy", "details": str(result)}
        return {"status": "healthy" if result else "unhealthy", "details": "OK"}

    services = {
        "wasender": _service(wasender_result),
        "cronhooks": _service(cronhooks_result),
    }
    healthy = all(service["status"] == "healthy" for service in services.values())

    return ok(
        {
            "service": SERVICE_NAME,
            "status": "healthy" if healthy else "degraded",
            "uptime": _uptime(),
            "response_time_ms": round((time.monotonic() - started) * 1000),
            "version": VERSION,
            "environment": Config.ENVIRONMENT,
            "services": services,
            "retry_policy": bootstrap.retry_executor.default_policy.to_dict(),
        },
        "All systems operational" if healthy else "Some services are unhealthy (degraded)",
        success=healthy,
    )


@app.get("/metrics")
async def metrics(auth: AuthInfo = Depends(optional_authenticate)):
    """Basic service metrics. Open to all; notes whether a known API key was sent."""
    bootstrap = InfraBootstrap.get_instance()
    return ok(
        {
            "service": SERVICE_NAME,
            "uptime": _uptime(),
            "environment": Config.ENVIRONMENT,
            "retry_policy": bootstrap.retry_executor.default_policy.to_dict(),
            "providers": {
                "wasender": bootstrap.wasender.get_service_stats(),
                "cronhooks": bootstrap.cronhooks.get_service_stats(),
            },
            "notifications": bootstrap.notifications.get_configuration(),
            "auth": {"api_key_present": auth.api_key_present, "authenticated": auth.is_valid},
        },
        "Service metrics",
    )


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "WhatsApp Scheduler API",
        "version": VERSION,
        "status": "running",
        "endpoints": {
            "send_message": "POST /api/v1/messages/send",
            "schedule_message": "POST /api/v1/messages/schedule",
            "schedule_recurring": "POST /api/v1/messages/schedule-recurring",
            "schedules": "GET /api/v1/messages/schedules",
            "sessions": "GET /api/v1/wasender/sessions",
            "retry_policy": "GET|PUT /api/v1/retry/policy",
            "message_trigger": "POST /webhook/message-trigger",
            "health": "GET /health",
            "healthz": "GET /healthz",
            "metrics": "GET /metrics",
            "docs": "GET /docs",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.PORT,
        reload=Config.is_development(),
    )
