"""
Provider clients - Module Exports

Adapters for the two external REST services:
  Wasender   -> send WhatsApp messages now
  Cronhooks  -> schedule webhook callbacks for later
"""

from .errors import (
    AppError,
    ForbiddenError,
    NotFoundError,
    ProviderError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "AppError",
    "ForbiddenError",
    "NotFoundError",
    "ProviderError",
    "ServiceUnavailableError",
    "UnauthorizedError",
    "ValidationError",
]
