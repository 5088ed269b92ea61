"""Middleware modules for FastAPI application."""

from reelshelf.middleware.rate_limit_middleware import RateLimitMiddleware
from reelshelf.middleware.security_middleware import (
    SecurityHeadersMiddleware,
    RequestValidationMiddleware,
    AuditLogMiddleware
)

__all__ = [
    "RateLimitMiddleware",
    "SecurityHeadersMiddleware",
    "RequestValidationMiddleware",
    "AuditLogMiddleware"
]
