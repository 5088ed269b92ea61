"""Security and audit middleware."""

import time
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from reelshelf.services.logging_service import logger, app_metrics


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    Implements OWASP recommended security headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=(), payment=()"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"

        # Tokens and account data must not be cached
        if any(request.url.path.startswith(path) for path in ("/api/auth", "/api/users", "/api/platforms")):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
            response.headers["Pragma"] = "no-cache"

        return response


class RequestValidationMiddleware(BaseHTTPMiddleware):
    """
    Reject oversized bodies and path traversal attempts.
    """

    def __init__(self, app, max_content_length: int = 10 * 1024 * 1024):
        """
        Initialize request validation middleware.

        Args:
            app: FastAPI application
            max_content_length: Maximum request body size (default 10MB)
        """
        super().__init__(app)
        self.max_content_length = max_content_length

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_length:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"detail": f"Request body too large. Maximum: {self.max_content_length} bytes"}
            )

        path_lower = request.url.path.lower()
        if "../" in path_lower or "..\\" in path_lower:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"detail": "Invalid request path"}
            )

        return await call_next(request)


class AuditLogMiddleware(BaseHTTPMiddleware):
    """
    Log every API request with its status and duration, and count it
    in the application metrics.
    """

    def __init__(self, app, skip_prefixes: tuple = ("/health", "/metrics", "/uploads")):
        super().__init__(app)
        self.skip_prefixes = skip_prefixes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path.startswith(self.skip_prefixes):
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        # Route template keeps per-endpoint counters bounded
        route = request.scope.get("route")
        endpoint = f"{request.method} {getattr(route, 'path', path)}"
        app_metrics.increment_request(endpoint, success=response.status_code < 500)

        logger.info(
            "Request handled",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            client_ip=request.client.host if request.client else "unknown"
        )

        return response
