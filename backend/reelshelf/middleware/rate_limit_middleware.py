"""Rate limiting middleware backed by Redis."""

import json
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from reelshelf.services.redis_service import is_redis_available, rate_limiter
from reelshelf.utils.security import decode_access_token


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware using Redis.

    Limits requests per authenticated user or client IP. Disabled when Redis is
    unavailable.
    """

    def __init__(
        self,
        app,
        max_requests: int = 60,
        window_seconds: int = 60
    ):
        """
        Initialize rate limit middleware.

        Args:
            app: FastAPI application
            max_requests: Max requests per window
            window_seconds: Time window in seconds
        """
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def _get_identifier(self, request: Request) -> str:
        """
        Get unique identifier for rate limiting.

        Only a bearer token that verifies gets its own bucket; anything
        else shares the client IP's bucket.

        Args:
            request: HTTP request

        Returns:
            Identifier string (user id or IP)
        """
        authorization = request.headers.get("authorization", "")
        if authorization.lower().startswith("bearer "):
            payload = decode_access_token(authorization[7:].strip())
            if payload and payload.get("sub"):
                return f"user:{payload['sub']}"

        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not is_redis_available():
            return await call_next(request)

        identifier = self._get_identifier(request)

        if not rate_limiter.is_allowed(identifier):
            return Response(
                content=json.dumps({
                    "detail": "Rate limit exceeded",
                    "retry_after": self.window_seconds
                }),
                status_code=429,
                headers={
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(self.window_seconds),
                    "Retry-After": str(self.window_seconds)
                },
                media_type="application/json"
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(rate_limiter.get_remaining(identifier))
        response.headers["X-RateLimit-Reset"] = str(self.window_seconds)

        return response
