"""Rate limiting middleware."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from pulse_weather.config import RATE_LIMIT_ENABLED
from pulse_weather.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients exceeding the request rate with HTTP 429."""

    # Paths that should bypass rate limiting
    BYPASS_PATHS = {
        "/weather/health",
        "/weather/info",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/favicon.ico",
    }

    def __init__(
        self,
        app,
        rate_limiter: Optional[RateLimiter] = None,
        enabled: bool = RATE_LIMIT_ENABLED
    ):
        """Initialize rate limit middleware.

        Args:
            app: ASGI application
            rate_limiter: Limiter to consult (creates default if None)
            enabled: Whether requests are checked at all
        """
        super().__init__(app)
        self.enabled = enabled
        self.rate_limiter = rate_limiter or (RateLimiter() if enabled else None)
        if self.rate_limiter:
            logger.info(f"Rate limit enabled: {self.enabled}, limit: {self.rate_limiter.max_requests} "
                        f"req per {self.rate_limiter.window_size}s per client")
        else:
            logger.info("Rate limit disabled")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through rate limiting check."""
        if not self.enabled or request.url.path in self.BYPASS_PATHS:
            return await call_next(request)

        client_id = request.client.host if request.client else "unknown"
        is_allowed, retry_after = await self.rate_limiter.is_allowed(client_id)

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {client_id} accessing {request.method} {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = str(self.rate_limiter.window_size)
        return response
