"""Per-client rate limiting backed by Redis."""

import logging
import math
import time
from typing import Optional

import redis.asyncio as redis

from pulse_weather.config import (
    REDIS_URL,
    RATE_LIMIT_REQUESTS_PER_SECOND,
    RATE_LIMIT_WINDOW_SECONDS,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window rate limiter using one Redis sorted set per client.

    Each request is stored with its timestamp as score; entries older than
    the window are dropped before counting. Allows requests if Redis is
    unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        window_size: float = RATE_LIMIT_WINDOW_SECONDS,
        key_prefix: str = RATE_LIMIT_REDIS_KEY_PREFIX
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per client within one window
            window_size: Window length in seconds
            key_prefix: Prefix of the per-client Redis keys
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.window_size = window_size
        self.key_prefix = key_prefix

    def key_for(self, client_id: str) -> str:
        """Redis key of the sorted set tracking one client."""
        return f"{self.key_prefix}:{client_id}"

    async def is_allowed(self, client_id: str) -> tuple[bool, int]:
        """Check if a request from a client is allowed under the rate limit.

        Args:
            client_id: Identifier of the caller, usually its address

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        key = self.key_for(client_id)
        try:
            now_us = int(time.time() * 1_000_000)
            window_start_us = now_us - int(self.window_size * 1_000_000)

            pipe = self.redis_client.pipeline()
            pipe.zadd(key, {str(now_us): now_us})
            pipe.zremrangebyscore(key, 0, window_start_us)
            pipe.zcard(key)
            pipe.expire(key, max(1, math.ceil(self.window_size * 2)))
            _, _, request_count, _ = await pipe.execute()

        except Exception as e:
            logger.error(f"Rate limiter error for {client_id}: {e}")
            return True, 0

        if request_count > self.max_requests:
            retry_after = max(1, math.ceil(self.window_size))
            logger.debug(f"Rate limited {client_id}: count={request_count}, max={self.max_requests}")
            return False, retry_after

        return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
