"""Rate limiting middleware using Redis with a sliding-window Lua script."""

import logging
import random
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from maji.core.redis import get_redis
from maji.core.security import decode_access_token

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client rate limiting with an atomic Lua script.

    Authenticated requests are limited per user id, anonymous ones per IP.
    Requests are let through if Redis is unavailable.
    """

    RATE_LIMIT_SCRIPT = """
    local key = KEYS[1]
    local now = tonumber(ARGV[1])
    local window = tonumber(ARGV[2])
    local limit = tonumber(ARGV[3])
    local request_id = ARGV[4]
    local window_start = now - window

    -- Remove old entries outside the window
    redis.call('ZREMRANGEBYSCORE', key, 0, window_start)

    local count = redis.call('ZCARD', key)

    if count < limit then
        redis.call('ZADD', key, now, request_id)
        redis.call('EXPIRE', key, window + 1)
        return {1, 0}
    else
        local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
        local retry_after = 1
        if oldest and #oldest >= 2 then
            retry_after = math.ceil(oldest[2] + window - now) + 1
            if retry_after < 1 then retry_after = 1 end
        end
        return {0, retry_after}
    end
    """

    # Paths never rate limited
    EXEMPT_PATHS = ("/health", "/metrics")

    def __init__(self, app, limit: int = 100, window: int = 60):
        super().__init__(app)
        self.limit = limit
        self.window = window
        self._rate_limit_script = None

    async def _get_rate_limit_script(self, redis):
        """Get or register the rate limit Lua script."""
        if self._rate_limit_script is None:
            self._rate_limit_script = redis.register_script(self.RATE_LIMIT_SCRIPT)
        return self._rate_limit_script

    @staticmethod
    def _client_key(request: Request) -> str:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            payload = decode_access_token(auth_header[7:])
            if payload and payload.get("sub"):
                return f"ratelimit:user:{payload['sub']}"
        client_ip = request.client.host if request.client else "unknown"
        return f"ratelimit:ip:{client_ip}"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with rate limiting."""
        if request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        key = self._client_key(request)
        try:
            redis = await get_redis()
            allowed, retry_after = await self._check_rate_limit_lua(redis, key)
        except Exception as e:
            logger.warning(f"Rate limit check skipped: {e}")
            return await call_next(request)

        if not allowed:
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": {"code": "E0003", "message": "Too many requests"},
                },
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)

    async def _check_rate_limit_lua(self, redis, key: str) -> tuple[bool, int]:
        """Check rate limit using atomic Lua script.

        Args:
            redis: Redis client
            key: Rate limit key

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        now = time.time()
        # Unique member so concurrent requests do not collide in the sorted set
        request_id = f"{now}:{random.randint(0, 999999)}"

        script = await self._get_rate_limit_script(redis)
        result = await script(
            keys=[key],
            args=[now, self.window, self.limit, request_id],
        )

        return bool(result[0]), int(result[1])
