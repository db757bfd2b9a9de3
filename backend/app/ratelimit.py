"""Rate limiting utilities."""

import logging
from datetime import datetime

import redis

from backend.app.config import Settings
from backend.app.db.context import RequestContext
from backend.app.db.inmemory import InMemoryRateLimiter
from backend.app.db.repositories import RateLimiter, RetryAfter

logger = logging.getLogger(__name__)


def make_rate_limit_key(ctx: RequestContext, bucket: str) -> str:
    """Create rate limit key from context and bucket.

    Args:
        ctx: Request context
        bucket: Bucket name (e.g., "analysis", "crud")

    Returns:
        Rate limit key
    """
    return f"user:{ctx.user_id}:{bucket}"


class RedisRateLimiter:
    """Redis-based fixed-window limiter (INCR + EXPIRE), shared across workers."""

    def __init__(self, redis_client: redis.Redis, max_requests: int, window_seconds: int = 60) -> None:
        self._redis = redis_client
        self._max_requests = max_requests
        self._window_seconds = window_seconds

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Count this request against ``key`` and report whether it is over quota."""
        window_start = int(now.timestamp() / self._window_seconds) * self._window_seconds
        redis_key = f"ratelimit:{key}:{window_start}"

        count = self._redis.incr(redis_key)
        if count == 1:
            self._redis.expire(redis_key, self._window_seconds)

        if count > self._max_requests:
            ttl = self._redis.ttl(redis_key)
            return RetryAfter(seconds=max(1, ttl))

        return None


def build_rate_limiter(settings: Settings, max_requests: int) -> RateLimiter:
    """Redis-backed limiter when REDIS_URL is configured, in-memory otherwise."""
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisRateLimiter(client, max_requests=max_requests)

    logger.info("No REDIS_URL configured, rate limits are tracked per process")
    return InMemoryRateLimiter(max_requests=max_requests)
