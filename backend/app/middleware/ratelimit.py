"""Rate limiting for HTTP requests."""

from datetime import datetime
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from backend.app.api.auth import get_current_context
from backend.app.config import get_settings
from backend.app.db.context import RequestContext
from backend.app.db.repositories import RateLimiter
from backend.app.ratelimit import build_rate_limiter, make_rate_limit_key


class RateLimitMiddleware:
    """Maps request paths to buckets and enforces each bucket's limiter."""

    def __init__(self, limiters: dict[str, RateLimiter], bucket_map: dict[str, str]) -> None:
        """Initialize rate limit middleware.

        Args:
            limiters: Rate limiter per bucket name
            bucket_map: Mapping from path prefixes to bucket names
        """
        self._limiters = limiters
        self._bucket_map = bucket_map

    def check_rate_limit(
        self, path: str, ctx: RequestContext, now: datetime | None = None
    ) -> tuple[bool, int]:
        """Check if request is allowed under rate limit.

        Args:
            path: Request path
            ctx: Request context
            now: Current time (for testing)

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        if now is None:
            now = datetime.now()

        bucket = self._get_bucket(path)
        if bucket is None or bucket not in self._limiters:
            # No rate limit for this path
            return (True, 0)

        key = make_rate_limit_key(ctx, bucket)
        retry_after = self._limiters[bucket].check_quota(key, now)

        if retry_after is None:
            return (True, 0)

        return (False, retry_after.seconds)

    def _get_bucket(self, path: str) -> str | None:
        for prefix, bucket in self._bucket_map.items():
            if path.startswith(prefix):
                return bucket
        return None


def create_default_bucket_map() -> dict[str, str]:
    """Create default bucket mapping.

    Returns:
        Dictionary mapping path prefixes to bucket names
    """
    return {
        "/api/analyze": "analysis",
        "/api/documents": "crud",
    }


@lru_cache
def get_rate_limit_middleware() -> RateLimitMiddleware:
    """Process-wide middleware built from settings."""
    settings = get_settings()
    return RateLimitMiddleware(
        limiters={
            "analysis": build_rate_limiter(settings, settings.analyze_per_min),
            "crud": build_rate_limiter(settings, settings.crud_ops_per_min),
        },
        bucket_map=create_default_bucket_map(),
    )


async def enforce_rate_limit(
    request: Request,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    middleware: Annotated[RateLimitMiddleware, Depends(get_rate_limit_middleware)],
) -> None:
    """FastAPI dependency rejecting over-quota requests with 429."""
    allowed, retry_after = middleware.check_rate_limit(request.url.path, ctx)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "code": "rate_limited",
                "message": "You are sending requests too quickly. "
                f"Please try again in {retry_after} seconds.",
            },
            headers={"Retry-After": str(retry_after)},
        )
