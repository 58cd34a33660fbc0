"""Rate limiter configuration module.

This module is separate from main.py to avoid circular imports when routers
need to access the limiters.

Two limiters live here:
- ``limiter``: slowapi, coarse per-IP limits on public GET routes.
- ``rate_limit_middleware``: the fixed-window contact-form limiter, which
  reports its state in ``X-RateLimit-*`` headers.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request, Response
from loguru import logger
from slowapi import Limiter

from helpers.request_utils import get_client_identifier, get_client_ip
from models.exceptions import DomainException, RateLimitExceededException
from services.rate_limit_service import (
    RateLimitConfig,
    RateLimitResult,
    RateLimitService,
    RateLimitStore,
)


def _limiter_key(request: Request) -> str:
    return get_client_ip(request) or "unknown"


# Create rate limiter - imported by routers and main.py
limiter = Limiter(key_func=_limiter_key)


def format_reset_time(reset_time_ms: float) -> str:
    """Render an epoch-millisecond reset time as ISO-8601 UTC."""
    reset = datetime.fromtimestamp(reset_time_ms / 1000, tz=timezone.utc)
    return reset.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Headers describing the caller's current window."""
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": format_reset_time(result.reset_time),
    }


async def rate_limit_middleware(
    request: Request,
    handler: Callable[[], Awaitable[Response]],
    config: Optional[RateLimitConfig] = None,
    store: Optional[RateLimitStore] = None,
) -> Response:
    """
    Run *handler* only if the client is within its contact-form quota.

    Args:
        request: Incoming request, used to derive the client identifier
        handler: Zero-argument coroutine producing the real response
        config: Window and quota override
        store: Counter storage override

    Returns:
        The handler's response with ``X-RateLimit-*`` headers set

    Raises:
        RateLimitExceededException: Quota used up (rendered as 429)
    """
    identifier = get_client_identifier(request)
    result = RateLimitService.check_rate_limit(identifier, config=config, store=store)
    headers = build_rate_limit_headers(result)

    if not result.allowed:
        retry_after = result.retry_after_seconds()
        logger.warning(
            f"Contact rate limit exceeded for {identifier} "
            f"(limit={result.limit}, retry_after={retry_after}s)"
        )
        raise RateLimitExceededException(
            retry_after=retry_after,
            headers={**headers, "Retry-After": str(retry_after)},
        )

    try:
        response = await handler()
    except DomainException as exc:
        # Error responses rendered by the exception handlers carry them too
        exc.headers.update(headers)
        raise

    response.headers.update(headers)
    return response
