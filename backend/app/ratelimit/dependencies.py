"""Rate limiting dependencies: enforce request quotas per API key or client address."""

import logging

from fastapi import Depends, Request, Response, status

from app.config import settings
from app.errors import APIError
from app.ratelimit.limiter import RateLimitDecision, RateLimiter, RateLimitPolicy

logger = logging.getLogger(__name__)


def get_policy(is_frontend: bool) -> RateLimitPolicy:
    """Frontend requests get the larger allowance; API clients the smaller one."""
    if is_frontend:
        return RateLimitPolicy(
            name="frontend",
            max_requests=settings.frontend_rate_limit,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return RateLimitPolicy(
        name="api_key",
        max_requests=settings.api_key_rate_limit,
        window_seconds=settings.rate_limit_window_seconds,
    )


def is_frontend_request(request: Request) -> bool:
    return request.headers.get(settings.frontend_header, "").lower() == "true"


def client_identifier(request: Request) -> str:
    """Identify the caller by API key, falling back to its network address."""
    api_key = request.headers.get("x-api-key")
    if api_key:
        return f"key:{api_key}"

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        address = forwarded.split(",")[0].strip()
    else:
        address = request.headers.get("x-real-ip") or (request.client.host if request.client else None)
    return f"ip:{address or '0.0.0.0'}"


def get_rate_limiter(request: Request) -> RateLimiter:
    """Return the limiter attached to the running application."""
    return request.app.state.rate_limiter


async def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> RateLimitDecision:
    """Raise 429 once the caller has used up its allowance for the current window.

    Allowed responses carry ``X-RateLimit-*`` headers describing the quota.
    """
    identifier = client_identifier(request)
    policy = get_policy(is_frontend_request(request))
    decision = limiter.check(identifier, policy)

    if not decision.allowed:
        minutes = policy.window_seconds // 60
        raise APIError(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too Many Requests",
            headers=decision.headers(),
            message=f"Rate limit exceeded. Maximum {policy.max_requests} requests per {minutes} minutes.",
            resetAt=decision.reset_at.isoformat(),
        )

    response.headers.update(decision.headers())
    return decision
