"""Shared API dependencies: single import point for all routers.

Re-exports rate limiting and authentication dependencies so that router
modules can import everything they need from one place::

    from app.api.deps import authenticate_client, enforce_rate_limit
"""

from app.auth.dependencies import ClientInfo, authenticate_client, get_client_registry
from app.ratelimit.dependencies import enforce_rate_limit, get_rate_limiter
from app.ratelimit.limiter import RateLimitDecision

__all__ = [
    "ClientInfo",
    "RateLimitDecision",
    "authenticate_client",
    "enforce_rate_limit",
    "get_client_registry",
    "get_rate_limiter",
]
