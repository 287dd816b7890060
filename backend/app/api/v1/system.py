"""Connectivity and quota endpoints used by API clients to check their setup."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.deps import ClientInfo, RateLimitDecision, authenticate_client, enforce_rate_limit
from app.schemas.system import PingResponse, RateLimitInfo, RateLimitStatusResponse

router = APIRouter(prefix="/api/v1", tags=["system"])


@router.get("/ping", response_model=PingResponse)
async def ping(
    _quota: RateLimitDecision = Depends(enforce_rate_limit),
    client: ClientInfo = Depends(authenticate_client),
) -> PingResponse:
    """Confirm the API is reachable and the presented credentials are accepted."""
    return PingResponse(
        client_name=client.name,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/rate-limit", response_model=RateLimitStatusResponse)
async def rate_limit_status(
    quota: RateLimitDecision = Depends(enforce_rate_limit),
) -> RateLimitStatusResponse:
    """Report the caller's quota. Counts as a request; no authentication required."""
    return RateLimitStatusResponse(
        rate_limit=RateLimitInfo(limit=quota.limit, remaining=quota.remaining, reset=quota.reset_at),
        timestamp=datetime.now(timezone.utc),
    )
