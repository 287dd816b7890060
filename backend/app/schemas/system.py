"""Pydantic v2 schemas for connectivity and quota endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PingResponse(BaseModel):
    """Confirms the API is reachable and reports who the caller authenticated as."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str = "ok"
    message: str = "API is running"
    client_name: str
    timestamp: datetime


class RateLimitInfo(BaseModel):
    limit: int
    remaining: int
    reset: datetime


class RateLimitStatusResponse(BaseModel):
    """Current quota for the calling identity."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = "Rate limit test passed"
    rate_limit: RateLimitInfo
    timestamp: datetime
