"""FastAPI authentication dependencies for route protection."""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request, status
from fastapi.security import APIKeyHeader

from app.config import ClientKeyRegistry, settings
from app.errors import APIError
from app.ratelimit.dependencies import is_frontend_request

logger = logging.getLogger(__name__)

# Optional header scheme: returns None if no key is presented
_api_key_scheme = APIKeyHeader(name="X-API-Key", auto_error=False)

FRONTEND_CLIENT_NAME = "Frontend"


@dataclass(frozen=True)
class ClientInfo:
    """The caller a request was authenticated as."""

    name: str
    is_frontend: bool = False


def get_client_registry() -> ClientKeyRegistry:
    """Return the configured API key registry."""
    return settings.client_api_keys


def _unauthorized(message: str) -> APIError:
    return APIError(status.HTTP_401_UNAUTHORIZED, "Unauthorized", message=message)


async def authenticate_client(
    request: Request,
    api_key: str | None = Depends(_api_key_scheme),
    registry: ClientKeyRegistry = Depends(get_client_registry),
) -> ClientInfo:
    """Resolve the calling client from its ``X-API-Key`` header.

    Requests carrying the first-party frontend header are exempt from key
    checks.

    Raises:
        APIError 401: If the key is missing, unknown, or inactive.
    """
    if is_frontend_request(request):
        return ClientInfo(name=FRONTEND_CLIENT_NAME, is_frontend=True)

    if not api_key:
        logger.warning("Rejected request without API key from %s", request.client.host if request.client else "?")
        raise _unauthorized("API key is required")

    client = registry.lookup(api_key)
    if client is None:
        logger.warning("Rejected request with unknown API key")
        raise _unauthorized("Invalid API key")

    if not client.active:
        logger.warning("Rejected request from inactive client %s", client.name)
        raise _unauthorized("API key is inactive")

    return ClientInfo(name=client.name)
