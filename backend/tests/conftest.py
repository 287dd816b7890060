"""Shared test configuration and fixtures.

Every test gets its own rate limiter (with a controllable clock) and a fixed
API key registry, injected through FastAPI dependency overrides so no state
leaks between tests.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_client_registry, get_rate_limiter
from app.config import ClientKey, ClientKeyRegistry, settings
from app.main import app
from app.ratelimit.limiter import InMemoryRateLimitStore, RateLimiter

TEST_API_KEY = "test-key-123"
INACTIVE_API_KEY = "inactive-key-456"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1_750_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> RateLimiter:
    """A limiter with fresh counters and a fake clock."""
    return RateLimiter(InMemoryRateLimitStore(), clock=clock)


@pytest.fixture
def client_registry() -> ClientKeyRegistry:
    return ClientKeyRegistry(
        keys={
            TEST_API_KEY: ClientKey(name="Test Client", active=True),
            INACTIVE_API_KEY: ClientKey(name="Retired Client", active=False),
        }
    )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    rate_limiter: RateLimiter,
    client_registry: ClientKeyRegistry,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test limiter and key registry."""
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_client_registry] = lambda: client_registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def api_headers() -> dict[str, str]:
    """Headers for an authenticated API client."""
    return {"X-API-Key": TEST_API_KEY}


@pytest.fixture
def inactive_headers() -> dict[str, str]:
    """Headers presenting a key whose client has been deactivated."""
    return {"X-API-Key": INACTIVE_API_KEY}


@pytest.fixture
def frontend_headers() -> dict[str, str]:
    """Headers marking a request as coming from the first-party frontend."""
    return {settings.frontend_header: "true"}


# ---------------------------------------------------------------------------
# Convenience fixtures: request bodies
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_request() -> dict:
    """Three overlapping periods in a ten-room property."""
    return {
        "totalRooms": 10,
        "periods": [
            {"roomName": "Bedroom 1", "startDate": "12/01/2025", "endDate": "09/05/2025"},
            {"roomName": "Roof", "startDate": "03/03/2025", "endDate": "30/04/2025"},
            {"roomName": "Kitchen", "startDate": "15/03/2025", "endDate": "12/05/2025"},
        ],
    }
