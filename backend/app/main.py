"""Disrepair Overlap API: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.handlers import register_exception_handlers
from app.api.v1.disrepair import router as disrepair_router
from app.api.v1.system import router as system_router
from app.config import settings
from app.ratelimit.limiter import RateLimiter

# Configure root logger so all app.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting %s %s (%s), %d API client(s) configured",
        settings.app_name,
        settings.app_version,
        settings.environment,
        len(settings.client_api_keys.keys),
    )
    yield
    # Shutdown: counters are process-local and die with the process
    app.state.rate_limiter.store.clear()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Calculates how long different numbers of rooms in a property were in disrepair "
        "at the same time, in weeks, with the share of the property affected."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.state.rate_limiter = RateLimiter()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-API-Key", settings.frontend_header],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
)

register_exception_handlers(app)

# Routers
app.include_router(disrepair_router)
app.include_router(system_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "calculate": "/api/v1/disrepair/calculate",
    }


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
