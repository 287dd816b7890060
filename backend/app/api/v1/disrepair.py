"""Disrepair analysis API router: overlap calculation, breakdown, CSV import.

Every endpoint applies the rate limit first, then authenticates the client,
then validates the body. Validation failures answer 400 ``{"error": ...}``;
unexpected failures answer 500 ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from fastapi import APIRouter, Depends, Query, Request, Response, status
from starlette.concurrency import run_in_threadpool

from app.api.deps import ClientInfo, RateLimitDecision, authenticate_client, enforce_rate_limit
from app.api.handlers import SERVER_ERROR_MESSAGE
from app.config import settings
from app.errors import APIError, DisrepairError, InvalidInputError
from app.schemas.disrepair import BreakdownResponse, DisrepairRequest, ResultRowOut
from app.services.csv_import import parse_periods_csv
from app.services.overlap import (
    DisrepairPeriod,
    build_breakdown,
    calculate_disrepair_overlap,
    resolve_total_rooms,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/disrepair", tags=["disrepair"])

MAX_CSV_BYTES = 1024 * 1024
ALLOWED_METHODS = ["POST", "OPTIONS"]

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _run_analysis(func: Callable[..., T], periods: Sequence[DisrepairPeriod], total_rooms: int) -> T:
    """Run a calculation off the event loop, wrapping unexpected failures as a 500."""
    try:
        return await run_in_threadpool(func, periods, total_rooms)
    except DisrepairError:
        raise
    except Exception as e:
        logger.exception("Error processing disrepair analysis")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SERVER_ERROR_MESSAGE,
            details=str(e),
        ) from e


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/calculate",
    response_model=list[ResultRowOut],
    summary="Weeks in disrepair per number of concurrently affected rooms",
)
async def calculate(
    body: DisrepairRequest,
    _quota: RateLimitDecision = Depends(enforce_rate_limit),
    client: ClientInfo = Depends(authenticate_client),
) -> list[ResultRowOut]:
    """Calculate how many weeks each number of rooms was in disrepair simultaneously.

    ``totalRooms`` is taken from ``rooms`` when given, else from a positive
    ``totalRooms``, else from the number of distinct room names.
    """
    logger.info("API request from: %s", client.name)

    periods = body.to_periods()
    total_rooms = resolve_total_rooms(periods, body.total_rooms, body.rooms)
    rows = await _run_analysis(calculate_disrepair_overlap, periods, total_rooms)
    return [ResultRowOut.from_row(row) for row in rows]


@router.post(
    "/breakdown",
    response_model=BreakdownResponse,
    summary="Day segments behind the disrepair calculation",
)
async def breakdown(
    body: DisrepairRequest,
    _quota: RateLimitDecision = Depends(enforce_rate_limit),
    client: ClientInfo = Depends(authenticate_client),
) -> BreakdownResponse:
    """Return the segment partition of the analysed range together with the result rows."""
    logger.info("Breakdown request from: %s", client.name)

    periods = body.to_periods()
    total_rooms = resolve_total_rooms(periods, body.total_rooms, body.rooms)
    result = await _run_analysis(build_breakdown, periods, total_rooms)
    return BreakdownResponse.from_breakdown(result)


@router.post(
    "/calculate-csv",
    response_model=list[ResultRowOut],
    summary="Calculate from a CSV upload",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"text/csv": {"schema": {"type": "string"}}},
        }
    },
)
async def calculate_csv(
    request: Request,
    total_rooms: int | None = Query(None, description="Total rooms in the property"),
    _quota: RateLimitDecision = Depends(enforce_rate_limit),
    client: ClientInfo = Depends(authenticate_client),
) -> list[ResultRowOut]:
    """Calculate from CSV text with ``roomName,startDate,endDate`` style columns.

    Dates must be ``DD/MM/YYYY``. Without ``total_rooms`` the distinct room
    names in the file are counted.
    """
    logger.info("CSV request from: %s", client.name)

    raw = await request.body()
    if len(raw) > MAX_CSV_BYTES:
        raise APIError(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            "File too large. Maximum size is 1MB.",
        )
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InvalidInputError("CSV must be UTF-8 encoded text") from None

    periods = parse_periods_csv(text, reject_inverted=settings.reject_inverted_periods)
    resolved = resolve_total_rooms(periods, total_rooms)
    rows = await _run_analysis(calculate_disrepair_overlap, periods, resolved)
    return [ResultRowOut.from_row(row) for row in rows]


# ---------------------------------------------------------------------------
# Method guards
# ---------------------------------------------------------------------------


async def _preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK)


async def _method_not_allowed() -> None:
    raise APIError(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        "Method not allowed",
        headers={"Allow": ", ".join(ALLOWED_METHODS)},
        allowedMethods=ALLOWED_METHODS,
    )


for _path in ("/calculate", "/breakdown", "/calculate-csv"):
    router.add_api_route(_path, _preflight, methods=["OPTIONS"], include_in_schema=False)
    router.add_api_route(
        _path,
        _method_not_allowed,
        methods=["GET", "HEAD", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
