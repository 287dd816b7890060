"""Exception handlers mapping domain and validation errors to JSON error bodies."""

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.errors import APIError, ComputationError, InvalidInputError

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error processing disrepair analysis"
PERIODS_REQUIRED = "Invalid input - Disrepair periods required"
PERIOD_FIELDS_REQUIRED = "Invalid input - Each period must have roomName, startDate, and endDate"


def _error_text(error: dict[str, Any]) -> str:
    """Return the message of a pydantic error without the ``Value error, `` prefix."""
    exc = error.get("ctx", {}).get("error")
    return str(exc) if exc is not None else error.get("msg", "")


def validation_message(errors: Sequence[dict[str, Any]]) -> str:
    """Build a single actionable message from the first request validation error."""
    if not errors:
        return "Invalid input"

    error = errors[0]
    loc = tuple(error.get("loc", ()))
    kind = error.get("type", "")

    if kind == "json_invalid":
        return "Invalid input - Request body must be valid JSON"
    if len(loc) <= 2 and (len(loc) < 2 or loc[1] == "periods"):
        return PERIODS_REQUIRED
    if loc[1] != "periods":
        return f"Invalid input - {'.'.join(str(part) for part in loc[1:])}: {_error_text(error)}"

    index = loc[2]
    if len(loc) == 3:
        if kind == "value_error":
            return f"Invalid input - Period at index {index}: {_error_text(error)}"
        return PERIOD_FIELDS_REQUIRED

    field = loc[3]
    if kind == "value_error":
        return f"Invalid input - Period at index {index} has an invalid {field}. Use DD/MM/YYYY format."
    return PERIOD_FIELDS_REQUIRED


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = validation_message(exc.errors())
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid input - {exc}"},
    )


async def computation_error_handler(request: Request, exc: ComputationError) -> JSONResponse:
    logger.error("Computation failed for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": SERVER_ERROR_MESSAGE, "details": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(ComputationError, computation_error_handler)
