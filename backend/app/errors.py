"""Domain and API exceptions.

The calculation core raises the ``DisrepairError`` family and never catches
its own errors; the exception handlers registered in ``app.main`` translate
them into JSON error bodies.
"""

from typing import Any


class DisrepairError(Exception):
    """Base class for disrepair calculation errors."""


class InvalidInputError(DisrepairError):
    """Missing or malformed periods, or a period missing a required field."""


class MalformedDateError(InvalidInputError, ValueError):
    """A date string that cannot be normalized to a calendar date."""

    def __init__(self, value: str, field: str | None = None) -> None:
        self.value = value
        self.field = field
        where = f" for {field}" if field else ""
        super().__init__(f"Invalid date{where}: {value!r}. Use DD/MM/YYYY format.")


class ComputationError(DisrepairError):
    """Aggregation reached an impossible state, e.g. no intervals after validation."""


class APIError(Exception):
    """An HTTP error whose payload is returned as the top-level JSON body.

    Used by request collaborators (authentication, rate limiting, method
    checks) that answer with ``{"error": ..., ...}`` rather than FastAPI's
    ``{"detail": ...}`` envelope.
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        headers: dict[str, str] | None = None,
        **extra: Any,
    ) -> None:
        self.status_code = status_code
        self.payload: dict[str, Any] = {"error": error, **extra}
        self.headers = headers
        super().__init__(error)
