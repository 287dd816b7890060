"""Date normalization for disrepair periods.

Periods arrive as ``DD/MM/YYYY`` strings (1-2 digit day and month, 4-digit
year), or already as ISO ``YYYY-MM-DD``. Both normalize to a plain
``datetime.date``; there is no time-of-day and no timezone handling.
"""

from __future__ import annotations

import re
from datetime import date

from app.errors import MalformedDateError

_ISO_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_UK_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def to_iso_string(value: str) -> str:
    """Rewrite a ``DD/MM/YYYY`` string as ``YYYY-MM-DD``.

    ISO strings and anything unrecognised are returned unchanged.
    """
    if _ISO_PATTERN.match(value):
        return value

    match = _UK_PATTERN.match(value)
    if match is None:
        return value

    day, month, year = match.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def normalize_date(value: str | date, field: str | None = None) -> date:
    """Parse a period date string into a calendar date.

    Args:
        value: ``DD/MM/YYYY`` or ``YYYY-MM-DD`` string (``date`` instances pass through).
        field: Optional field name used in the error message.

    Raises:
        MalformedDateError: If the string does not describe a real calendar date.
    """
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise MalformedDateError(repr(value), field)

    cleaned = value.strip()
    try:
        return date.fromisoformat(to_iso_string(cleaned))
    except ValueError:
        raise MalformedDateError(value, field) from None


def is_uk_date(value: str) -> bool:
    """Return True if ``value`` is a real date written as ``DD/MM/YYYY``."""
    if not _UK_PATTERN.match(value.strip()):
        return False
    try:
        normalize_date(value)
    except MalformedDateError:
        return False
    return True
