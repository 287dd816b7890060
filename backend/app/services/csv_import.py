"""CSV import for disrepair periods.

The header row names the columns; matching is case-insensitive and tolerant
of naming variations (``Room Name``, ``name_of_room``, ``Date Started``...).
"""

from __future__ import annotations

import csv
import io
import re

from app.errors import InvalidInputError, MalformedDateError
from app.services.dates import is_uk_date, normalize_date
from app.services.overlap import DisrepairPeriod

# (attribute, human label, header pattern)
_COLUMNS: tuple[tuple[str, str, re.Pattern[str]], ...] = (
    ("room_name", "room name", re.compile(r"room.*name|name.*room", re.IGNORECASE)),
    ("start_date", "start date", re.compile(r"start.*date|date.*start", re.IGNORECASE)),
    ("end_date", "end date", re.compile(r"end.*date|date.*end", re.IGNORECASE)),
)


def _locate_columns(header: list[str]) -> dict[str, int]:
    normalized = [column.strip().lower() for column in header]
    positions: dict[str, int] = {}
    for attribute, label, pattern in _COLUMNS:
        index = next((i for i, column in enumerate(normalized) if pattern.search(column)), None)
        if index is None:
            raise InvalidInputError(f"CSV must include a column for {label}")
        positions[attribute] = index
    return positions


def parse_periods_csv(text: str, reject_inverted: bool = True) -> list[DisrepairPeriod]:
    """Parse CSV text into disrepair periods.

    Args:
        text: CSV text with a header row.
        reject_inverted: Reject rows whose end date is before their start date.

    Raises:
        InvalidInputError: If the header lacks a required column, there are no
            data rows, a row has the wrong number of fields, or a row is
            inverted while ``reject_inverted`` is set.
        MalformedDateError: If a date is not a real ``DD/MM/YYYY`` date.
    """
    rows = list(csv.reader(io.StringIO(text.strip())))
    if len(rows) < 2:
        raise InvalidInputError("CSV must have a header row and at least one data row")

    header = rows[0]
    positions = _locate_columns(header)

    periods: list[DisrepairPeriod] = []
    for row_number, row in enumerate(rows[1:], start=2):
        if not any(value.strip() for value in row):
            continue
        if len(row) != len(header):
            raise InvalidInputError(f"Row {row_number} has an incorrect number of fields")

        values = {attribute: row[index].strip() for attribute, index in positions.items()}
        for attribute, field in (("start_date", "startDate"), ("end_date", "endDate")):
            if not is_uk_date(values[attribute]):
                raise MalformedDateError(values[attribute], f"{field} in row {row_number}")

        if reject_inverted and normalize_date(values["start_date"]) > normalize_date(values["end_date"]):
            raise InvalidInputError(f"Row {row_number}: endDate must not be before startDate")

        if not values["room_name"]:
            raise InvalidInputError(f"Row {row_number} is missing a room name")

        periods.append(DisrepairPeriod(**values))

    if not periods:
        raise InvalidInputError("No valid periods found in CSV")
    return periods
