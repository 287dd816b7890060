"""Pydantic v2 request/response schemas for disrepair endpoints.

The wire format is camelCase (``roomName``, ``weeksInDisrepair``); snake_case
field names are accepted on input as well.
"""

import math
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.config import settings
from app.services.dates import normalize_date
from app.services.overlap import Breakdown, DisrepairPeriod, ResultRow, Segment


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DisrepairPeriodIn(CamelModel):
    """A room and the dates (DD/MM/YYYY or YYYY-MM-DD) bounding its disrepair."""

    model_config = ConfigDict(str_strip_whitespace=True)

    room_name: str = Field(..., min_length=1)
    start_date: str = Field(..., min_length=1)
    end_date: str = Field(..., min_length=1)

    @field_validator("start_date", "end_date")
    @classmethod
    def check_date(cls, value: str, info: ValidationInfo) -> str:
        """Reject strings that do not describe a real calendar date."""
        normalize_date(value, to_camel(info.field_name))
        return value

    @model_validator(mode="after")
    def check_order(self) -> "DisrepairPeriodIn":
        """Reject periods that end before they start, unless configured otherwise."""
        if settings.reject_inverted_periods and normalize_date(self.start_date) > normalize_date(self.end_date):
            raise ValueError("endDate must not be before startDate")
        return self

    def to_period(self) -> DisrepairPeriod:
        return DisrepairPeriod(room_name=self.room_name, start_date=self.start_date, end_date=self.end_date)


class DisrepairRequest(CamelModel):
    """Body of the calculate and breakdown endpoints."""

    periods: list[DisrepairPeriodIn] = Field(..., min_length=1)
    total_rooms: float | None = None
    rooms: list[Any] | None = None

    @field_validator("total_rooms", mode="before")
    @classmethod
    def ignore_unusable_total(cls, value: Any) -> float | None:
        """A non-numeric total is treated as absent so room counting takes over."""
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    @field_validator("rooms", mode="before")
    @classmethod
    def ignore_non_list_rooms(cls, value: Any) -> list[Any] | None:
        """Only a list of rooms counts; its entries are not inspected."""
        return value if isinstance(value, list) else None

    def to_periods(self) -> list[DisrepairPeriod]:
        return [period.to_period() for period in self.periods]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ResultRowOut(CamelModel):
    """Weeks spent with ``room_count`` rooms in disrepair at once."""

    room_count: int
    weeks_in_disrepair: float
    percentage_of_property: float

    @classmethod
    def from_row(cls, row: ResultRow) -> "ResultRowOut":
        return cls(
            room_count=row.room_count,
            weeks_in_disrepair=row.weeks_in_disrepair,
            percentage_of_property=row.percentage_of_property,
        )


class SegmentOut(CamelModel):
    """A run of consecutive days sharing the same room count."""

    start_date: date
    end_date: date
    room_count: int
    days: int
    weeks: float

    @classmethod
    def from_segment(cls, segment: Segment) -> "SegmentOut":
        return cls(
            start_date=segment.start_date,
            end_date=segment.end_date,
            room_count=segment.room_count,
            days=segment.days,
            weeks=round(segment.weeks, 1),
        )


class BreakdownResponse(CamelModel):
    """Segment partition of the analysed date range, alongside the result rows."""

    start_date: date
    end_date: date
    total_days: int
    total_rooms: int
    segments: list[SegmentOut]
    results: list[ResultRowOut]

    @classmethod
    def from_breakdown(cls, breakdown: Breakdown) -> "BreakdownResponse":
        return cls(
            start_date=breakdown.start_date,
            end_date=breakdown.end_date,
            total_days=breakdown.total_days,
            total_rooms=breakdown.total_rooms,
            segments=[SegmentOut.from_segment(segment) for segment in breakdown.segments],
            results=[ResultRowOut.from_row(row) for row in breakdown.results],
        )
