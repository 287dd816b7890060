"""Overlap aggregation: how long each number of rooms was in disrepair at once.

The calculation runs at day resolution over the inclusive range from the
earliest start date to the latest end date:

1. every period is normalized to a pair of calendar dates;
2. a difference sweep over the period boundaries finds the days on which
   the count of covering periods changes;
3. each run of days between changes becomes a segment;
4. segment lengths are summed per room count and converted to weeks.

Rounding to one decimal place happens once, on the final figures.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from app.errors import ComputationError
from app.services.dates import normalize_date

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class DisrepairPeriod:
    """A room and the date strings bounding its disrepair (inclusive)."""

    room_name: str
    start_date: str
    end_date: str


@dataclass(frozen=True)
class NormalizedInterval:
    """A disrepair period with its dates parsed."""

    room_name: str
    start_date: date
    end_date: date

    @property
    def is_inverted(self) -> bool:
        return self.start_date > self.end_date


@dataclass(frozen=True)
class CoverageChange:
    """Number of periods covering each day from ``day`` until the next change."""

    day: date
    room_count: int


@dataclass(frozen=True)
class Segment:
    """A maximal run of consecutive days sharing the same room count."""

    start_date: date
    end_date: date
    room_count: int

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def weeks(self) -> float:
        return self.days / DAYS_PER_WEEK


@dataclass(frozen=True)
class ResultRow:
    """Weeks spent at one room-count level and the share of the property it represents."""

    room_count: int
    weeks_in_disrepair: float
    percentage_of_property: float


@dataclass(frozen=True)
class Breakdown:
    """The segment partition behind a set of result rows."""

    start_date: date
    end_date: date
    total_rooms: int
    segments: list[Segment]
    results: list[ResultRow]

    @property
    def total_days(self) -> int:
        return sum(segment.days for segment in self.segments)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _round_one_decimal(value: Decimal) -> float:
    return float(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def resolve_total_rooms(
    periods: Iterable[DisrepairPeriod],
    total_rooms: float | None = None,
    rooms: Sequence[object] | None = None,
) -> int:
    """Work out the denominator for percentage-of-property figures.

    Precedence: the length of an explicit room list, then a positive explicit
    total, then the number of distinct room names across ``periods``.
    """
    if rooms is not None:
        return len(rooms)
    if total_rooms is not None and total_rooms > 0:
        return int(total_rooms)

    distinct = {period.room_name for period in periods if period.room_name}
    logger.info("No totalRooms provided, using count of unique rooms: %s", len(distinct))
    return len(distinct)


def normalize_periods(periods: Iterable[DisrepairPeriod]) -> list[NormalizedInterval]:
    """Parse the date strings of every period.

    Raises:
        MalformedDateError: If any date cannot be parsed.
    """
    return [
        NormalizedInterval(
            room_name=period.room_name,
            start_date=normalize_date(period.start_date, "startDate"),
            end_date=normalize_date(period.end_date, "endDate"),
        )
        for period in periods
    ]


def build_coverage_changes(intervals: Sequence[NormalizedInterval]) -> list[CoverageChange]:
    """Find the days on which the number of covering intervals changes.

    The first entry is always the earliest start date and consecutive entries
    never repeat a count, so the list is the per-day timeline in run-length
    form. Both interval ends are inclusive. An inverted interval covers no day.
    Cost grows with the number of intervals, not with the length of the range.

    Raises:
        ComputationError: If ``intervals`` is empty.
    """
    if not intervals:
        raise ComputationError("No disrepair periods to aggregate")

    min_date = min(interval.start_date for interval in intervals)
    max_date = max(interval.end_date for interval in intervals)
    if min_date > max_date:
        return []

    # deltas[day] is the change in coverage entering that day
    deltas: dict[date, int] = {min_date: 0}
    for interval in intervals:
        if interval.is_inverted:
            continue
        deltas[interval.start_date] = deltas.get(interval.start_date, 0) + 1
        # Days after max_date are never reported
        if interval.end_date < max_date:
            day_after = interval.end_date + timedelta(days=1)
            deltas[day_after] = deltas.get(day_after, 0) - 1

    days = sorted(deltas)
    changes: list[CoverageChange] = []
    for day, room_count in zip(days, itertools.accumulate(deltas[day] for day in days)):
        if not changes or changes[-1].room_count != room_count:
            changes.append(CoverageChange(day=day, room_count=room_count))
    return changes


def group_segments(changes: Sequence[CoverageChange], end_date: date) -> list[Segment]:
    """Turn chronologically ordered coverage changes into segments running to ``end_date``."""
    last_days = [change.day - timedelta(days=1) for change in changes[1:]]
    last_days.append(end_date)
    return [
        Segment(start_date=change.day, end_date=last_day, room_count=change.room_count)
        for change, last_day in zip(changes, last_days)
    ]


def summarize_segments(segments: Iterable[Segment], total_rooms: int) -> list[ResultRow]:
    """Total the weeks spent at each positive room count, sorted by room count.

    Raises:
        ComputationError: If ``total_rooms`` is not positive.
    """
    if total_rooms <= 0:
        raise ComputationError(f"Total rooms must be positive, got {total_rooms}")

    # Whole days are summed and divided once so nothing is rounded early
    days_by_count: dict[int, int] = {}
    for segment in segments:
        if segment.room_count > 0:
            days_by_count[segment.room_count] = days_by_count.get(segment.room_count, 0) + segment.days

    rows: list[ResultRow] = []
    for room_count in sorted(days_by_count):
        weeks = Decimal(days_by_count[room_count]) / Decimal(DAYS_PER_WEEK)
        percentage = Decimal(room_count * 100) / Decimal(total_rooms)
        rows.append(
            ResultRow(
                room_count=room_count,
                weeks_in_disrepair=_round_one_decimal(weeks),
                percentage_of_property=_round_one_decimal(percentage),
            )
        )
    return rows


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def build_breakdown(
    periods: Sequence[DisrepairPeriod],
    total_rooms: int | None = None,
) -> Breakdown:
    """Run the full overlap calculation and keep the intermediate segments.

    A missing or non-positive ``total_rooms`` is resolved from the distinct
    room names in ``periods``.

    Raises:
        MalformedDateError: If a period date cannot be parsed.
        ComputationError: If ``periods`` is empty or no room total can be resolved.
    """
    if total_rooms is None or total_rooms <= 0:
        total_rooms = resolve_total_rooms(periods)

    intervals = normalize_periods(periods)
    changes = build_coverage_changes(intervals)
    start_date = min(interval.start_date for interval in intervals)
    end_date = max(interval.end_date for interval in intervals)

    segments = group_segments(changes, end_date)
    results = summarize_segments(segments, total_rooms)
    logger.debug(
        "Aggregated %d periods over %s..%s into %d segments and %d result rows",
        len(intervals),
        start_date,
        end_date,
        len(segments),
        len(results),
    )

    return Breakdown(
        start_date=start_date,
        end_date=end_date,
        total_rooms=total_rooms,
        segments=segments,
        results=results,
    )


def calculate_disrepair_overlap(
    periods: Sequence[DisrepairPeriod],
    total_rooms: int | None = None,
) -> list[ResultRow]:
    """Weeks in disrepair and percentage of property for each concurrent room count.

    Returns one row per distinct positive room count, sorted ascending.
    Days where no room is in disrepair are not reported.
    """
    return build_breakdown(periods, total_rooms).results
