"""Date to pixel mapping and adaptive time-axis ticks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import MAXYEAR, date, datetime, timedelta
from enum import Enum

from .config import MIN_TICK_SPACING
from .models import SHORT_MONTHS

DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30  # Approximation used only for granularity selection
QUARTER_START_MONTHS = (1, 4, 7, 10)
SECONDS_PER_DAY = 86400


class TickGranularity(Enum):
    """Spacing of time-axis ticks."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


@dataclass(frozen=True)
class Tick:
    """A labelled gridline position on the time axis."""

    date: date
    label: str


def _midnight(value: date) -> datetime:
    if isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=value.tzinfo)
    return datetime(value.year, value.month, value.day)


def days_between(a: date, b: date) -> int:
    """Calendar days from ``a`` to ``b`` (negative when ``b`` is earlier).

    Datetimes are normalized to midnight first, so the time of day never
    matters. The difference is rounded to absorb DST offsets between two
    aware datetimes.
    """
    delta = _midnight(b) - _midnight(a)
    return round(delta.total_seconds() / SECONDS_PER_DAY)


def date_to_x(value: date, project_start: date, day_width: float) -> float:
    """X coordinate of the left edge of ``value``'s day column.

    Not clamped: dates before ``project_start`` map to negative x.
    """
    return days_between(project_start, value) * day_width


def total_days(project_start: date, project_end: date) -> int:
    """Inclusive number of days in the project span (at least 1)."""
    return max(days_between(project_start, project_end) + 1, 1)


def compute_day_width(available_width: float, days: int) -> float:
    """Pixels per day so the whole span fits ``available_width`` exactly.

    A non-positive day count is treated as one day. The width itself is
    passed through unchecked; a narrow viewport yields a small or negative
    day width rather than an error.
    """
    return available_width / max(days, 1)


def select_granularity(day_width: float) -> TickGranularity:
    """Pick the finest granularity whose interval spans MIN_TICK_SPACING px."""
    if day_width * DAYS_PER_WEEK >= MIN_TICK_SPACING:
        return TickGranularity.WEEKLY
    if day_width * DAYS_PER_MONTH >= MIN_TICK_SPACING:
        return TickGranularity.MONTHLY
    return TickGranularity.QUARTERLY


def _month_year_label(value: date) -> str:
    return f"{SHORT_MONTHS[value.month - 1]} {value.year}"


def _weekly_ticks(project_start: date, project_end: date) -> list[Tick]:
    # Monday on or before the project start
    current = project_start - timedelta(days=project_start.weekday())
    step = timedelta(days=DAYS_PER_WEEK)
    ticks: list[Tick] = []
    while current <= project_end:
        ticks.append(Tick(current, f"{SHORT_MONTHS[current.month - 1]} {current.day}"))
        # Stop before stepping past project_end, which may be date.max
        if project_end - current < step:
            break
        current += step
    return ticks


def _monthly_ticks(project_start: date, project_end: date) -> list[Tick]:
    current = date(project_start.year, project_start.month, 1)
    ticks: list[Tick] = []
    while current <= project_end:
        ticks.append(Tick(current, _month_year_label(current)))
        if current.month == 12:  # noqa: PLR2004
            if current.year == MAXYEAR:
                break
            current = date(current.year + 1, 1, 1)
        else:
            current = date(current.year, current.month + 1, 1)
    return ticks


def _quarterly_ticks(project_start: date, project_end: date) -> list[Tick]:
    ticks: list[Tick] = []
    for year in range(project_start.year, project_end.year + 1):
        for month in QUARTER_START_MONTHS:
            boundary = date(year, month, 1)
            if project_start <= boundary <= project_end:
                quarter = (month - 1) // 3 + 1
                ticks.append(Tick(boundary, f"Q{quarter} {year}"))
    return ticks


def generate_ticks(project_start: date, project_end: date, day_width: float) -> list[Tick]:
    """Generate time-axis ticks for the project span.

    Granularity follows ``select_granularity``. The result is never empty:
    when no boundary falls inside the span (a short project at quarterly
    density, or an inverted span) a single tick at the project start,
    labelled with its month and year, is returned.

    Args:
        project_start: First day of the timeline
        project_end: Last day of the timeline (inclusive)
        day_width: Pixels per day for this render pass

    Returns:
        Ticks in ascending date order
    """
    granularity = select_granularity(day_width)
    if granularity is TickGranularity.WEEKLY:
        ticks = _weekly_ticks(project_start, project_end)
    elif granularity is TickGranularity.MONTHLY:
        ticks = _monthly_ticks(project_start, project_end)
    else:
        ticks = _quarterly_ticks(project_start, project_end)

    if not ticks:
        ticks.append(Tick(project_start, _month_year_label(project_start)))
    return ticks
