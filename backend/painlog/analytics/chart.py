"""
Chart-Shape Formatter - turn bucketed pain data into plot-ready series.

A one-day range plots every log on its own (x = HH:MM). Longer ranges plot
daily averages (x = "Jan 1"), rounded to one decimal. When nothing is
plottable the caller gets has_data=False and a message instead of an empty
axis.
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Iterable, Optional

from backend.painlog.analytics.bucketing import (
    BucketPoint,
    BucketStrategy,
    bucket_entries,
)
from backend.painlog.analytics.entries import PainLogEntry, to_local

EMPTY_CHART_MESSAGE = "No pain data to display"


class ChartMode(str, Enum):
    single_point = "single_point"
    daily_average = "daily_average"


class DateRangeView(str, Enum):
    today = "today"
    week = "week"
    month = "month"
    custom = "custom"


@dataclass(frozen=True)
class ChartPoint:
    x: str
    y: Optional[float]
    notes: Optional[str] = None


@dataclass
class ChartData:
    mode: ChartMode
    points: list[ChartPoint] = field(default_factory=list)
    has_data: bool = False
    empty_message: Optional[str] = EMPTY_CHART_MESSAGE


# =============================================================================
# DATE RANGES
# =============================================================================

def is_single_day(start: datetime, end: datetime) -> bool:
    return start.date() == end.date()


def days_between(start: datetime, end: datetime) -> int:
    """Number of calendar days covered, inclusive of both ends."""
    return (end.date() - start.date()).days + 1


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def resolve_range(
    view: DateRangeView,
    now: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """
    Map a named view onto an inclusive (start, end) pair.

    Raises ValueError for a custom view without both bounds, or with
    start after end.
    """
    view = DateRangeView(view)
    if view == DateRangeView.today:
        return start_of_day(now), end_of_day(now)
    if view == DateRangeView.week:
        return now - timedelta(days=7), now
    if view == DateRangeView.month:
        return now - timedelta(days=30), now

    if start is None or end is None:
        raise ValueError("custom range requires both start and end")
    if start > end:
        raise ValueError("start must be on or before end")
    return start, end


# =============================================================================
# FORMATTING
# =============================================================================

def format_day_label(moment: datetime) -> str:
    """'Jan 1' style label."""
    return f"{moment:%b} {moment.day}"


def to_chart_data(points: Iterable[BucketPoint], mode: ChartMode) -> ChartData:
    """Convert bucketer output into chart data."""
    chart_points = []
    for point in points:
        if mode == ChartMode.single_point:
            chart_points.append(ChartPoint(x=point.label, y=point.value, notes=point.notes or ""))
        else:
            label = format_day_label(point.timestamp) if point.timestamp else point.label
            value = round(point.value, 1) if point.value is not None else None
            chart_points.append(ChartPoint(x=label, y=value))

    has_data = any(p.y is not None for p in chart_points)
    if not has_data:
        return ChartData(mode=mode, points=[], has_data=False, empty_message=EMPTY_CHART_MESSAGE)
    return ChartData(mode=mode, points=chart_points, has_data=True, empty_message=None)


def build_pain_chart(
    entries: Iterable[PainLogEntry],
    start: datetime,
    end: datetime,
    tz: Optional[tzinfo] = None,
) -> ChartData:
    """Pick single-point or daily-average mode from the range and format."""
    entries = list(entries)
    start, end = to_local(start, tz), to_local(end, tz)
    if is_single_day(start, end):
        points = bucket_entries(entries, BucketStrategy.single_point, tz)
        return to_chart_data(points, ChartMode.single_point)

    points = bucket_entries(entries, BucketStrategy.by_day, tz)
    return to_chart_data(points, ChartMode.daily_average)
