"""
Temporal Bucketer - group pain logs by day, weekday or time-of-day band.

Every strategy drops entries without a pain level first, then reports the
arithmetic mean per bucket. Fixed-shape strategies (weekday, time of day)
always return every bucket in a fixed order; buckets with no entries carry
value=None rather than a misleading 0.

Timestamps are read as local wall-clock time (see entries.to_local).
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Iterable, Optional

from backend.painlog.analytics.entries import (
    PainLogEntry,
    sort_chronologically,
    to_local,
    with_pain_level,
)


class BucketStrategy(str, Enum):
    by_day = "by_day"
    by_weekday = "by_weekday"
    by_time_of_day = "by_time_of_day"
    single_point = "single_point"


WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# (label, start hour inclusive, end hour exclusive)
TIME_OF_DAY_BANDS = [
    ("Night", 0, 6),
    ("Morning", 6, 12),
    ("Afternoon", 12, 18),
    ("Evening", 18, 24),
]


@dataclass(frozen=True)
class BucketPoint:
    """One labelled value produced by a bucketing strategy."""
    label: str
    value: Optional[float]
    count: int = 0
    timestamp: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass
class _Accumulator:
    total: float = 0.0
    count: int = 0

    def add(self, level: int) -> None:
        self.total += level
        self.count += 1

    @property
    def mean(self) -> Optional[float]:
        return self.total / self.count if self.count else None


# =============================================================================
# INDEX FUNCTIONS
# =============================================================================

def weekday_index(moment: datetime) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday."""
    return (moment.weekday() + 1) % 7


def time_of_day_index(moment: datetime) -> int:
    hour = moment.hour
    for index, (_, start, end) in enumerate(TIME_OF_DAY_BANDS):
        if start <= hour < end:
            return index
    raise ValueError(f"hour out of range: {hour}")


def format_time_label(moment: datetime) -> str:
    return moment.strftime("%H:%M")


# =============================================================================
# STRATEGIES
# =============================================================================

def _fixed_buckets(
    entries: Iterable[PainLogEntry],
    labels: list[str],
    index_fn,
    tz: Optional[tzinfo],
) -> list[BucketPoint]:
    buckets = [_Accumulator() for _ in labels]
    for entry in with_pain_level(entries):
        buckets[index_fn(to_local(entry.logged_at, tz))].add(entry.pain_level)

    return [
        BucketPoint(label=label, value=bucket.mean, count=bucket.count)
        for label, bucket in zip(labels, buckets)
    ]


def bucket_by_weekday(entries: Iterable[PainLogEntry], tz: Optional[tzinfo] = None) -> list[BucketPoint]:
    """Exactly 7 points, Sun..Sat."""
    return _fixed_buckets(entries, WEEKDAY_LABELS, weekday_index, tz)


def bucket_by_time_of_day(entries: Iterable[PainLogEntry], tz: Optional[tzinfo] = None) -> list[BucketPoint]:
    """Exactly 4 points, Night, Morning, Afternoon, Evening."""
    labels = [label for label, _, _ in TIME_OF_DAY_BANDS]
    return _fixed_buckets(entries, labels, time_of_day_index, tz)


def bucket_by_day(entries: Iterable[PainLogEntry], tz: Optional[tzinfo] = None) -> list[BucketPoint]:
    """One point per local calendar day with data, ascending by date."""
    days: dict[date, _Accumulator] = defaultdict(_Accumulator)
    for entry in with_pain_level(entries):
        days[to_local(entry.logged_at, tz).date()].add(entry.pain_level)

    return [
        BucketPoint(
            label=day.isoformat(),
            value=days[day].mean,
            count=days[day].count,
            timestamp=datetime(day.year, day.month, day.day),
        )
        for day in sorted(days)
    ]


def single_points(entries: Iterable[PainLogEntry], tz: Optional[tzinfo] = None) -> list[BucketPoint]:
    """One point per entry, raw pain level, chronological. No averaging."""
    points = []
    for entry in sort_chronologically(with_pain_level(entries), tz):
        moment = to_local(entry.logged_at, tz)
        points.append(BucketPoint(
            label=format_time_label(moment),
            value=float(entry.pain_level),
            count=1,
            timestamp=moment,
            notes=entry.notes or "",
        ))
    return points


_STRATEGIES = {
    BucketStrategy.by_day: bucket_by_day,
    BucketStrategy.by_weekday: bucket_by_weekday,
    BucketStrategy.by_time_of_day: bucket_by_time_of_day,
    BucketStrategy.single_point: single_points,
}


def bucket_entries(
    entries: Iterable[PainLogEntry],
    strategy: BucketStrategy,
    tz: Optional[tzinfo] = None,
) -> list[BucketPoint]:
    """Dispatch to the bucketing strategy."""
    return _STRATEGIES[BucketStrategy(strategy)](list(entries), tz)


# =============================================================================
# RANKING
# =============================================================================

def _top_labels(points: list[BucketPoint], names: list[str], n: int) -> list[str]:
    ranked = [
        (names[i], point.value)
        for i, point in enumerate(points)
        if point.value is not None
    ]
    ranked.sort(key=lambda item: item[1], reverse=True)
    return [name for name, _ in ranked[:n]]


def top_time_slots(entries: Iterable[PainLogEntry], n: int = 2, tz: Optional[tzinfo] = None) -> list[str]:
    """Time-of-day bands with the highest mean pain."""
    points = bucket_by_time_of_day(entries, tz)
    return _top_labels(points, [p.label for p in points], n)


def top_weekdays(entries: Iterable[PainLogEntry], n: int = 2, tz: Optional[tzinfo] = None) -> list[str]:
    """Full weekday names with the highest mean pain."""
    return _top_labels(bucket_by_weekday(entries, tz), WEEKDAY_NAMES, n)
