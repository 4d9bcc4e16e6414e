"""
Temporal bucketing tests.

2025-01-05 is a Sunday, 2025-01-06 a Monday.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from backend.painlog.analytics.bucketing import (
    BucketStrategy,
    WEEKDAY_LABELS,
    bucket_by_day,
    bucket_by_time_of_day,
    bucket_by_weekday,
    bucket_entries,
    top_time_slots,
    top_weekdays,
)


def test_weekday_buckets_always_seven_with_nulls(make_entry):
    entries = [
        make_entry("2025-01-05T10:00", 4),
        make_entry("2025-01-05T20:00", 6),
        make_entry("2025-01-06T10:00", 2),
        make_entry("2025-01-07T10:00", None),
    ]
    points = bucket_entries(entries, BucketStrategy.by_weekday)

    assert [p.label for p in points] == WEEKDAY_LABELS
    assert points[0].value == 5.0
    assert points[0].count == 2
    assert points[1].value == 2.0
    # Tuesday only has an entry without a pain level
    assert points[2].value is None
    assert all(p.value is None for p in points[3:])


def test_time_of_day_buckets_use_half_open_hours(make_entry):
    entries = [
        make_entry("2025-01-06T05:59", 1),
        make_entry("2025-01-06T06:00", 3),
        make_entry("2025-01-06T11:59", 5),
        make_entry("2025-01-06T18:00", 9),
    ]
    points = bucket_entries(entries, BucketStrategy.by_time_of_day)

    assert [p.label for p in points] == ["Night", "Morning", "Afternoon", "Evening"]
    assert [p.value for p in points] == [1.0, 4.0, None, 9.0]


def test_fixed_buckets_with_no_entries():
    weekday = bucket_entries([], BucketStrategy.by_weekday)
    time_of_day = bucket_entries([], BucketStrategy.by_time_of_day)
    assert len(weekday) == 7 and all(p.value is None for p in weekday)
    assert len(time_of_day) == 4 and all(p.value is None for p in time_of_day)


def test_by_day_emits_only_days_with_data_in_order(make_entry):
    entries = [
        make_entry("2025-01-08T09:00", 7),
        make_entry("2025-01-06T09:00", 3),
        make_entry("2025-01-06T21:00", 4),
        make_entry("2025-01-07T09:00", None),
    ]
    points = bucket_entries(entries, BucketStrategy.by_day)

    assert [p.label for p in points] == ["2025-01-06", "2025-01-08"]
    assert [p.value for p in points] == [3.5, 7.0]
    assert points[0].timestamp == datetime(2025, 1, 6)


def test_single_point_keeps_raw_values_and_notes(make_entry):
    entries = [
        make_entry("2025-01-06T11:30", 3, notes="after walk"),
        make_entry("2025-01-06T09:00", 8),
        make_entry("2025-01-06T10:00", None),
    ]
    points = bucket_entries(entries, BucketStrategy.single_point)

    assert [(p.label, p.value, p.notes) for p in points] == [
        ("09:00", 8.0, ""),
        ("11:30", 3.0, "after walk"),
    ]


def test_top_slots_and_weekdays_ignore_empty_buckets(make_entry):
    entries = [
        make_entry("2025-01-05T20:00", 9),   # Sunday evening
        make_entry("2025-01-06T08:00", 2),   # Monday morning
        make_entry("2025-01-07T14:00", 5),   # Tuesday afternoon
    ]
    assert top_time_slots(entries) == ["Evening", "Afternoon"]
    assert top_weekdays(entries) == ["Sunday", "Tuesday"]
    assert top_weekdays(entries[:1], n=3) == ["Sunday"]


# =============================================================================
# TIMEZONES
# =============================================================================

def test_aware_entry_buckets_by_user_zone(make_entry):
    # Monday 03:00 UTC is Sunday 19:00 in Los Angeles
    entries = [make_entry("2025-01-06T03:00:00+00:00", 6)]
    utc = timezone.utc
    los_angeles = ZoneInfo("America/Los_Angeles")

    assert bucket_by_weekday(entries, utc)[1].value == 6.0
    assert bucket_by_weekday(entries, los_angeles)[0].value == 6.0
    assert bucket_by_weekday(entries, los_angeles)[1].value is None

    assert bucket_by_time_of_day(entries, utc)[0].label == "Night"
    assert bucket_by_time_of_day(entries, utc)[0].value == 6.0
    assert bucket_by_time_of_day(entries, los_angeles)[3].label == "Evening"
    assert bucket_by_time_of_day(entries, los_angeles)[3].value == 6.0

    assert [p.label for p in bucket_by_day(entries, utc)] == ["2025-01-06"]
    assert [p.label for p in bucket_by_day(entries, los_angeles)] == ["2025-01-05"]


def test_bucket_means_stay_on_the_pain_scale(make_entry):
    entries = [
        make_entry(f"2025-01-{day:02d}T{hour:02d}:15", level)
        for day, hour, level in [
            (5, 1, 0), (5, 9, 10), (6, 14, 10), (6, 22, 0),
            (7, 7, 3), (8, 19, 10), (9, 3, 0), (11, 12, 7),
        ]
    ]
    for strategy in BucketStrategy:
        values = [p.value for p in bucket_entries(entries, strategy) if p.value is not None]
        assert values
        assert all(0 <= value <= 10 for value in values)
