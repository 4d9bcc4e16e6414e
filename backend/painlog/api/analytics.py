"""
FastAPI Analytics Endpoints

Read-only views over a user's pain logs. Every endpoint loads the logs in
range from DuckDB and runs them through the in-memory analytics pipeline.

Endpoints:
- GET /analytics/chart - Single-day timeline or multi-day daily averages
- GET /analytics/patterns - Weekday and time-of-day averages
- GET /analytics/medications - Medication effectiveness (2-4h pairing)
- GET /analytics/impact - Functional impact breakdown
- GET /analytics/summary - Plain-text clinician summary
"""

from datetime import datetime
from typing import Optional

import duckdb
from fastapi import APIRouter, HTTPException, Query

from backend.painlog.analytics.bucketing import bucket_by_time_of_day, bucket_by_weekday
from backend.painlog.analytics.chart import build_pain_chart, days_between, resolve_range
from backend.painlog.analytics.entries import PainLogEntry, local_now, parse_entries, to_local
from backend.painlog.analytics.medications import format_medication_line, pair_medication_effects
from backend.painlog.analytics.patterns import build_clinician_summary, summarize_functional_impact
from backend.painlog.api.schemas import (
    BucketPointModel,
    ChartPointModel,
    ChartResponse,
    ClinicianSummaryResponse,
    FunctionalImpactResponse,
    MedicationEffect,
    MedicationsResponse,
    PatternsResponse,
    RangeView,
)
from backend.painlog.config import get_user_timezone
from backend.painlog.storage.db import get_db_connection
from backend.painlog.storage.pain_logs import list_pain_logs

router = APIRouter(prefix="/analytics", tags=["analytics"])


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def resolve_request_range(
    view: RangeView,
    start: Optional[datetime],
    end: Optional[datetime],
) -> tuple[datetime, datetime]:
    """
    Turn query parameters into an inclusive local (start, end) pair.

    Explicit start and end always win over the named view.
    """
    tz = get_user_timezone()
    if start is not None and end is not None:
        view = RangeView.custom
    if start is not None:
        start = to_local(start, tz)
    if end is not None:
        end = to_local(end, tz)

    try:
        return resolve_range(view.value, local_now(tz), start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def load_entries(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    start: datetime,
    end: datetime,
) -> list[PainLogEntry]:
    rows = list_pain_logs(con, user_id, start=start, end=end)
    return parse_entries(rows, get_user_timezone())


def _load_range(user_id: str, view: RangeView, start, end):
    start, end = resolve_request_range(view, start, end)
    con = get_db_connection()
    try:
        return start, end, load_entries(con, user_id, start, end)
    finally:
        con.close()


# =============================================================================
# ENDPOINT 1: Pain Chart
# =============================================================================

@router.get("/chart", response_model=ChartResponse)
async def get_pain_chart(
    user_id: str = Query(default="default_user", description="User identifier"),
    view: RangeView = Query(RangeView.week, description="today | week | month | custom"),
    start: Optional[datetime] = Query(None, description="Range start (custom view)"),
    end: Optional[datetime] = Query(None, description="Range end (custom view)"),
) -> ChartResponse:
    """
    Chart-ready pain series.

    A range within one calendar day plots each log (x = HH:MM). Longer
    ranges plot daily averages rounded to one decimal.
    """
    if start is not None and end is not None:
        view = RangeView.custom
    start, end, entries = _load_range(user_id, view, start, end)
    chart = build_pain_chart(entries, start, end, get_user_timezone())

    points = [ChartPointModel(x=p.x, y=p.y, notes=p.notes) for p in chart.points]
    return ChartResponse(
        view=view,
        start=start,
        end=end,
        mode=chart.mode.value,
        days=days_between(start, end),
        points=points,
        has_data=chart.has_data,
        empty_message=chart.empty_message,
        count=len(points),
    )


# =============================================================================
# ENDPOINT 2: Weekday / Time-of-Day Patterns
# =============================================================================

@router.get("/patterns", response_model=PatternsResponse)
async def get_pain_patterns(
    user_id: str = Query(default="default_user", description="User identifier"),
    view: RangeView = Query(RangeView.month, description="today | week | month | custom"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
) -> PatternsResponse:
    """Average pain per weekday (Sun..Sat) and per time-of-day band. Empty buckets are null."""
    start, end, entries = _load_range(user_id, view, start, end)
    tz = get_user_timezone()

    def to_models(points):
        return [BucketPointModel(label=p.label, value=p.value, count=p.count) for p in points]

    return PatternsResponse(
        start=start,
        end=end,
        weekday=to_models(bucket_by_weekday(entries, tz)),
        time_of_day=to_models(bucket_by_time_of_day(entries, tz)),
        entry_count=sum(1 for e in entries if e.pain_level is not None),
    )


# =============================================================================
# ENDPOINT 3: Medication Effectiveness
# =============================================================================

@router.get("/medications", response_model=MedicationsResponse)
async def get_medication_effectiveness(
    user_id: str = Query(default="default_user", description="User identifier"),
    view: RangeView = Query(RangeView.month, description="today | week | month | custom"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    dedupe_per_entry: bool = Query(False, description="Count a name once per log"),
) -> MedicationsResponse:
    """
    Per-medication pain change 2-4 hours after a dose, most effective first.

    Medications without a follow-up log in the window are omitted.
    """
    start, end, entries = _load_range(user_id, view, start, end)
    records = pair_medication_effects(entries, get_user_timezone(), dedupe_per_entry=dedupe_per_entry)

    medications = [
        MedicationEffect(**record.to_dict(), line=format_medication_line(record))
        for record in records
    ]
    return MedicationsResponse(start=start, end=end, medications=medications, count=len(medications))


# =============================================================================
# ENDPOINT 4: Functional Impact
# =============================================================================

@router.get("/impact", response_model=FunctionalImpactResponse)
async def get_functional_impact(
    user_id: str = Query(default="default_user", description="User identifier"),
    view: RangeView = Query(RangeView.month, description="today | week | month | custom"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    top_n: int = Query(5, ge=1, le=20, description="Number of impact tags"),
) -> FunctionalImpactResponse:
    start, end, entries = _load_range(user_id, view, start, end)
    summary = summarize_functional_impact(entries, top_n=top_n, tz=get_user_timezone())

    return FunctionalImpactResponse(start=start, end=end, **summary.to_dict())


# =============================================================================
# ENDPOINT 5: Clinician Summary
# =============================================================================

@router.get("/summary", response_model=ClinicianSummaryResponse)
async def get_clinician_summary(
    user_id: str = Query(default="default_user", description="User identifier"),
    view: RangeView = Query(RangeView.month, description="today | week | month | custom"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
) -> ClinicianSummaryResponse:
    """Summary fields plus the rendered plain text, ready to copy or print."""
    start, end, entries = _load_range(user_id, view, start, end)
    summary = build_clinician_summary(entries, start, end, get_user_timezone())
    return ClinicianSummaryResponse(**summary.to_dict())
