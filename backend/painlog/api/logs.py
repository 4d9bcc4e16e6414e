"""
FastAPI Pain Log Endpoints

Create, read, edit and delete a user's pain logs.

Endpoints:
- POST /logs - Log a pain entry
- GET /logs - Logs in a date range
- GET /logs/today - Today's logs, chronological
- GET /logs/{log_id} - One log
- PATCH /logs/{log_id} - Edit a log
- DELETE /logs/{log_id} - Delete a log
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from backend.painlog.api.analytics import resolve_request_range
from backend.painlog.api.schemas import (
    PainLog,
    PainLogCreate,
    PainLogListResponse,
    PainLogUpdate,
    RangeView,
)
from backend.painlog.config import get_user_timezone
from backend.painlog.storage.db import get_db_connection
from backend.painlog.storage.pain_logs import (
    delete_pain_log,
    get_pain_log,
    insert_pain_log,
    list_pain_logs,
    update_pain_log,
)

router = APIRouter(prefix="/logs", tags=["pain-logs"])


def _not_found(log_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Pain log not found: {log_id}")


@router.post("", response_model=PainLog, status_code=201)
async def create_pain_log(
    payload: PainLogCreate,
    user_id: str = Query(default="default_user", description="User identifier"),
) -> PainLog:
    """Log a pain entry. logged_at defaults to now."""
    con = get_db_connection()
    try:
        row = insert_pain_log(con, user_id, payload.model_dump(), get_user_timezone())
        return PainLog(**row)
    finally:
        con.close()


@router.get("", response_model=PainLogListResponse)
async def list_logs(
    user_id: str = Query(default="default_user", description="User identifier"),
    view: RangeView = Query(RangeView.week, description="today | week | month | custom"),
    start: Optional[datetime] = Query(None, description="Range start (custom view)"),
    end: Optional[datetime] = Query(None, description="Range end (custom view)"),
    descending: bool = Query(False, description="Newest first"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
) -> PainLogListResponse:
    start, end = resolve_request_range(view, start, end)

    con = get_db_connection()
    try:
        rows = list_pain_logs(con, user_id, start=start, end=end, descending=descending, limit=limit)
    finally:
        con.close()

    logs = [PainLog(**row) for row in rows]
    return PainLogListResponse(user_id=user_id, start=start, end=end, logs=logs, count=len(logs))


@router.get("/today", response_model=PainLogListResponse)
async def list_today_logs(
    user_id: str = Query(default="default_user", description="User identifier"),
) -> PainLogListResponse:
    """Logs from local start of day to end of day, oldest first."""
    return await list_logs(
        user_id=user_id, view=RangeView.today, start=None, end=None, descending=False, limit=None
    )


@router.get("/{log_id}", response_model=PainLog)
async def get_log(
    log_id: str,
    user_id: str = Query(default="default_user", description="User identifier"),
) -> PainLog:
    con = get_db_connection()
    try:
        row = get_pain_log(con, user_id, log_id)
    finally:
        con.close()

    if row is None:
        raise _not_found(log_id)
    return PainLog(**row)


@router.patch("/{log_id}", response_model=PainLog)
async def edit_log(
    log_id: str,
    payload: PainLogUpdate,
    user_id: str = Query(default="default_user", description="User identifier"),
) -> PainLog:
    """Update only the fields present in the request body."""
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("logged_at", True) is None:
        raise HTTPException(status_code=400, detail="logged_at cannot be cleared")

    con = get_db_connection()
    try:
        row = update_pain_log(con, user_id, log_id, changes, get_user_timezone())
    finally:
        con.close()

    if row is None:
        raise _not_found(log_id)
    return PainLog(**row)


@router.delete("/{log_id}")
async def remove_log(
    log_id: str,
    user_id: str = Query(default="default_user", description="User identifier"),
) -> dict:
    con = get_db_connection()
    try:
        deleted = delete_pain_log(con, user_id, log_id)
    finally:
        con.close()

    if not deleted:
        raise _not_found(log_id)
    return {"status": "deleted", "user_id": user_id, "id": log_id}
