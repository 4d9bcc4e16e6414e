"""
Pain log storage operations, scoped to a user_id.
"""

import json
import uuid
from datetime import datetime, tzinfo
from typing import Any, Mapping, Optional

import duckdb

from backend.painlog.analytics.entries import (
    local_now,
    medication_to_json,
    normalize_medication,
    parse_timestamp,
    to_local,
)
from backend.painlog.storage.db import fetch_dicts, fetch_one_dict

LIST_COLUMNS = {"pain_locations", "triggers", "impact_tags"}
TEXT_COLUMNS = {
    "notes", "journal_entry", "pain_strategies", "mood", "activity",
    "weather", "side_effects", "functional_impact",
}
UPDATABLE_COLUMNS = (
    {"logged_at", "pain_level", "medications", "rx_taken"} | LIST_COLUMNS | TEXT_COLUMNS
)

SELECT_COLUMNS = """
    id, user_id, logged_at, pain_level, pain_locations, triggers, medications,
    notes, journal_entry, pain_strategies, mood, activity, weather,
    side_effects, rx_taken, functional_impact, impact_tags, created_at, updated_at
"""


def _encode_medications(value: Any) -> str:
    return json.dumps([medication_to_json(normalize_medication(m)) for m in value or [] if m])


def _encode_logged_at(value: Any, tz: Optional[tzinfo]) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid logged_at: {value!r}")
    return to_local(parsed, tz)


def _decode_row(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    for column in LIST_COLUMNS:
        row[column] = list(row.get(column) or [])
    try:
        row["medications"] = json.loads(row["medications"]) if row.get("medications") else []
    except json.JSONDecodeError:
        row["medications"] = [row["medications"]]
    return row


# =============================================================================
# OPERATIONS
# =============================================================================

def insert_pain_log(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    data: Mapping[str, Any],
    tz: Optional[tzinfo] = None,
) -> dict:
    """Insert a pain log; logged_at defaults to now."""
    now = local_now(tz)
    logged_at = data.get("logged_at")
    logged_at = _encode_logged_at(logged_at, tz) if logged_at is not None else now
    log_id = str(uuid.uuid4())

    con.execute(
        f"""
        INSERT INTO pain_logs ({SELECT_COLUMNS})
        VALUES (?, ?, ?, ?, CAST(? AS VARCHAR[]), CAST(? AS VARCHAR[]), ?,
                ?, ?, ?, ?, ?, ?, ?, ?, ?, CAST(? AS VARCHAR[]), ?, ?)
        """,
        [
            log_id,
            user_id,
            logged_at,
            data.get("pain_level"),
            list(data.get("pain_locations") or []),
            list(data.get("triggers") or []),
            _encode_medications(data.get("medications")),
            data.get("notes"),
            data.get("journal_entry"),
            data.get("pain_strategies"),
            data.get("mood"),
            data.get("activity"),
            data.get("weather"),
            data.get("side_effects"),
            data.get("rx_taken"),
            data.get("functional_impact"),
            list(data.get("impact_tags") or []),
            now,
            now,
        ],
    )
    return get_pain_log(con, user_id, log_id)


def get_pain_log(con: duckdb.DuckDBPyConnection, user_id: str, log_id: str) -> Optional[dict]:
    row = fetch_one_dict(
        con,
        f"SELECT {SELECT_COLUMNS} FROM pain_logs WHERE user_id = ? AND id = ?",
        [user_id, log_id],
    )
    return _decode_row(row)


def list_pain_logs(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> list[dict]:
    """Logs with start <= logged_at <= end (either bound optional)."""
    query = f"SELECT {SELECT_COLUMNS} FROM pain_logs WHERE user_id = ?"
    params: list[Any] = [user_id]
    if start is not None:
        query += " AND logged_at >= ?"
        params.append(start)
    if end is not None:
        query += " AND logged_at <= ?"
        params.append(end)
    query += f" ORDER BY logged_at {'DESC' if descending else 'ASC'}, created_at"
    if limit is not None:
        query += " LIMIT ?"
        params.append(int(limit))

    return [_decode_row(row) for row in fetch_dicts(con, query, params)]


def update_pain_log(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    log_id: str,
    changes: Mapping[str, Any],
    tz: Optional[tzinfo] = None,
) -> Optional[dict]:
    """Apply a partial update. Returns the updated row, or None if not found."""
    if get_pain_log(con, user_id, log_id) is None:
        return None

    assignments = []
    params: list[Any] = []
    for column, value in changes.items():
        if column not in UPDATABLE_COLUMNS:
            continue
        if column in LIST_COLUMNS:
            assignments.append(f"{column} = CAST(? AS VARCHAR[])")
            params.append(list(value or []))
        elif column == "medications":
            assignments.append("medications = ?")
            params.append(_encode_medications(value))
        elif column == "logged_at":
            assignments.append("logged_at = ?")
            params.append(_encode_logged_at(value, tz))
        else:
            assignments.append(f"{column} = ?")
            params.append(value)

    if assignments:
        assignments.append("updated_at = ?")
        params.append(local_now(tz))
        con.execute(
            f"UPDATE pain_logs SET {', '.join(assignments)} WHERE user_id = ? AND id = ?",
            params + [user_id, log_id],
        )

    return get_pain_log(con, user_id, log_id)


def delete_pain_log(con: duckdb.DuckDBPyConnection, user_id: str, log_id: str) -> bool:
    if get_pain_log(con, user_id, log_id) is None:
        return False
    con.execute("DELETE FROM pain_logs WHERE user_id = ? AND id = ?", [user_id, log_id])
    return True
