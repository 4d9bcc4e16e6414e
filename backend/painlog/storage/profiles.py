"""
Profile storage: diagnosis, typical locations, current medications, triggers.
"""

import json
from datetime import tzinfo
from typing import Any, Mapping, Optional

import duckdb

from backend.painlog.analytics.entries import local_now
from backend.painlog.storage.db import fetch_one_dict

PROFILE_FIELDS = [
    "diagnosis",
    "default_pain_locations",
    "pain_is_consistent",
    "current_medications",
    "common_triggers",
]


def _decode_profile(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    row["default_pain_locations"] = list(row.get("default_pain_locations") or [])
    row["common_triggers"] = list(row.get("common_triggers") or [])
    meds = row.get("current_medications")
    row["current_medications"] = json.loads(meds) if meds else []
    return row


def get_profile(con: duckdb.DuckDBPyConnection, user_id: str) -> Optional[dict]:
    row = fetch_one_dict(
        con,
        f"SELECT user_id, {', '.join(PROFILE_FIELDS)}, updated_at FROM profiles WHERE user_id = ?",
        [user_id],
    )
    return _decode_profile(row)


def upsert_profile(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    data: Mapping[str, Any],
    tz: Optional[tzinfo] = None,
) -> dict:
    """Create the profile or overwrite the fields present in `data`."""
    existing = get_profile(con, user_id) or {}
    merged = {field: data.get(field, existing.get(field)) for field in PROFILE_FIELDS}

    params = [
        merged["diagnosis"],
        list(merged["default_pain_locations"] or []),
        merged["pain_is_consistent"],
        json.dumps(list(merged["current_medications"] or [])),
        list(merged["common_triggers"] or []),
        local_now(tz),
    ]

    if existing:
        con.execute(
            """
            UPDATE profiles SET
                diagnosis = ?,
                default_pain_locations = CAST(? AS VARCHAR[]),
                pain_is_consistent = ?,
                current_medications = ?,
                common_triggers = CAST(? AS VARCHAR[]),
                updated_at = ?
            WHERE user_id = ?
            """,
            params + [user_id],
        )
    else:
        con.execute(
            """
            INSERT INTO profiles (user_id, diagnosis, default_pain_locations,
                                  pain_is_consistent, current_medications,
                                  common_triggers, updated_at)
            VALUES (?, ?, CAST(? AS VARCHAR[]), ?, ?, CAST(? AS VARCHAR[]), ?)
            """,
            [user_id] + params,
        )

    return get_profile(con, user_id)
