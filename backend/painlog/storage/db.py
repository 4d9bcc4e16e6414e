"""
Pain Log Storage - DuckDB schema and connections

Tables:
- pain_logs: one row per logged pain entry
- profiles: condition, typical locations, medications, triggers
- ai_conversations: chat messages grouped by conversation_id
- user_ai_preferences: assistant personality and last interaction

Usage:
    python -m backend.painlog.storage.db

Conventions:
- One short-lived connection per request; callers close it
- Timestamps are naive local wall-clock TIMESTAMPs
- Label lists are VARCHAR[]; medications and metadata are JSON text
"""

from pathlib import Path
from typing import Any, Optional

import duckdb

from backend.painlog.config import settings, ensure_data_dirs

# =============================================================================
# SCHEMA
# =============================================================================

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS pain_logs (
        id VARCHAR NOT NULL,
        user_id VARCHAR NOT NULL,
        logged_at TIMESTAMP NOT NULL,
        pain_level INTEGER,
        pain_locations VARCHAR[],
        triggers VARCHAR[],
        medications VARCHAR,
        notes VARCHAR,
        journal_entry VARCHAR,
        pain_strategies VARCHAR,
        mood VARCHAR,
        activity VARCHAR,
        weather VARCHAR,
        side_effects VARCHAR,
        rx_taken BOOLEAN,
        functional_impact VARCHAR,
        impact_tags VARCHAR[],
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profiles (
        user_id VARCHAR NOT NULL,
        diagnosis VARCHAR,
        default_pain_locations VARCHAR[],
        pain_is_consistent BOOLEAN,
        current_medications VARCHAR,
        common_triggers VARCHAR[],
        updated_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ai_conversations (
        id VARCHAR NOT NULL,
        user_id VARCHAR NOT NULL,
        conversation_id VARCHAR NOT NULL,
        message_type VARCHAR NOT NULL,
        content VARCHAR NOT NULL,
        metadata VARCHAR,
        created_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_ai_preferences (
        user_id VARCHAR NOT NULL,
        ai_personality VARCHAR DEFAULT 'supportive',
        preferred_communication_style VARCHAR DEFAULT 'conversational',
        last_interaction TIMESTAMP
    )
    """,
]

TABLE_NAMES = ["pain_logs", "profiles", "ai_conversations", "user_ai_preferences"]


def init_schema(con: duckdb.DuckDBPyConnection) -> None:
    for statement in SCHEMA_STATEMENTS:
        con.execute(statement)


# =============================================================================
# CONNECTIONS
# =============================================================================

def get_db_connection(path: Optional[Path] = None) -> duckdb.DuckDBPyConnection:
    """Open a read-write DuckDB connection with the schema in place."""
    db_path = Path(path or settings.duckdb_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    con = duckdb.connect(str(db_path))
    init_schema(con)
    return con


def fetch_dicts(con: duckdb.DuckDBPyConnection, query: str, params: Optional[list] = None) -> list[dict[str, Any]]:
    """Run a query and return rows as column-name dicts."""
    result = con.execute(query, params or [])
    columns = [col[0] for col in result.description]
    return [dict(zip(columns, row)) for row in result.fetchall()]


def fetch_one_dict(con: duckdb.DuckDBPyConnection, query: str, params: Optional[list] = None) -> Optional[dict[str, Any]]:
    rows = fetch_dicts(con, query, params)
    return rows[0] if rows else None


def main():
    """Create the database file and tables."""
    print("=" * 60)
    print("Pain Log Storage - DuckDB Init")
    print("=" * 60)
    print(f"\nDuckDB path: {settings.duckdb_path}")

    ensure_data_dirs()
    con = get_db_connection()

    try:
        print("\nTables:")
        for table in TABLE_NAMES:
            count = con.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            print(f"  - {table}: {count:,} rows")
    finally:
        con.close()


if __name__ == "__main__":
    main()
