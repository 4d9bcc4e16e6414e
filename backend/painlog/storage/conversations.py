"""
Chat storage: conversation messages and per-user assistant preferences.
"""

import json
import uuid
from datetime import datetime, tzinfo
from typing import Any, Optional

import duckdb

from backend.painlog.analytics.entries import local_now
from backend.painlog.storage.db import fetch_dicts, fetch_one_dict


class MessageType:
    USER = "user"
    ASSISTANT = "assistant"


# =============================================================================
# MESSAGES
# =============================================================================

def append_message(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    conversation_id: str,
    message_type: str,
    content: str,
    metadata: Optional[dict[str, Any]] = None,
    tz: Optional[tzinfo] = None,
) -> dict:
    message = {
        "id": str(uuid.uuid4()),
        "user_id": user_id,
        "conversation_id": conversation_id,
        "message_type": message_type,
        "content": content,
        "metadata": metadata or {},
        "created_at": local_now(tz),
    }
    con.execute(
        """
        INSERT INTO ai_conversations
            (id, user_id, conversation_id, message_type, content, metadata, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        [
            message["id"],
            user_id,
            conversation_id,
            message_type,
            content,
            json.dumps(message["metadata"], default=str),
            message["created_at"],
        ],
    )
    return message


def list_messages(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    conversation_id: str,
    limit: Optional[int] = None,
) -> list[dict]:
    """Messages in chronological order; with a limit, the most recent ones."""
    query = """
        SELECT id, user_id, conversation_id, message_type, content, metadata, created_at
        FROM ai_conversations
        WHERE user_id = ? AND conversation_id = ?
        ORDER BY created_at DESC, rowid DESC
    """
    params: list[Any] = [user_id, conversation_id]
    if limit is not None:
        query += " LIMIT ?"
        params.append(int(limit))

    rows = fetch_dicts(con, query, params)
    for row in rows:
        row["metadata"] = json.loads(row["metadata"]) if row.get("metadata") else {}
    rows.reverse()
    return rows


def delete_conversation(con: duckdb.DuckDBPyConnection, user_id: str, conversation_id: str) -> int:
    count = con.execute(
        "SELECT COUNT(*) FROM ai_conversations WHERE user_id = ? AND conversation_id = ?",
        [user_id, conversation_id],
    ).fetchone()[0]
    con.execute(
        "DELETE FROM ai_conversations WHERE user_id = ? AND conversation_id = ?",
        [user_id, conversation_id],
    )
    return count


# =============================================================================
# PREFERENCES
# =============================================================================

def get_preferences(con: duckdb.DuckDBPyConnection, user_id: str) -> Optional[dict]:
    return fetch_one_dict(
        con,
        """
        SELECT user_id, ai_personality, preferred_communication_style, last_interaction
        FROM user_ai_preferences WHERE user_id = ?
        """,
        [user_id],
    )


def touch_preferences(
    con: duckdb.DuckDBPyConnection,
    user_id: str,
    when: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> dict:
    """Record the last interaction, creating default preferences if needed."""
    when = when or local_now(tz)
    if get_preferences(con, user_id) is None:
        con.execute(
            "INSERT INTO user_ai_preferences (user_id, last_interaction) VALUES (?, ?)",
            [user_id, when],
        )
    else:
        con.execute(
            "UPDATE user_ai_preferences SET last_interaction = ? WHERE user_id = ?",
            [when, user_id],
        )
    return get_preferences(con, user_id)
