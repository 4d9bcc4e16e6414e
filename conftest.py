"""
Shared pytest fixtures.

Every test that touches storage gets its own DuckDB file under tmp_path.
The configured timezone is cleared so naive timestamps are read as-is.
"""

from datetime import datetime

import pytest

from backend.painlog.analytics.entries import PainLogEntry, normalize_medication
from backend.painlog.config import settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "duckdb_path", tmp_path / "painlog-test.duckdb")
    monkeypatch.setattr(settings, "user_timezone", "")
    monkeypatch.setattr(settings, "anthropic_api_key", "test-key")
    return settings


@pytest.fixture
def con():
    from backend.painlog.storage.db import get_db_connection

    connection = get_db_connection()
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from backend.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_entry():
    """Factory for PainLogEntry values with terse defaults."""
    counter = {"n": 0}

    def _make(when: str, level=None, meds=(), **kwargs) -> PainLogEntry:
        counter["n"] += 1
        entry_id = kwargs.pop("id", f"e{counter['n']}")
        return PainLogEntry(
            id=entry_id,
            logged_at=datetime.fromisoformat(when),
            pain_level=level,
            medications=tuple(normalize_medication(m) for m in meds),
            **kwargs,
        )

    return _make
