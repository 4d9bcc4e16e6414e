"""Settings loading tests."""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from backend.painlog.config import Settings, get_user_timezone, settings


def test_unknown_timezone_rejected_at_load():
    with pytest.raises(ValidationError, match="USER_TIMEZONE"):
        Settings(user_timezone="Mars/Olympus_Mons")


def test_known_or_empty_timezone_accepted():
    assert Settings(user_timezone=" Europe/Berlin ").user_timezone == "Europe/Berlin"
    assert Settings(user_timezone="").user_timezone == ""


def test_get_user_timezone(monkeypatch):
    assert get_user_timezone() is None
    monkeypatch.setattr(settings, "user_timezone", "America/New_York")
    assert get_user_timezone() == ZoneInfo("America/New_York")
