"""
Configuration for the Pain Log module.
Loads environment variables (and the project .env) into a settings object.
"""
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    duckdb_path: Path = PROJECT_ROOT / "data" / "painlog.duckdb"

    # Anthropic API
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    chat_max_tokens: int = 800
    chat_temperature: float = 0.7

    # Chat context windows
    chat_history_days: int = 30
    chat_history_limit: int = 50
    conversation_history_limit: int = 20

    # IANA timezone used to bucket timestamps; empty means the server's local zone
    user_timezone: str = ""

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    @field_validator("user_timezone")
    @classmethod
    def check_user_timezone(cls, value: str) -> str:
        value = value.strip()
        if value:
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError):
                raise ValueError(f"Unknown USER_TIMEZONE: {value!r}")
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def get_user_timezone() -> Optional[tzinfo]:
    """Return the configured user timezone, or None for the runtime's local zone."""
    if not settings.user_timezone:
        return None
    return ZoneInfo(settings.user_timezone)


def ensure_data_dirs():
    """Create data directories if they don't exist."""
    Path(settings.duckdb_path).parent.mkdir(parents=True, exist_ok=True)


def get_config_summary() -> dict:
    """Return a summary of current configuration."""
    return {
        "DUCKDB_PATH": str(settings.duckdb_path),
        "duckdb_exists": Path(settings.duckdb_path).exists(),
        "ANTHROPIC_MODEL": settings.anthropic_model,
        "anthropic_key_configured": bool(settings.anthropic_api_key),
        "USER_TIMEZONE": settings.user_timezone or "local",
    }
