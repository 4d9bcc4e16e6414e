"""
Backend Entrypoint for the Pain Tracker App.

Composes the routers:
- /logs/* → Pain log CRUD (DuckDB)
- /analytics/* → Charts, patterns, medication effectiveness, summaries
- /profile/* → Profile and condition defaults
- /ai/* → PainPal chat assistant (Anthropic)
"""

import sys
from pathlib import Path

# =============================================================================
# ENVIRONMENT LOADING
# =============================================================================

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
BACKEND_DIR = Path(__file__).resolve().parent

env_file = PROJECT_ROOT / ".env"
if env_file.exists():
    load_dotenv(env_file)

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# =============================================================================
# FASTAPI APP CREATION
# =============================================================================

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.painlog.ai.api import router as ai_router
from backend.painlog.api.analytics import router as analytics_router
from backend.painlog.api.logs import router as logs_router
from backend.painlog.api.profile import router as profile_router
from backend.painlog.config import get_config_summary, settings

app = FastAPI(
    title="Pain Tracker API",
    description="Pain logging, pattern analytics and AI companion chat",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HEALTH CHECK
# =============================================================================

@app.get("/")
async def root():
    """Service info."""
    return {
        "service": "Pain Tracker API",
        "version": "1.0.0",
        "routes": {
            "logs": "/logs",
            "analytics": "/analytics",
            "profile": "/profile",
            "ai": "/ai",
        }
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "pain-tracker"}


# =============================================================================
# ROUTERS
# =============================================================================
# Routers already carry their prefixes

app.include_router(logs_router)
app.include_router(analytics_router)
app.include_router(profile_router)
app.include_router(ai_router)


# =============================================================================
# STARTUP EVENT
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Log startup information."""
    print("\n" + "=" * 60)
    print("Pain Tracker API")
    print("=" * 60)
    print(f"Project Root: {PROJECT_ROOT}")
    print(f"Env File: {env_file} (exists: {env_file.exists()})")
    for key, value in get_config_summary().items():
        print(f"{key}: {value}")
    print("=" * 60 + "\n")
