"""
Server Runner for the Pain Tracker App.

Usage:
    python run.py

Serves /logs, /analytics, /profile and /ai from one process.
"""

import os
import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")
    reload = os.getenv("RELOAD", "true").lower() == "true"

    print(f"\n🚀 Starting Pain Tracker API on http://{host}:{port}\n")

    uvicorn.run(
        "backend.main:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["backend"],
    )
