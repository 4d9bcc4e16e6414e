"""
AI Chat Module - PainPal assistant

Supportive, pattern-aware chat grounded in the user's own pain logs.

Components:
- prompts: Persona, context sections and high-risk message detection
- validator: Safety rewriting and softening of replies
- orchestrator: Context loading, LLM call and persistence
- api: FastAPI endpoints
"""

from .prompts import build_system_prompt, check_high_risk_query
from .validator import validate_response

__all__ = [
    "build_system_prompt",
    "check_high_risk_query",
    "validate_response",
]
