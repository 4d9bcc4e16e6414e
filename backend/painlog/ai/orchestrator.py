"""
Chat Orchestrator - one chat turn from user message to stored reply.

Flow:
1. Load context (profile, recent logs, conversation, preferences)
2. Analyze recent pain patterns
3. Short-circuit urgent messages with a fixed safety response
4. Build the system prompt and call the LLM
5. Validate and soften the reply
6. Persist both messages and touch preferences
"""

import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

import duckdb
from anthropic import Anthropic

from backend.painlog.ai.prompts import (
    build_high_risk_response,
    build_system_prompt,
    check_high_risk_query,
)
from backend.painlog.ai.validator import validate_response
from backend.painlog.analytics.entries import local_now, parse_entries
from backend.painlog.analytics.patterns import (
    PainAnalysis,
    analyze_pain_patterns,
    contextual_suggestions,
)
from backend.painlog.config import get_user_timezone, settings
from backend.painlog.storage.conversations import (
    MessageType,
    append_message,
    get_preferences,
    list_messages,
    touch_preferences,
)
from backend.painlog.storage.db import get_db_connection
from backend.painlog.storage.pain_logs import list_pain_logs
from backend.painlog.storage.profiles import get_profile


@dataclass
class ChatContext:
    """Everything loaded for one chat turn."""
    profile: Optional[dict]
    history: list[dict]
    preferences: Optional[dict]
    analysis: PainAnalysis


@dataclass
class ChatResponse:
    """Response from the chat orchestrator."""
    content: str
    suggestions: list[str]
    conversation_id: str
    insights: list[str]
    analysis: dict = field(default_factory=dict)
    validation_warnings: list[str] = field(default_factory=list)


def _get_anthropic_client() -> Anthropic:
    """Get Anthropic client with the configured API key."""
    if not settings.anthropic_api_key:
        raise ValueError("ANTHROPIC_API_KEY environment variable not set")
    return Anthropic(api_key=settings.anthropic_api_key)


def _call_llm(system_prompt: str, messages: list[dict]) -> str:
    """Call the LLM and get response."""
    client = _get_anthropic_client()

    response = client.messages.create(
        model=settings.anthropic_model,
        max_tokens=settings.chat_max_tokens,
        temperature=settings.chat_temperature,
        system=system_prompt,
        messages=messages,
    )

    return response.content[0].text


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class ChatOrchestrator:
    """
    Orchestrates a PainPal chat turn.

    Storage errors after the reply is generated are printed and swallowed,
    so the user still gets the reply. LLM and configuration errors propagate
    to the router.
    """

    def load_context(
        self,
        con: duckdb.DuckDBPyConnection,
        user_id: str,
        conversation_id: Optional[str],
    ) -> ChatContext:
        tz = get_user_timezone()
        since = local_now(tz) - timedelta(days=settings.chat_history_days)

        rows = list_pain_logs(
            con,
            user_id,
            start=since,
            descending=True,
            limit=settings.chat_history_limit,
        )
        history = []
        if conversation_id:
            history = list_messages(
                con, user_id, conversation_id, limit=settings.conversation_history_limit
            )

        context = ChatContext(
            profile=get_profile(con, user_id),
            history=history,
            preferences=get_preferences(con, user_id),
            analysis=analyze_pain_patterns(parse_entries(rows, tz)),
        )

        print(
            f"Chat context gathered: profile={context.profile is not None}, "
            f"logs={len(rows)}, history={len(history)}, "
            f"preferences={context.preferences is not None}"
        )
        return context

    def process_message(
        self,
        user_id: str,
        user_message: str,
        conversation_id: Optional[str] = None,
    ) -> ChatResponse:
        """
        Process a user message and generate a response.

        This is the main entry point for chat interactions.
        """
        con = get_db_connection()
        try:
            context = self.load_context(con, user_id, conversation_id)
            warnings: list[str] = []
            model = settings.anthropic_model

            is_high_risk, risk_area, _ = check_high_risk_query(user_message)
            if is_high_risk:
                answer = build_high_risk_response(risk_area)
                warnings.append(f"High-risk message detected: {risk_area}")
                model = "safety-response"
            else:
                system_prompt = build_system_prompt(
                    context.profile, context.analysis, context.history, context.preferences
                )
                raw_answer = _call_llm(
                    system_prompt=system_prompt,
                    messages=[{"role": "user", "content": user_message}],
                )
                validation = validate_response(raw_answer)
                answer = validation.answer
                warnings.extend(validation.warnings)

            conversation_id = conversation_id or str(uuid.uuid4())
            self._persist(con, user_id, conversation_id, user_message, answer, model, context.analysis)
        finally:
            con.close()

        return ChatResponse(
            content=answer,
            suggestions=contextual_suggestions(user_message, context.profile, context.analysis),
            conversation_id=conversation_id,
            insights=context.analysis.insights,
            analysis=context.analysis.to_dict(),
            validation_warnings=warnings,
        )

    def _persist(
        self,
        con: duckdb.DuckDBPyConnection,
        user_id: str,
        conversation_id: str,
        user_message: str,
        answer: str,
        model: str,
        analysis: PainAnalysis,
    ) -> None:
        tz = get_user_timezone()
        now = local_now(tz)
        try:
            append_message(
                con, user_id, conversation_id, MessageType.USER, user_message,
                metadata={"timestamp": now.isoformat()}, tz=tz,
            )
            append_message(
                con, user_id, conversation_id, MessageType.ASSISTANT, answer,
                metadata={
                    "model": model,
                    "timestamp": now.isoformat(),
                    "pain_analysis": analysis.to_dict(),
                },
                tz=tz,
            )
            touch_preferences(con, user_id, when=now)
            print("Conversation stored successfully")
        except duckdb.Error as e:
            print(f"⚠ Database storage error: {e}")


# Global instance
_orchestrator: Optional[ChatOrchestrator] = None


def get_orchestrator() -> ChatOrchestrator:
    """Get or create the chat orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ChatOrchestrator()
    return _orchestrator
