"""
AI Chat API Endpoints - FastAPI router for the PainPal assistant.

Endpoints:
- POST /ai/chat - Send a message and get AI response
- GET /ai/chat/thread - Get a conversation's messages
- DELETE /ai/chat/thread - Clear a conversation
- GET /ai/health - AI service configuration check
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend.painlog.ai.orchestrator import get_orchestrator
from backend.painlog.analytics.patterns import FALLBACK_SUGGESTIONS
from backend.painlog.config import settings
from backend.painlog.storage.conversations import delete_conversation, list_messages
from backend.painlog.storage.db import get_db_connection

router = APIRouter(prefix="/ai", tags=["ai-chat"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class ChatRequest(BaseModel):
    """Request body for chat endpoint."""
    user_id: str = Field(default="default_user", description="User identifier")
    message: str = Field(..., min_length=1, description="User's message")
    conversation_id: Optional[str] = Field(None, description="Continue an existing conversation")


class ChatResponseModel(BaseModel):
    """Response from chat endpoint."""
    content: str
    suggestions: list[str]
    conversation_id: str
    insights: list[str]
    timestamp: str


class ThreadMessage(BaseModel):
    """A message in the chat thread."""
    message_type: str
    content: str
    created_at: datetime
    metadata: Optional[dict] = None


class ThreadResponse(BaseModel):
    """Response containing chat thread."""
    user_id: str
    conversation_id: str
    messages: list[ThreadMessage]
    count: int


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/chat", response_model=ChatResponseModel)
async def chat(request: ChatRequest):
    """
    Send a message to PainPal and get a response.

    The reply is grounded in the user's profile, the last 30 days of pain
    logs and the recent conversation. Errors from the AI service return a
    500 body with an `error` and fallback `suggestions`.
    """
    orchestrator = get_orchestrator()

    try:
        response = orchestrator.process_message(
            user_id=request.user_id,
            user_message=request.message,
            conversation_id=request.conversation_id,
        )
    except ValueError as e:
        # Missing API key or config errors
        raise HTTPException(
            status_code=503,
            detail=f"AI service configuration error: {str(e)}"
        )
    except Exception as e:
        print(f"⚠ Error in ai chat: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": str(e) or "An error occurred processing your request",
                "suggestions": FALLBACK_SUGGESTIONS,
            },
        )

    return ChatResponseModel(
        content=response.content,
        suggestions=response.suggestions,
        conversation_id=response.conversation_id,
        insights=response.insights,
        timestamp=datetime.now().isoformat(),
    )


@router.get("/chat/thread", response_model=ThreadResponse)
async def get_thread(
    user_id: str = Query(default="default_user", description="User identifier"),
    conversation_id: str = Query(..., description="Conversation ID"),
) -> ThreadResponse:
    """Get all messages of a conversation, oldest first."""
    con = get_db_connection()
    try:
        rows = list_messages(con, user_id, conversation_id)
    finally:
        con.close()

    messages = [
        ThreadMessage(
            message_type=row["message_type"],
            content=row["content"],
            created_at=row["created_at"],
            metadata=row.get("metadata"),
        )
        for row in rows
    ]

    return ThreadResponse(
        user_id=user_id,
        conversation_id=conversation_id,
        messages=messages,
        count=len(messages),
    )


@router.delete("/chat/thread")
async def clear_thread(
    user_id: str = Query(default="default_user", description="User identifier"),
    conversation_id: str = Query(..., description="Conversation ID"),
) -> dict:
    """Remove all messages of a conversation."""
    con = get_db_connection()
    try:
        deleted = delete_conversation(con, user_id, conversation_id)
    finally:
        con.close()

    return {
        "status": "cleared",
        "user_id": user_id,
        "conversation_id": conversation_id,
        "deleted": deleted,
    }


@router.get("/health")
async def ai_health_check() -> dict:
    """
    Health check for AI service.

    Verifies that the AI service is configured correctly.
    """
    has_api_key = bool(settings.anthropic_api_key)

    return {
        "status": "healthy" if has_api_key else "misconfigured",
        "api_key_configured": has_api_key,
        "model": settings.anthropic_model,
    }
