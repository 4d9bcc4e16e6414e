"""
PainPal chat tests. The LLM call is replaced with a stub; everything else
(context loading, prompt building, validation, storage) runs for real.
"""

import pytest

from backend.painlog.ai import orchestrator
from backend.painlog.ai.prompts import (
    build_conversation_section,
    build_system_prompt,
    check_high_risk_query,
    format_medication,
    truncate_message,
)
from backend.painlog.ai.validator import validate_response
from backend.painlog.analytics.patterns import FALLBACK_SUGGESTIONS, PainAnalysis
from backend.painlog.config import settings


@pytest.fixture
def llm_calls(monkeypatch):
    """Stub the LLM; records each call and answers with a directive reply."""
    calls = []

    def fake_call_llm(system_prompt, messages):
        calls.append({"system": system_prompt, "messages": messages})
        return "You should try gentle stretching."

    monkeypatch.setattr(orchestrator, "_call_llm", fake_call_llm)
    return calls


# =============================================================================
# PROMPTS
# =============================================================================

def test_format_medication():
    assert format_medication("Ibuprofen") == "Ibuprofen"
    assert format_medication({"name": "Naproxen", "dosage": "250mg", "frequency": "twice daily"}) == (
        "Naproxen (250mg) - twice daily"
    )


def test_truncate_and_conversation_section():
    assert truncate_message("x" * 120) == "x" * 100 + "..."
    history = [{"message_type": "user", "content": f"m{i}"} for i in range(8)]
    section = build_conversation_section(history)
    assert "m1" not in section
    assert section.splitlines()[1] == "user: m2"


def test_system_prompt_omits_empty_sections():
    prompt = build_system_prompt(None, PainAnalysis(), [], None)
    assert prompt.startswith("You are PainPal")
    assert "USER PROFILE" not in prompt
    assert "RECENT PAIN PATTERNS" not in prompt
    assert "IMPORTANT GUIDELINES" in prompt


def test_high_risk_detection():
    assert check_high_risk_query("I think I took too many pills") == (True, "medication overdose", "took too many")
    assert check_high_risk_query("my back hurts")[0] is False


# =============================================================================
# VALIDATOR
# =============================================================================

def test_validator_softens_and_rewrites():
    result = validate_response("You must rest. Stop taking your medication today.")
    assert result.is_valid
    assert "it may help to rest" in result.answer
    assert "talk with your prescriber before stopping your medication" in result.answer
    assert result.warnings == ["Blocked pattern detected: medication_stop"]


def test_validator_non_strict_only_warns():
    result = validate_response("This is guaranteed to work.", strict_mode=False)
    assert "guaranteed" in result.answer
    assert result.warnings == ["Blocked pattern detected: absolute_claim"]
    assert result.modifications == []


def test_validator_replaces_empty_reply():
    result = validate_response("   ")
    assert result.is_valid is False
    assert result.answer


# =============================================================================
# ENDPOINTS
# =============================================================================

def test_chat_round_trip(client, llm_calls):
    client.put("/profile", params={"user_id": "u1"}, json={"diagnosis": "Sciatica"})
    client.post("/logs", params={"user_id": "u1"}, json={
        "pain_level": 6, "pain_locations": ["Lower back"], "triggers": ["Sitting"],
    })

    r = client.post("/ai/chat", json={"user_id": "u1", "message": "Why does my pain flare?"})
    assert r.status_code == 200, r.text
    data = r.json()

    assert data["content"] == "you might consider try gentle stretching."
    assert data["conversation_id"]
    assert data["insights"] == ["Most affected: Lower back"]
    assert data["suggestions"][0] == "Log my current pain level"
    assert "Tips for managing Sciatica" in data["suggestions"]

    system = llm_calls[0]["system"]
    assert "- Condition: Sciatica" in system
    assert "- Most affected areas: Lower back" in system
    assert llm_calls[0]["messages"] == [{"role": "user", "content": "Why does my pain flare?"}]

    r = client.get("/ai/chat/thread", params={"user_id": "u1", "conversation_id": data["conversation_id"]})
    thread = r.json()
    assert thread["count"] == 2
    assert [m["message_type"] for m in thread["messages"]] == ["user", "assistant"]
    assert thread["messages"][1]["metadata"]["model"] == settings.anthropic_model


def test_follow_up_message_sees_conversation(client, llm_calls):
    first = client.post("/ai/chat", json={"user_id": "u1", "message": "Hello there"}).json()
    client.post("/ai/chat", json={
        "user_id": "u1",
        "message": "And again",
        "conversation_id": first["conversation_id"],
    })

    assert "RECENT CONVERSATION CONTEXT:" in llm_calls[1]["system"]
    assert "user: Hello there" in llm_calls[1]["system"]


def test_high_risk_message_skips_llm(client, llm_calls):
    r = client.post("/ai/chat", json={"user_id": "u1", "message": "I have chest pain and can't breathe"})
    assert r.status_code == 200
    assert "emergency" in r.json()["content"]
    assert llm_calls == []

    thread = client.get("/ai/chat/thread", params={
        "user_id": "u1", "conversation_id": r.json()["conversation_id"],
    }).json()
    assert thread["messages"][1]["metadata"]["model"] == "safety-response"


def test_missing_api_key_returns_503(client, monkeypatch):
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    r = client.post("/ai/chat", json={"message": "hello"})
    assert r.status_code == 503


def test_llm_failure_returns_fallback(client, monkeypatch):
    def broken(system_prompt, messages):
        raise RuntimeError("upstream timeout")

    monkeypatch.setattr(orchestrator, "_call_llm", broken)
    r = client.post("/ai/chat", json={"message": "hello"})
    assert r.status_code == 500
    assert r.json() == {"error": "upstream timeout", "suggestions": FALLBACK_SUGGESTIONS}


def test_empty_message_rejected(client):
    assert client.post("/ai/chat", json={"message": ""}).status_code == 422


def test_clear_thread(client, llm_calls):
    conversation_id = client.post("/ai/chat", json={"user_id": "u1", "message": "hi"}).json()["conversation_id"]

    r = client.delete("/ai/chat/thread", params={"user_id": "u1", "conversation_id": conversation_id})
    assert r.json()["status"] == "cleared"
    assert r.json()["deleted"] == 2

    thread = client.get("/ai/chat/thread", params={"user_id": "u1", "conversation_id": conversation_id}).json()
    assert thread["count"] == 0


def test_ai_health(client, monkeypatch):
    assert client.get("/ai/health").json()["status"] == "healthy"
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    assert client.get("/ai/health").json()["api_key_configured"] is False
