"""
System Prompts - assistant persona, user context and safety guardrails.

The system prompt is assembled from the persona, the user's profile, the
recent pain-pattern analysis, a short excerpt of the conversation, the
user's assistant preferences and a fixed set of guidelines.
"""

from typing import Any, Mapping, Optional

from backend.painlog.analytics.patterns import PainAnalysis

RECENT_MESSAGE_COUNT = 6
MESSAGE_PREVIEW_CHARS = 100


# =============================================================================
# BASE SYSTEM PROMPT
# =============================================================================

BASE_SYSTEM_PROMPT = """You are PainPal, an AI pain companion that provides personalized support for pain management. You are empathetic, knowledgeable, supportive, and remember previous conversations.

CORE PERSONALITY:
- Warm, understanding, and non-judgmental
- Medically informed but never a replacement for professional medical advice
- Proactive in offering insights and suggestions
- Remember and reference previous conversations naturally

CAPABILITIES:
- Analyze pain patterns and trends
- Provide personalized suggestions based on user history
- Offer evidence-based pain management strategies
- Support medication tracking and effectiveness analysis
- Detect concerning patterns and recommend professional consultation"""

GUIDELINES = """IMPORTANT GUIDELINES:
- Reference previous conversations naturally when relevant
- Provide specific, actionable advice based on their condition and history
- Suggest logging pain when appropriate
- Alert to concerning patterns (e.g., sudden increases, new symptoms)
- Always remind that you don't replace professional medical advice
- Be proactive in offering relevant insights from their pain history"""


# =============================================================================
# CONTEXT SECTIONS
# =============================================================================

def format_medication(med: Any) -> str:
    """'Name (dosage) - frequency', omitting missing parts."""
    if isinstance(med, str):
        return med
    text = med.get("name", "")
    if med.get("dosage"):
        text += f" ({med['dosage']})"
    if med.get("frequency"):
        text += f" - {med['frequency']}"
    return text


def build_profile_section(profile: Optional[Mapping[str, Any]]) -> str:
    if not profile:
        return ""

    lines = ["USER PROFILE:"]
    if profile.get("diagnosis"):
        lines.append(f"- Condition: {profile['diagnosis']}")

    locations = profile.get("default_pain_locations") or []
    if locations:
        lines.append(f"- Typical pain areas: {', '.join(locations)}")
        pattern = (
            "Usually consistent in these areas"
            if profile.get("pain_is_consistent")
            else "Pain varies in location"
        )
        lines.append(f"- Pain pattern: {pattern}")

    medications = profile.get("current_medications") or []
    if medications:
        lines.append(f"- Current medications: {', '.join(format_medication(m) for m in medications)}")

    triggers = profile.get("common_triggers") or []
    if triggers:
        lines.append(f"- Known triggers: {', '.join(triggers)}")

    return "\n".join(lines)


def build_patterns_section(analysis: PainAnalysis) -> str:
    if not analysis.has_data:
        return ""

    lines = [
        "RECENT PAIN PATTERNS (Last 30 days):",
        f"- Average pain level: {analysis.average_pain:.1f}/10",
        f"- Most affected areas: {', '.join(analysis.top_locations)}",
        f"- Common triggers: {', '.join(analysis.common_triggers)}",
        f"- Trend: {analysis.trend}",
    ]
    if analysis.insights:
        lines.append(f"- Key insights: {'; '.join(analysis.insights)}")
    return "\n".join(lines)


def truncate_message(content: str, limit: int = MESSAGE_PREVIEW_CHARS) -> str:
    if len(content) > limit:
        return content[:limit] + "..."
    return content


def build_conversation_section(history: list[Mapping[str, Any]]) -> str:
    """Last few messages of the thread, each cut to a short preview."""
    if not history:
        return ""

    lines = ["RECENT CONVERSATION CONTEXT:"]
    for message in history[-RECENT_MESSAGE_COUNT:]:
        lines.append(f"{message['message_type']}: {truncate_message(message['content'])}")
    return "\n".join(lines)


def build_preferences_section(preferences: Optional[Mapping[str, Any]]) -> str:
    if not preferences:
        return ""
    return (
        "USER PREFERENCES:\n"
        f"- Communication style: {preferences.get('preferred_communication_style')}\n"
        f"- AI personality: {preferences.get('ai_personality')}"
    )


def build_system_prompt(
    profile: Optional[Mapping[str, Any]],
    analysis: PainAnalysis,
    history: list[Mapping[str, Any]],
    preferences: Optional[Mapping[str, Any]],
) -> str:
    """Assemble the full system prompt; empty sections are left out."""
    sections = [
        BASE_SYSTEM_PROMPT,
        build_profile_section(profile),
        build_patterns_section(analysis),
        build_conversation_section(history),
        build_preferences_section(preferences),
        GUIDELINES,
    ]
    return "\n\n".join(s for s in sections if s)


# =============================================================================
# HIGH-RISK MESSAGE DETECTION
# =============================================================================

HIGH_RISK_KEYWORDS = {
    "self-harm": [
        "kill myself", "end my life", "suicide", "suicidal", "want to die",
        "hurt myself", "self harm", "self-harm",
    ],
    "medication overdose": [
        "overdose", "took too many", "took too much", "double dose",
        "extra pills",
    ],
    "emergency symptoms": [
        "chest pain", "can't breathe", "cannot breathe", "shortness of breath",
        "lost control of my bladder", "loss of bladder", "sudden numbness",
        "worst headache of my life", "face drooping", "slurred speech",
    ],
}

HIGH_RISK_RESPONSES = {
    "self-harm": (
        "I'm really sorry you're going through this, and I'm glad you told me. "
        "You deserve support right now from someone who can be there with you. "
        "If you are in immediate danger, please call your local emergency number. "
        "You can also reach a crisis line (in the US, call or text 988) to talk "
        "with someone any time of day."
    ),
    "medication overdose": (
        "Taking more medication than prescribed can be dangerous. Please contact "
        "Poison Control (in the US, 1-800-222-1222) or your local emergency number "
        "right away, even if you feel okay at the moment."
    ),
    "emergency symptoms": (
        "What you're describing can be a sign of something that needs urgent "
        "medical attention. Please call your local emergency number or get to the "
        "nearest emergency department now. I can help you log this once you're safe."
    ),
}


def check_high_risk_query(user_message: str) -> tuple[bool, str, str]:
    """
    Check whether a message needs an urgent-care response instead of chat.

    Returns:
        (is_high_risk, risk_area, matched_keyword)
    """
    message_lower = user_message.lower()
    for risk_area, keywords in HIGH_RISK_KEYWORDS.items():
        for keyword in keywords:
            if keyword in message_lower:
                return True, risk_area, keyword
    return False, "", ""


def build_high_risk_response(risk_area: str) -> str:
    return HIGH_RISK_RESPONSES[risk_area] + (
        "\n\nI'm an AI companion, not a medical professional, and I can't assess "
        "emergencies."
    )
