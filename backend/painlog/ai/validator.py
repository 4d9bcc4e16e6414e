"""
Response Validator - Rule-based safety filtering of assistant replies.

Replies are plain text. Before they reach the user:
1. Diagnosis claims and medication instructions are rewritten
2. Directive language is softened
"""

import re
from dataclasses import dataclass, field


@dataclass
class ValidationResult:
    """Result of response validation."""
    is_valid: bool
    answer: str
    warnings: list[str] = field(default_factory=list)
    modifications: list[str] = field(default_factory=list)


# =============================================================================
# BLOCKED PATTERNS
# =============================================================================

BLOCKED_PATTERNS = [
    # Diagnosis
    (r"\byou (definitely |clearly )?have (a |an )?[\w\s-]{0,30}\b(disease|syndrome|disorder|fracture|tumou?r)\b", "diagnosis_claim"),
    (r"\byou('re| are) (suffering from|diagnosed with)\b", "diagnosis_claim"),

    # Medication changes
    (r"\b(increase|double|raise) your (dose|dosage|medication)\b", "dosage_change"),
    (r"\b(stop|quit) taking your (medication|medicine|meds|prescription)\b", "medication_stop"),
    (r"\btake (more|extra) (pills|tablets|medication|medicine)\b", "dosage_change"),

    # Absolute claims
    (r"\bguaranteed?\b", "absolute_claim"),
    (r"\bthis (definitely|certainly|absolutely) (means|proves)\b", "definitive_claim"),
    (r"\bnothing to worry about\b", "dismissal"),
]

REWRITES = {
    "diagnosis_claim": "your logs show a pattern that may be worth discussing with your doctor: ",
    "dosage_change": "talk with your prescriber before changing your medication",
    "medication_stop": "talk with your prescriber before stopping your medication",
    "absolute_claim": "likely",
    "definitive_claim": "this may suggest",
    "dismissal": "something to keep an eye on",
}

SOFTENING_RULES = [
    (r"\byou should\b", "you might consider"),
    (r"\byou need to\b", "it could be helpful to"),
    (r"\byou must\b", "it may help to"),
]


# =============================================================================
# VALIDATION
# =============================================================================

def validate_response(answer: str, strict_mode: bool = True) -> ValidationResult:
    """
    Validate and potentially rewrite an assistant reply.

    In strict mode, blocked patterns are rewritten; otherwise they are only
    reported as warnings. Softening is always applied.
    """
    warnings = []
    modifications = []

    if not answer or not answer.strip():
        return ValidationResult(
            is_valid=False,
            answer="I'm sorry, I couldn't come up with a response. Could you rephrase that?",
            warnings=["Empty response"],
            modifications=["Replaced empty response"],
        )

    for pattern, violation_type in BLOCKED_PATTERNS:
        if re.search(pattern, answer, re.IGNORECASE):
            warnings.append(f"Blocked pattern detected: {violation_type}")
            if strict_mode:
                answer = re.sub(pattern, REWRITES[violation_type], answer, flags=re.IGNORECASE)
                modifications.append(f"Rewrote {violation_type} content")

    for old_pattern, new_text in SOFTENING_RULES:
        if re.search(old_pattern, answer, re.IGNORECASE):
            answer = re.sub(old_pattern, new_text, answer, flags=re.IGNORECASE)
            modifications.append(f"Softened language: {old_pattern}")

    return ValidationResult(
        is_valid=True,
        answer=answer,
        warnings=warnings,
        modifications=modifications,
    )

