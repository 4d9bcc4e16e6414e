"""
Condition defaults for onboarding.

A free-text diagnosis is matched against known conditions (substring match,
then a table of related terms) to pre-fill typical pain locations and
triggers.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Optional


@dataclass(frozen=True)
class ConditionDefaults:
    pain_locations: list[str] = field(default_factory=list)
    pain_is_consistent: bool = False
    common_triggers: list[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


CONDITION_MAPPINGS: dict[str, ConditionDefaults] = {
    "migraine": ConditionDefaults(
        pain_locations=["Head", "Neck", "Shoulders"],
        pain_is_consistent=True,
        common_triggers=[
            "Stress", "Bright lights", "Loud noises", "Weather changes",
            "Certain foods", "Lack of sleep", "Dehydration",
        ],
        description="Migraines often affect the head, neck, and shoulder areas consistently.",
    ),
    "headache": ConditionDefaults(
        pain_locations=["Head", "Neck"],
        pain_is_consistent=True,
        common_triggers=["Stress", "Eye strain", "Dehydration", "Poor posture", "Lack of sleep"],
        description="Headaches typically occur in the head and neck regions.",
    ),
    "arthritis": ConditionDefaults(
        pain_locations=["Hands", "Wrists", "Knees", "Ankles", "Hips"],
        pain_is_consistent=True,
        common_triggers=[
            "Weather changes", "Cold temperatures", "Physical activity",
            "Barometric pressure", "Overuse",
        ],
        description="Arthritis commonly affects joints in hands, wrists, knees, and other joint areas.",
    ),
    "fibromyalgia": ConditionDefaults(
        pain_locations=["Shoulders", "Upper back", "Lower back", "Neck", "Hips", "Arms", "Thighs"],
        pain_is_consistent=False,
        common_triggers=[
            "Stress", "Sleep disruption", "Physical exertion",
            "Weather changes", "Emotional stress",
        ],
        description="Fibromyalgia typically involves widespread pain that can vary in location.",
    ),
    "back pain": ConditionDefaults(
        pain_locations=["Lower back", "Upper back", "Hips"],
        pain_is_consistent=True,
        common_triggers=["Poor posture", "Physical activity", "Lifting", "Sitting too long", "Stress"],
        description="Back pain usually affects the spine and surrounding areas consistently.",
    ),
    "sciatica": ConditionDefaults(
        pain_locations=["Lower back", "Hips", "Thighs", "Calves"],
        pain_is_consistent=True,
        common_triggers=["Sitting", "Bending", "Coughing", "Sneezing", "Physical activity"],
        description="Sciatica typically follows the path from lower back down through the legs.",
    ),
    "chronic pain": ConditionDefaults(
        pain_locations=[],
        pain_is_consistent=False,
        common_triggers=["Stress", "Weather changes", "Physical activity", "Sleep disruption"],
        description="Chronic pain can vary greatly between individuals.",
    ),
}

# Checked in order, after the direct condition names
RELATED_TERMS = [
    ("tension headache", "headache"),
    ("cluster headache", "headache"),
    ("rheumatoid", "arthritis"),
    ("osteoarthritis", "arthritis"),
    ("joint pain", "arthritis"),
    ("lower back", "back pain"),
    ("upper back", "back pain"),
    ("spine", "back pain"),
    ("herniated disc", "back pain"),
    ("disc", "back pain"),
    ("fibro", "fibromyalgia"),
    ("widespread pain", "fibromyalgia"),
    ("nerve pain", "sciatica"),
    ("neuropathy", "chronic pain"),
]


def detect_condition(diagnosis: Optional[str]) -> Optional[str]:
    """Return the matched condition key, or None."""
    if not diagnosis or not diagnosis.strip():
        return None

    normalized = diagnosis.lower().strip()
    for condition in CONDITION_MAPPINGS:
        if condition in normalized:
            return condition

    for term, condition in RELATED_TERMS:
        if term in normalized:
            return condition

    return None


def smart_defaults(diagnosis: Optional[str]) -> ConditionDefaults:
    """Defaults for the diagnosis; empty defaults when nothing matches. Always a fresh copy."""
    condition = detect_condition(diagnosis)
    if condition is None:
        return ConditionDefaults()
    defaults = CONDITION_MAPPINGS[condition]
    return replace(
        defaults,
        pain_locations=list(defaults.pain_locations),
        common_triggers=list(defaults.common_triggers),
    )
