"""
Pain log entries - the unit of input for every analytics transform.

Rows arrive from storage or from API payloads as plain mappings. They are
normalized here, once, into immutable PainLogEntry values:
- timestamps parsed; aware values keep their instant, naive values are
  wall-clock time in the user zone
- medications normalized to a two-variant union with a canonical name
- rows with an unusable timestamp or pain level are skipped, not raised

Nothing downstream mutates an entry.
"""

import json
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Iterable, Mapping, Optional, Union

PAIN_LEVEL_MIN = 0
PAIN_LEVEL_MAX = 10


# =============================================================================
# MEDICATIONS
# =============================================================================

@dataclass(frozen=True)
class BareNameMedication:
    """Medication recorded as a plain name."""
    name: str


@dataclass(frozen=True)
class StructuredMedication:
    """Medication recorded with dosage details."""
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None


Medication = Union[BareNameMedication, StructuredMedication]


def normalize_medication(raw: Any) -> Medication:
    """Map a stored medication reference onto one of the two variants."""
    if isinstance(raw, (BareNameMedication, StructuredMedication)):
        return raw
    if isinstance(raw, str):
        return BareNameMedication(name=raw)
    if isinstance(raw, Mapping) and raw.get("name"):
        return StructuredMedication(
            name=str(raw["name"]),
            dosage=raw.get("dosage"),
            frequency=raw.get("frequency"),
        )
    return BareNameMedication(name=str(raw))


def medication_name(medication: Medication) -> str:
    """Canonical name, matched case-sensitively everywhere."""
    return medication.name


def medication_to_json(medication: Medication) -> Union[str, dict]:
    """Inverse of normalize_medication, for storage and API output."""
    if isinstance(medication, StructuredMedication):
        payload = {"name": medication.name}
        if medication.dosage is not None:
            payload["dosage"] = medication.dosage
        if medication.frequency is not None:
            payload["frequency"] = medication.frequency
        return payload
    return medication.name


# =============================================================================
# ENTRY
# =============================================================================

@dataclass(frozen=True)
class PainLogEntry:
    """A single pain log, as seen by the aggregation pipeline."""

    id: str
    logged_at: datetime
    pain_level: Optional[int] = None
    locations: tuple[str, ...] = ()
    triggers: tuple[str, ...] = ()
    medications: tuple[Medication, ...] = ()
    notes: Optional[str] = None
    journal_entry: Optional[str] = None
    side_effects: Optional[str] = None
    rx_taken: Optional[bool] = None
    functional_impact: Optional[str] = None
    impact_tags: tuple[str, ...] = ()
    mood: Optional[str] = None
    activity: Optional[str] = None
    weather: Optional[str] = None

    @property
    def had_side_effects(self) -> bool:
        return bool(self.side_effects and self.side_effects.strip())

    @property
    def medication_names(self) -> list[str]:
        return [medication_name(m) for m in self.medications]


# =============================================================================
# TIME HELPERS
# =============================================================================

def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Convert a timestamp to naive local wall-clock time.

    Naive values are already wall-clock and pass through. Aware values are
    converted to `tz`, or to the runtime's local zone when `tz` is None.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def local_date(value: datetime, tz: Optional[tzinfo] = None) -> date:
    return to_local(value, tz).date()


def to_instant(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Aware UTC instant, for ordering and elapsed time.

    Naive values are read as wall-clock time in `tz`, or in the runtime's
    local zone when `tz` is None.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz) if tz is not None else value.astimezone()
    return value.astimezone(timezone.utc)


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    return datetime.now(tz).replace(tzinfo=None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a datetime or ISO-8601 string; None when it can't be read."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


# =============================================================================
# INGESTION
# =============================================================================

def _parse_pain_level(value: Any) -> tuple[bool, Optional[int]]:
    """Return (ok, level). Missing is ok; out-of-range or non-integral is not."""
    if value is None:
        return True, None
    if isinstance(value, bool):
        return False, None
    if isinstance(value, float):
        if not value.is_integer():
            return False, None
        value = int(value)
    if not isinstance(value, int):
        try:
            value = int(str(value).strip())
        except ValueError:
            return False, None
    if value < PAIN_LEVEL_MIN or value > PAIN_LEVEL_MAX:
        return False, None
    return True, value


def _as_labels(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value if v)


def _as_medications(value: Any) -> tuple[Medication, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        # Stored as JSON text
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return (BareNameMedication(name=value),)
    if isinstance(value, (str, Mapping)) or not isinstance(value, (list, tuple)):
        value = [value]
    return tuple(normalize_medication(m) for m in value if m)


def parse_entry(row: Mapping[str, Any], tz: Optional[tzinfo] = None) -> Optional[PainLogEntry]:
    """
    Build a PainLogEntry from a storage row or JSON mapping.

    Accepts both snake_case storage keys (pain_level, pain_locations) and the
    short forms (locations). Returns None for rows that must be skipped:
    unparseable logged_at, or a pain level outside [0, 10].
    """
    logged_at = parse_timestamp(row.get("logged_at"))
    if logged_at is None:
        return None

    ok, pain_level = _parse_pain_level(row.get("pain_level"))
    if not ok:
        return None

    locations = row.get("pain_locations")
    if locations is None:
        locations = row.get("locations")

    # Naive timestamps are wall-clock time in the user zone
    if logged_at.tzinfo is None and tz is not None:
        logged_at = logged_at.replace(tzinfo=tz)

    rx_taken = row.get("rx_taken")

    return PainLogEntry(
        id=str(row.get("id", "")),
        logged_at=logged_at,
        pain_level=pain_level,
        locations=_as_labels(locations),
        triggers=_as_labels(row.get("triggers")),
        medications=_as_medications(row.get("medications")),
        notes=row.get("notes") or None,
        journal_entry=row.get("journal_entry") or None,
        side_effects=row.get("side_effects") or None,
        rx_taken=bool(rx_taken) if rx_taken is not None else None,
        functional_impact=row.get("functional_impact") or None,
        impact_tags=_as_labels(row.get("impact_tags")),
        mood=row.get("mood") or None,
        activity=row.get("activity") or None,
        weather=row.get("weather") or None,
    )


def parse_entries(rows: Iterable[Mapping[str, Any]], tz: Optional[tzinfo] = None) -> list[PainLogEntry]:
    """Parse rows, silently dropping the ones parse_entry rejects."""
    entries = []
    for row in rows:
        entry = parse_entry(row, tz)
        if entry is not None:
            entries.append(entry)
    return entries


def sort_chronologically(entries: Iterable[PainLogEntry], tz: Optional[tzinfo] = None) -> list[PainLogEntry]:
    """Stable ascending sort by the instant each entry was logged."""
    return sorted(entries, key=lambda e: to_instant(e.logged_at, tz))


def with_pain_level(entries: Iterable[PainLogEntry]) -> list[PainLogEntry]:
    return [e for e in entries if e.pain_level is not None]
