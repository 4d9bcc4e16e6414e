"""
Medication-Effectiveness Pairer.

Pairs each dose-bearing log with the first later log 2-4 hours after it
(both ends inclusive, measured as elapsed time rather than wall-clock) and
records the change in pain level for every medication named on the dose
log. A negative mean delta means the pain went down after the dose.
"""

from dataclasses import dataclass, field
from datetime import timedelta, tzinfo
from typing import Iterable, Optional

from backend.painlog.analytics.entries import PainLogEntry, sort_chronologically, to_instant

PAIR_WINDOW_MIN = timedelta(hours=2)
PAIR_WINDOW_MAX = timedelta(hours=4)


@dataclass
class MedicationEffectiveness:
    name: str
    deltas: list[float] = field(default_factory=list)
    side_effect_count: int = 0
    rx_count: int = 0
    total_count: int = 0

    @property
    def sample_size(self) -> int:
        return len(self.deltas)

    @property
    def mean_delta(self) -> float:
        return sum(self.deltas) / len(self.deltas) if self.deltas else 0.0

    @property
    def side_effect_rate(self) -> Optional[float]:
        """Percentage of paired doses logged with side effects."""
        if self.total_count == 0:
            return None
        return self.side_effect_count / self.total_count * 100

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mean_delta": round(self.mean_delta, 2),
            "sample_size": self.sample_size,
            "side_effect_rate": (
                round(self.side_effect_rate, 1) if self.side_effect_rate is not None else None
            ),
            "rx_count": self.rx_count,
            "total_count": self.total_count,
        }


def _find_follow_up(
    ordered: list[PainLogEntry],
    index: int,
    tz: Optional[tzinfo],
) -> Optional[PainLogEntry]:
    """First later entry inside the pairing window, or None."""
    dose_time = to_instant(ordered[index].logged_at, tz)
    for candidate in ordered[index + 1:]:
        gap = to_instant(candidate.logged_at, tz) - dose_time
        if gap > PAIR_WINDOW_MAX:
            return None
        if gap >= PAIR_WINDOW_MIN:
            return candidate
    return None


def pair_medication_effects(
    entries: Iterable[PainLogEntry],
    tz: Optional[tzinfo] = None,
    dedupe_per_entry: bool = False,
) -> list[MedicationEffectiveness]:
    """
    Compute per-medication effectiveness from a set of logs.

    Input order does not matter; entries are sorted by logged_at first.
    Medications with no qualifying pair are left out of the result.
    With dedupe_per_entry, a name listed twice on one log counts once.
    """
    ordered = sort_chronologically(entries, tz)
    stats: dict[str, MedicationEffectiveness] = {}

    for index, entry in enumerate(ordered):
        if not entry.medications:
            continue

        follow_up = _find_follow_up(ordered, index, tz)
        if follow_up is None:
            continue
        if entry.pain_level is None or follow_up.pain_level is None:
            continue

        delta = follow_up.pain_level - entry.pain_level
        names = entry.medication_names
        if dedupe_per_entry:
            names = list(dict.fromkeys(names))

        for name in names:
            record = stats.get(name)
            if record is None:
                record = stats[name] = MedicationEffectiveness(name=name)
            record.deltas.append(delta)
            record.total_count += 1
            if entry.had_side_effects:
                record.side_effect_count += 1
            if entry.rx_taken is True:
                record.rx_count += 1

    return sort_by_effectiveness(stats.values())


def sort_by_effectiveness(records: Iterable[MedicationEffectiveness]) -> list[MedicationEffectiveness]:
    """Most effective (most negative mean delta) first. Stable and idempotent."""
    return sorted(records, key=lambda r: r.mean_delta)


def format_medication_line(record: MedicationEffectiveness) -> str:
    """e.g. 'Ibuprofen: -5.0 in 2-4h (n=1); side effects 0%'"""
    rate = record.side_effect_rate or 0.0
    sign = "-" if record.mean_delta < 0 else "+"
    return (
        f"{record.name}: {sign}{abs(record.mean_delta):.1f} in 2-4h "
        f"(n={record.sample_size}); side effects {rate:.0f}%"
    )
