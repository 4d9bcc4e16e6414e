"""
Pattern summaries built on top of the bucketer and pairer.

Components:
- analyze_pain_patterns: compact analysis fed to the chat assistant
- contextual_suggestions: follow-up prompts offered after a chat reply
- summarize_functional_impact: how pain limited the user's days
- build_clinician_summary / render_clinician_summary: plain-text summary
  a user can hand to a clinician
"""

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Iterable, Mapping, Optional

from backend.painlog.analytics.bucketing import top_time_slots, top_weekdays
from backend.painlog.analytics.entries import PainLogEntry, local_date, with_pain_level
from backend.painlog.analytics.medications import format_medication_line, pair_medication_effects

ANALYSIS_WINDOW = 30
TREND_WINDOW = 7
TREND_THRESHOLD = 0.5
HIGH_PAIN_THRESHOLD = 7
SEVERE_DAY_THRESHOLD = 7
MAX_SUGGESTIONS = 4

TREND_INCREASING = "Increasing"
TREND_DECREASING = "Decreasing"
TREND_STABLE = "Stable"
TREND_NO_DATA = "No data available"

DEFAULT_SUGGESTIONS = [
    "How is my pain today?",
    "Log a pain entry",
    "Show my pain patterns",
    "Medication effectiveness review",
]

FALLBACK_SUGGESTIONS = [
    "How is my pain today?",
    "Log a pain entry",
    "Show my pain patterns",
    "Tell me about my medication effectiveness",
]


# =============================================================================
# CHAT ANALYSIS
# =============================================================================

@dataclass
class PainAnalysis:
    has_data: bool = False
    average_pain: float = 0.0
    top_locations: list[str] = field(default_factory=list)
    common_triggers: list[str] = field(default_factory=list)
    trend: str = TREND_NO_DATA
    insights: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _mean_level(entries: list[PainLogEntry]) -> Optional[float]:
    levels = [e.pain_level for e in entries if e.pain_level is not None]
    if not levels:
        return None
    return sum(levels) / len(levels)


def _most_common(values: Iterable[str], n: int) -> list[str]:
    return [value for value, _ in Counter(values).most_common(n)]


def _trend(recent: list[PainLogEntry]) -> str:
    recent_avg = _mean_level(recent[:TREND_WINDOW])
    older_avg = _mean_level(recent[TREND_WINDOW:TREND_WINDOW * 2])
    if recent_avg is None or older_avg is None:
        return TREND_STABLE
    if recent_avg > older_avg + TREND_THRESHOLD:
        return TREND_INCREASING
    if recent_avg < older_avg - TREND_THRESHOLD:
        return TREND_DECREASING
    return TREND_STABLE


def analyze_pain_patterns(history: Iterable[PainLogEntry]) -> PainAnalysis:
    """
    Summarize recent history for the assistant.

    `history` is expected newest first, as the chat context query returns
    it. Only the 30 most recent entries are considered. The trend compares
    the newest 7 entries against the 7 before them.
    """
    recent = list(history)[:ANALYSIS_WINDOW]
    if not recent:
        return PainAnalysis()

    average = _mean_level(recent) or 0.0
    top_locations = _most_common((loc for e in recent for loc in e.locations), 3)
    common_triggers = _most_common((t for e in recent for t in e.triggers), 3)
    trend = _trend(recent)

    insights = []
    if average > HIGH_PAIN_THRESHOLD:
        insights.append("High pain levels detected")
    if trend == TREND_INCREASING:
        insights.append("Pain levels trending upward")
    if trend == TREND_DECREASING:
        insights.append("Pain levels improving")
    if top_locations:
        insights.append(f"Most affected: {top_locations[0]}")

    return PainAnalysis(
        has_data=True,
        average_pain=average,
        top_locations=top_locations,
        common_triggers=common_triggers,
        trend=trend,
        insights=insights,
    )


def contextual_suggestions(
    message: str,
    profile: Optional[Mapping[str, Any]],
    analysis: PainAnalysis,
) -> list[str]:
    """Up to four follow-up prompts based on the message, profile and analysis."""
    suggestions = []
    lowered = message.lower()

    if "pain" in lowered and "log" not in lowered:
        suggestions.append("Log my current pain level")

    if analysis.has_data:
        if analysis.trend == TREND_INCREASING:
            suggestions.append("What's causing my pain to increase?")
        if analysis.common_triggers:
            suggestions.append(f"Tell me about my {analysis.common_triggers[0]} trigger")

    profile = profile or {}
    if profile.get("current_medications"):
        suggestions.append("How effective are my medications?")
    if profile.get("diagnosis"):
        suggestions.append(f"Tips for managing {profile['diagnosis']}")

    if not suggestions:
        suggestions = list(DEFAULT_SUGGESTIONS)

    return suggestions[:MAX_SUGGESTIONS]


# =============================================================================
# FUNCTIONAL IMPACT
# =============================================================================

# Checked in order; the first substring that matches sets the rank
IMPACT_RANKS = [
    ("bed", 4),
    ("stopped", 3),
    ("limited", 2),
    ("none", 1),
]


def impact_rank(label: str) -> int:
    lowered = label.lower()
    for keyword, rank in IMPACT_RANKS:
        if keyword in lowered:
            return rank
    return 0


@dataclass
class FunctionalImpactSummary:
    has_data: bool = False
    total_days: int = 0
    pct_limited: float = 0.0
    pct_stopped: float = 0.0
    pct_bed: float = 0.0
    top_tags: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "has_data": self.has_data,
            "total_days": self.total_days,
            "pct_limited": round(self.pct_limited, 1),
            "pct_stopped": round(self.pct_stopped, 1),
            "pct_bed": round(self.pct_bed, 1),
            "top_tags": [{"tag": tag, "count": count} for tag, count in self.top_tags],
        }


def summarize_functional_impact(
    entries: Iterable[PainLogEntry],
    top_n: int = 5,
    tz: Optional[tzinfo] = None,
) -> FunctionalImpactSummary:
    """
    Keep the most severe impact per calendar day, then report the share of
    days that were limited, stopped or spent in bed, plus the most frequent
    impact tags.
    """
    entries = list(entries)

    worst_by_day: dict = {}
    for entry in entries:
        if not entry.functional_impact:
            continue
        day = local_date(entry.logged_at, tz)
        impact = entry.functional_impact.lower()
        rank = impact_rank(impact)
        if day not in worst_by_day or rank > worst_by_day[day][1]:
            worst_by_day[day] = (impact, rank)

    tag_counts = Counter(tag for e in entries for tag in e.impact_tags)

    if not worst_by_day and not tag_counts:
        return FunctionalImpactSummary()

    total_days = len(worst_by_day)
    limited = stopped = bed = 0
    for impact, _ in worst_by_day.values():
        if "limited" in impact:
            limited += 1
        elif "stopped" in impact:
            stopped += 1
        elif "bed" in impact:
            bed += 1

    def pct(count: int) -> float:
        return count / total_days * 100 if total_days else 0.0

    return FunctionalImpactSummary(
        has_data=True,
        total_days=total_days,
        pct_limited=pct(limited),
        pct_stopped=pct(stopped),
        pct_bed=pct(bed),
        top_tags=tag_counts.most_common(top_n),
    )


# =============================================================================
# CLINICIAN SUMMARY
# =============================================================================

@dataclass
class ClinicianSummary:
    start: datetime
    end: datetime
    avg_daily_pain: float = 0.0
    total_days: int = 0
    severe_days: int = 0
    top_times: list[str] = field(default_factory=list)
    top_weekdays: list[str] = field(default_factory=list)
    pct_limited: float = 0.0
    pct_stopped: float = 0.0
    pct_bed: float = 0.0
    top_impact_tags: list[str] = field(default_factory=list)
    medication_lines: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["start"] = self.start.isoformat()
        data["end"] = self.end.isoformat()
        data["text"] = render_clinician_summary(self)
        return data


def build_clinician_summary(
    entries: Iterable[PainLogEntry],
    start: datetime,
    end: datetime,
    tz: Optional[tzinfo] = None,
) -> ClinicianSummary:
    entries = list(entries)
    summary = ClinicianSummary(start=start, end=end)
    if not entries:
        return summary

    summary.avg_daily_pain = _mean_level(entries) or 0.0

    daily_max: dict = {}
    for entry in entries:
        day = local_date(entry.logged_at, tz)
        daily_max.setdefault(day, 0)
        if entry.pain_level is not None:
            daily_max[day] = max(daily_max[day], entry.pain_level)
    summary.total_days = len(daily_max)
    summary.severe_days = sum(1 for level in daily_max.values() if level >= SEVERE_DAY_THRESHOLD)

    summary.top_times = top_time_slots(with_pain_level(entries), n=2, tz=tz)
    summary.top_weekdays = top_weekdays(with_pain_level(entries), n=2, tz=tz)

    impact = summarize_functional_impact(entries, top_n=3, tz=tz)
    summary.pct_limited = impact.pct_limited
    summary.pct_stopped = impact.pct_stopped
    summary.pct_bed = impact.pct_bed
    summary.top_impact_tags = [tag for tag, _ in impact.top_tags]

    summary.medication_lines = [
        format_medication_line(record)
        for record in pair_medication_effects(entries, tz=tz)
    ]
    return summary


def format_summary_date(moment: datetime) -> str:
    """'Jan 1, 2025' style date."""
    return f"{moment:%b} {moment.day}, {moment:%Y}"


def render_clinician_summary(summary: ClinicianSummary) -> str:
    """Plain-text summary suitable for copying or printing."""
    lines = [
        f"Summary ({format_summary_date(summary.start)} to {format_summary_date(summary.end)})",
        "",
        f"- Avg daily pain: {summary.avg_daily_pain:.1f}/10",
        f"- Severe days (>=7): {summary.severe_days} of {summary.total_days}",
        f"- Times of day most affected: {', '.join(summary.top_times) or 'None'}",
        f"- Weekdays most affected: {', '.join(summary.top_weekdays) or 'None'}",
        (
            f"- Functional impact: Limited {summary.pct_limited:.0f}%, "
            f"Stopped {summary.pct_stopped:.0f}%, Bed {summary.pct_bed:.0f}%"
        ),
        f"  Top factors: {', '.join(summary.top_impact_tags) or 'None'}",
        f"- Meds: {'; '.join(summary.medication_lines) or 'None tracked'}",
    ]
    return "\n".join(lines)
