"""
Chat analysis, suggestions, functional impact and clinician summary tests.
"""

from datetime import datetime, timedelta

from backend.painlog.analytics.patterns import (
    DEFAULT_SUGGESTIONS,
    TREND_DECREASING,
    TREND_INCREASING,
    TREND_NO_DATA,
    TREND_STABLE,
    PainAnalysis,
    analyze_pain_patterns,
    build_clinician_summary,
    contextual_suggestions,
    render_clinician_summary,
    summarize_functional_impact,
)


def _history(make_entry, levels, **kwargs):
    """Entries newest first, one per hour going back from a fixed time."""
    base = datetime(2025, 1, 20, 12, 0)
    return [
        make_entry((base - timedelta(hours=i)).isoformat(), level, **kwargs)
        for i, level in enumerate(levels)
    ]


# =============================================================================
# CHAT ANALYSIS
# =============================================================================

def test_analysis_of_empty_history():
    analysis = analyze_pain_patterns([])
    assert analysis.has_data is False
    assert analysis.trend == TREND_NO_DATA
    assert analysis.insights == []


def test_increasing_trend_and_high_pain_insights(make_entry):
    history = _history(make_entry, [9] * 7 + [6] * 7, locations=("Lower back",), triggers=("Lifting",))
    analysis = analyze_pain_patterns(history)

    assert analysis.has_data is True
    assert analysis.trend == TREND_INCREASING
    assert analysis.average_pain == 7.5
    assert analysis.top_locations == ["Lower back"]
    assert analysis.common_triggers == ["Lifting"]
    assert analysis.insights == [
        "High pain levels detected",
        "Pain levels trending upward",
        "Most affected: Lower back",
    ]


def test_decreasing_and_stable_trends(make_entry):
    assert analyze_pain_patterns(_history(make_entry, [2] * 7 + [5] * 7)).trend == TREND_DECREASING
    assert analyze_pain_patterns(_history(make_entry, [5] * 7 + [5] * 7)).trend == TREND_STABLE
    # Without older entries there is nothing to compare against
    assert analyze_pain_patterns(_history(make_entry, [9, 9, 9])).trend == TREND_STABLE


def test_analysis_uses_thirty_most_recent(make_entry):
    history = _history(make_entry, [2] * 30 + [10] * 10)
    assert analyze_pain_patterns(history).average_pain == 2.0


def test_suggestions_from_message_profile_and_analysis():
    analysis = PainAnalysis(has_data=True, trend=TREND_INCREASING, common_triggers=["Weather changes"])
    profile = {"diagnosis": "Migraine", "current_medications": [{"name": "Sumatriptan"}]}

    suggestions = contextual_suggestions("My pain is bad today", profile, analysis)
    assert suggestions == [
        "Log my current pain level",
        "What's causing my pain to increase?",
        "Tell me about my Weather changes trigger",
        "How effective are my medications?",
    ]


def test_default_suggestions_when_nothing_matches():
    assert contextual_suggestions("hello", None, PainAnalysis()) == DEFAULT_SUGGESTIONS
    # Mentioning logging suppresses the log suggestion
    assert contextual_suggestions("log my pain", {}, PainAnalysis()) == DEFAULT_SUGGESTIONS


# =============================================================================
# FUNCTIONAL IMPACT
# =============================================================================

def test_functional_impact_keeps_worst_per_day(make_entry):
    entries = [
        make_entry("2025-01-06T09:00", 5, functional_impact="limited", impact_tags=("work",)),
        make_entry("2025-01-06T18:00", 8, functional_impact="bed", impact_tags=("work", "sleep")),
        make_entry("2025-01-07T09:00", 4, functional_impact="limited"),
        make_entry("2025-01-08T09:00", 2, functional_impact="none"),
        make_entry("2025-01-09T09:00", 6, functional_impact="Stopped"),
    ]
    summary = summarize_functional_impact(entries)

    assert summary.has_data is True
    assert summary.total_days == 4
    assert summary.pct_bed == 25.0
    assert summary.pct_limited == 25.0
    assert summary.pct_stopped == 25.0
    assert summary.top_tags == [("work", 2), ("sleep", 1)]


def test_functional_impact_without_data(make_entry):
    summary = summarize_functional_impact([make_entry("2025-01-06T09:00", 5)])
    assert summary.has_data is False
    assert summary.total_days == 0


# =============================================================================
# CLINICIAN SUMMARY
# =============================================================================

def test_clinician_summary(make_entry):
    entries = [
        make_entry("2025-01-06T09:00", 8, meds=["Ibuprofen"], functional_impact="limited", impact_tags=("work",)),
        make_entry("2025-01-06T11:30", 3),
        make_entry("2025-01-07T20:00", 4, functional_impact="none"),
    ]
    summary = build_clinician_summary(entries, datetime(2025, 1, 6), datetime(2025, 1, 12))

    assert summary.avg_daily_pain == 5.0
    assert summary.total_days == 2
    assert summary.severe_days == 1
    assert summary.top_times == ["Morning", "Evening"]
    assert summary.top_weekdays == ["Monday", "Tuesday"]
    assert summary.pct_limited == 50.0
    assert summary.top_impact_tags == ["work"]
    assert summary.medication_lines == ["Ibuprofen: -5.0 in 2-4h (n=1); side effects 0%"]

    text = render_clinician_summary(summary)
    assert text.splitlines()[0] == "Summary (Jan 6, 2025 to Jan 12, 2025)"
    assert "- Severe days (>=7): 1 of 2" in text
    assert "- Meds: Ibuprofen: -5.0 in 2-4h (n=1); side effects 0%" in text


def test_empty_clinician_summary():
    summary = build_clinician_summary([], datetime(2025, 1, 6), datetime(2025, 1, 12))
    text = render_clinician_summary(summary)

    assert summary.total_days == 0
    assert "Times of day most affected: None" in text
    assert "Meds: None tracked" in text
