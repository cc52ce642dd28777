"""Weekly narrative assembly (8-12 lines, 0-1 remedy).

Branches only on discretized weekly levels. Period lords, nakshatras and
house labels never appear in the text.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from prediction_core.signal_aggregator import peak_pressure_day, peak_support_day

MIN_LINES = 8
MAX_LINES = 12

# Ordered rule tables: first entry whose conditions all hold wins; the last
# entry has no conditions and always matches.
OPENING_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"weekly_pressure": "high", "weekly_clarity": {"!=": "high"}},
        "This week tests patience and planning more than speed.",
    ),
    ({"weekly_action_flow": "high"}, "This week is productive when you keep your priorities clean."),
    ({}, "This week moves in waves; it stays steady if you don't chase everything at once."),
]

TONE_RULES: list[tuple[dict[str, Any], str]] = [
    ({"weekly_emotional_volatility": "high"}, "The emotional tone can swing; focus returns when routine stays steady."),
    ({"weekly_support": "high"}, "Support is present; things feel more cooperative when you act with clarity."),
    ({}, "Overall tone is mixed: workable, but it rewards structure and timing."),
]

CONTINUITY_ANCHOR_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"weekly_pressure": "high"},
        "This week is part of a longer phase where effort is being tested before results stabilize.",
    ),
    (
        {"weekly_emotional_volatility": "high"},
        "What repeats this week connects to an ongoing period of inner recalibration, not a single event.",
    ),
    ({}, "This week connects to a longer stretch of building stability through small, repeatable choices."),
]

RISK_RULES: list[tuple[dict[str, Any], str]] = [
    ({"weekly_emotional_volatility": "high"}, "emotional reactivity and rushed messages can derail momentum"),
    ({"weekly_pressure": "high"}, "overcommitting early can create avoidable stress later"),
    ({}, "scattered attention is the main leak this week"),
]

STABILIZER_RULES: list[tuple[dict[str, Any], str]] = [
    ({"weekly_pressure": "high"}, "one clear plan, fewer promises, and protecting sleep"),
    ({"weekly_clarity": "low"}, "writing decisions down and keeping conversations short and factual"),
    ({}, "steady routine and finishing what you start"),
]

DIRECTION_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"weekly_action_flow": "high"},
        "Weekly direction: plan for completion; close pending loops instead of starting new battles.",
    ),
    ({"weekly_pressure": "high"}, "Weekly direction: plan for stability; reduce friction first, then chase outcomes."),
    ({}, "Weekly direction: plan for rhythm; one priority per day beats intensity."),
]

# Keyed by (weekly_clarity, weekly_pressure).
FOCUS_ON_RULES: list[tuple[dict[str, Any], str]] = [
    ({"weekly_clarity": "high"}, "focused work, clean communication"),
    ({"weekly_pressure": "high"}, "closing pending tasks, protecting routine"),
    ({}, "small wins, steady rhythm"),
]

# Keyed by (weekly_emotional_volatility, weekly_pressure).
AVOID_RULES: list[tuple[dict[str, Any], str]] = [
    ({"weekly_emotional_volatility": "high"}, "emotionally charged conversations"),
    ({"weekly_pressure": "high"}, "taking on extra commitments"),
    ({}, "trying to fix everything at once"),
]

DEFAULT_MID_WEEK_SHIFT = "Mid-week shift: the week changes when you simplify the plan, not when you push harder."

WEEKLY_REMEDY = {
    "type": "meditation",
    "title": "One steady routine (this week)",
    "description": (
        "Keep one routine fixed all week: sleep timing, a short walk, or an evening wind-down. "
        "Consistency reduces mental noise more than adding new effort."
    ),
    "frequency": "Daily (light)",
    "duration": None,
}


def _conditions_hold(signals: dict[str, Any], conditions: dict[str, Any]) -> bool:
    for key, expected in conditions.items():
        actual = signals.get(key)
        if isinstance(expected, dict):
            if "!=" in expected and actual == expected["!="]:
                return False
        elif actual != expected:
            return False
    return True


def pick_rule(rules: Sequence[tuple[dict[str, Any], str]], signals: dict[str, Any]) -> str:
    for conditions, text in rules:
        if _conditions_hold(signals, conditions):
            return text
    return rules[-1][1]


def continuity_anchor(signals: dict[str, Any]) -> str:
    return pick_rule(CONTINUITY_ANCHOR_RULES, signals)


def pick_weekly_remedies(signals: dict[str, Any]) -> list[dict[str, Any]]:
    """At most one remedy, only for high pressure or high volatility weeks."""
    needs = signals.get("weekly_emotional_volatility") == "high" or signals.get("weekly_pressure") == "high"
    if not needs:
        return []
    return [dict(WEEKLY_REMEDY)]


def _date_text(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value) if value else "the middle of the week"


def _peak_date(day: dict[str, Any] | None) -> Any:
    return day.get("date") if day else None


def build_weekly_narrative(
    daily: Sequence[dict[str, Any]],
    signals: dict[str, Any],
    peak_pressure_date: Any = None,
    peak_support_date: Any = None,
    mid_week_transition: date | str | None = None,
) -> dict[str, Any]:
    """Assemble the weekly narrative and its remedy list.

    Peak dates not passed in are taken from `daily` (first maximum wins).
    Every other line branches on the discretized `signals` only.
    """
    peak_pressure_date = peak_pressure_date or _peak_date(peak_pressure_day(daily))
    peak_support_date = peak_support_date or _peak_date(peak_support_day(daily))

    if mid_week_transition:
        mid_shift = (
            f"Mid-week shift: after {_date_text(mid_week_transition)}, the week feels different; "
            "less stuck, more responsive to small actions."
        )
    else:
        mid_shift = DEFAULT_MID_WEEK_SHIFT

    lines = [
        pick_rule(OPENING_RULES, signals),
        pick_rule(TONE_RULES, signals),
        continuity_anchor(signals),
        f"Pressure pattern: heavier around {_date_text(peak_pressure_date)}.",
        f"Support window: smoother flow around {_date_text(peak_support_date)}.",
        mid_shift,
        f"Risk pattern: {pick_rule(RISK_RULES, signals)}.",
        f"Stabilizer: {pick_rule(STABILIZER_RULES, signals)}.",
        pick_rule(DIRECTION_RULES, signals),
    ]
    # Decision lines are always last.
    decision = [
        f"Focus on: {pick_rule(FOCUS_ON_RULES, signals)}",
        f"Avoid: {pick_rule(AVOID_RULES, signals)}",
    ]
    lines = lines[: MAX_LINES - len(decision)] + decision

    return {
        "narrative": "\n".join(lines),
        "remedies": pick_weekly_remedies(signals),
    }
