"""Monthly narrative assembly (10-12 lines, 0-1 remedy).

Planning-grade sibling of the weekly assembler. Branches on discretized
monthly levels; the opening line is one of three phrasings picked by a
stable seed, so the same month and period lords always read the same.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from prediction_core.signal_aggregator import peak_pressure_day, peak_support_day
from prediction_core.weekly_narrative import pick_rule

MIN_LINES = 10
MAX_LINES = 12

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619

OPENING_VARIANTS: list[tuple[dict[str, Any], list[str]]] = [
    (
        {"monthly_pressure": "high", "monthly_clarity": {"!=": "high"}},
        [
            "This month rewards patience and planning more than speed.",
            "This month starts heavier; {weekday} sets a serious tone, so plan before you push.",
            "This month rewards structure; rushing creates avoidable friction.",
        ],
    ),
    (
        {"monthly_action_flow": "high"},
        [
            "This month supports progress when you keep priorities clean.",
            "This month supports momentum; {weekday} begins clearer, so finish what you start.",
            "This month moves best with one clean priority per week; execution beats overthinking.",
        ],
    ),
    (
        {},
        [
            "This month moves in waves; it stays steady if you keep your plan simple.",
            "This month moves in waves; {weekday} starts mixed, so simplify the plan and you'll feel steadier.",
            "This month is workable, but it rewards timing and a smaller plan.",
        ],
    ),
]

TONE_RULES: list[tuple[dict[str, Any], str]] = [
    ({"monthly_emotional_volatility": "high"}, "The emotional tone can swing; clarity returns when routine stays steady."),
    ({"monthly_support": "high"}, "Support is present; things feel more cooperative when you act with clarity."),
    ({}, "Overall tone is mixed: workable, but it rewards structure and timing."),
]

CONTINUITY_ANCHOR_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"monthly_pressure": "high"},
        "This month is part of a longer phase where effort is being tested before results stabilize.",
    ),
    (
        {"monthly_emotional_volatility": "high"},
        "What repeats this month connects to an ongoing period of inner recalibration, not a single event.",
    ),
    ({}, "This month connects to a longer stretch of building stability through small, repeatable choices."),
]

RISK_RULES: list[tuple[dict[str, Any], str]] = [
    ({"monthly_emotional_volatility": "high"}, "emotional reactivity and rushed messages can derail momentum"),
    ({"monthly_pressure": "high"}, "overcommitting early can create avoidable stress later"),
    ({}, "scattered attention is the main leak this month"),
]

STABILIZER_RULES: list[tuple[dict[str, Any], str]] = [
    ({"monthly_pressure": "high"}, "one clear plan, fewer promises, and protecting sleep"),
    ({"monthly_clarity": "low"}, "writing decisions down and keeping conversations short and factual"),
    ({}, "steady routine and finishing what you start"),
]

DIRECTION_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"monthly_action_flow": "high"},
        "Monthly direction: plan for completion; close pending loops instead of starting new battles.",
    ),
    ({"monthly_pressure": "high"}, "Monthly direction: plan for stability; reduce friction first, then chase outcomes."),
    ({}, "Monthly direction: plan for rhythm; one priority per week beats intensity."),
]

FOCUS_ON_RULES: list[tuple[dict[str, Any], str]] = [
    ({"monthly_clarity": "high"}, "focused work, clean communication"),
    ({"monthly_pressure": "high"}, "closing pending tasks, protecting routine"),
    ({}, "small wins, steady rhythm"),
]

AVOID_RULES: list[tuple[dict[str, Any], str]] = [
    ({"monthly_emotional_volatility": "high"}, "emotionally charged conversations"),
    ({"monthly_pressure": "high"}, "taking on extra commitments"),
    ({}, "trying to fix everything at once"),
]

DEFAULT_MID_MONTH_SHIFT = "Mid-month shift: the month changes when you simplify the plan, not when you push harder."

MONTHLY_REMEDY = {
    "type": "meditation",
    "title": "One steady routine (this month)",
    "description": (
        "Keep one routine fixed all month: sleep timing, a short walk, or an evening wind-down. "
        "Consistency reduces mental noise more than adding new effort."
    ),
    "frequency": "Daily (light)",
    "duration": None,
}


def opening_seed(first_day: date, period_names: Sequence[Any] = ()) -> int:
    """32-bit FNV-1a over the month start and the active period names."""
    text = "|".join([first_day.isoformat(), *("" if name is None else str(name) for name in period_names)])
    h = FNV_OFFSET_BASIS
    for ch in text:
        h ^= ord(ch)
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


def pick_opening(signals: dict[str, Any], seed: int, weekday: str) -> str:
    branch = pick_rule([(conditions, index) for index, (conditions, _) in enumerate(OPENING_VARIANTS)], signals)
    choices = OPENING_VARIANTS[branch][1]
    return choices[abs(int(seed)) % len(choices)].format(weekday=weekday)


def pick_monthly_remedies(signals: dict[str, Any]) -> list[dict[str, Any]]:
    needs = signals.get("monthly_emotional_volatility") == "high" or signals.get("monthly_pressure") == "high"
    return [dict(MONTHLY_REMEDY)] if needs else []


def build_monthly_narrative(
    daily: Sequence[dict[str, Any]],
    signals: dict[str, Any],
    *,
    first_day: date,
    seed: int = 0,
    mid_month_transition: date | None = None,
) -> dict[str, Any]:
    peak = peak_pressure_day(daily)
    support = peak_support_day(daily)
    peak_text = peak["date"] if peak else first_day.isoformat()
    support_text = support["date"] if support else first_day.isoformat()

    if mid_month_transition:
        mid_shift = (
            f"Mid-month shift: after {mid_month_transition.isoformat()}, the month feels different; "
            "less stuck, more responsive to small actions."
        )
    else:
        mid_shift = DEFAULT_MID_MONTH_SHIFT

    lines = [
        pick_opening(signals, seed, first_day.strftime("%A")),
        pick_rule(TONE_RULES, signals),
        pick_rule(CONTINUITY_ANCHOR_RULES, signals),
        f"Pressure pattern: heavier around {peak_text}.",
        f"Support window: smoother flow around {support_text}.",
        mid_shift,
        f"Risk pattern: {pick_rule(RISK_RULES, signals)}.",
        f"Stabilizer: {pick_rule(STABILIZER_RULES, signals)}.",
        pick_rule(DIRECTION_RULES, signals),
    ]
    decision = [
        f"Focus on: {pick_rule(FOCUS_ON_RULES, signals)}",
        f"Avoid: {pick_rule(AVOID_RULES, signals)}",
    ]
    lines = lines[: MAX_LINES - len(decision)] + decision

    return {
        "narrative": "\n".join(lines),
        "remedies": pick_monthly_remedies(signals),
    }
