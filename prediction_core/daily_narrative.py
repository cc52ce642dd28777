"""Daily narrative assembly (7-9 lines, 0-1 remedy).

Like the weekly narrative, every branch keys on discretized levels only.
"""

from __future__ import annotations

from typing import Any

from prediction_core.signal_aggregator import level3
from prediction_core.weekly_narrative import pick_rule

MIN_LINES = 7
MAX_LINES = 9

OPENING_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"pressure_level": "high", "emotional_noise": "high"},
        "Today feels heavier than it should; small things can feel oddly effortful.",
    ),
    (
        {"clarity_level": "high", "action_support": {"!=": "low"}},
        "Today has a clean, forward-moving tone; you can get real work done.",
    ),
    (
        {"emotional_noise": "high"},
        "Today can feel mentally noisy; your focus may drift even when you try to be steady.",
    ),
    ({"pressure_level": "high"}, "Today carries a quiet pressure; things move, but not at your preferred speed."),
    ({}, "Today is workable, but it rewards structure more than impulse."),
]

CONTINUITY_ANCHOR_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"pressure_level": "high"},
        "This day is part of a longer phase where effort is being tested before results stabilize.",
    ),
    (
        {"afflicted": True},
        "This day is part of a longer phase where effort is being tested before results stabilize.",
    ),
    (
        {"emotional_noise": "high"},
        "What you feel today connects to an ongoing period of inner recalibration, not a single event.",
    ),
    ({}, "Today connects to a longer stretch of building clarity through small, repeatable choices."),
]

FRICTION_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"afflicted": True},
        "Today has more friction than usual; energy leaks into sleep, mood, expenses, or small conflicts.",
    ),
    (
        {},
        "Today has a subtle tilt: either smoother focus or stickier effort, depending on how you pace yourself.",
    ),
]

PATTERN_LOOPING = "Pattern: looping thoughts, repeated checking, or the same topic circling without closure."
PATTERN_CLEAN = "Pattern: one clear task finishes cleanly when you don't split your attention."

RISK_ZONE_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"reaction_risk": "high"},
        "Risk zone: fast replies, sharp words, and quick commitments made just to reduce discomfort.",
    ),
    (
        {"reaction_risk": "medium"},
        "Risk zone: reacting to tone instead of content, especially in messages and small disagreements.",
    ),
    ({}, "Risk zone: over-correcting a small issue and wasting energy on perfection."),
]

WORSENS_HEAVY = (
    "Worsens: multitasking and forcing a big result. "
    "Helps: 3-step plan, simple wording, and delayed decisions that can wait."
)
WORSENS_LIGHT = (
    "Worsens: doing everything at once. "
    "Helps: one priority, clean boundaries, and a small pause before you respond."
)

BEST_USE_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"action_support": "high"},
        "Best use: finish one pending responsibility and close it fully; completion gives relief today.",
    ),
    (
        {"pressure_level": "high"},
        "Best use: do the minimum that keeps life clean; one task, one boundary, and a quieter pace.",
    ),
    ({}, "Positive channel: keep actions small but consistent; steady movement beats intensity today."),
]

CALM_CLOSE_RULES: list[tuple[dict[str, Any], str]] = [
    (
        {"emotional_noise": "high"},
        "Keep one calming routine fixed today; stability comes from repetition, not from perfect conditions.",
    ),
    ({}, "If you keep it simple, the day ends calmer than it begins and you feel more in control again."),
]

AVOID_RULES: list[tuple[dict[str, Any], str]] = [
    ({"reaction_risk": "high"}, "emotionally charged conversations"),
    ({"reaction_risk": "medium"}, "quick promises"),
    ({}, "over-fixing one small issue"),
]

DAILY_REMEDY = {
    "type": "meditation",
    "title": "Evening grounding (8 minutes)",
    "description": (
        "In the evening, do 8 minutes of slow breathing or a simple body-scan. "
        "It helps settle mental noise and reduces late-day reactivity."
    ),
    "frequency": "Once today (evening)",
    "duration": "8 minutes",
}


def daily_levels(vector_levels: dict[str, float]) -> dict[str, str]:
    """Discretize 0..1 signals (including risk) into the daily level names."""
    return {
        "pressure_level": level3(vector_levels.get("pressure")),
        "clarity_level": level3(vector_levels.get("clarity")),
        "emotional_noise": level3(vector_levels.get("noise")),
        "action_support": level3(vector_levels.get("action")),
        "reaction_risk": level3(vector_levels.get("risk")),
    }


def _good_for(levels: dict[str, str]) -> str:
    items: list[str] = []
    if levels.get("clarity_level") == "high" or levels.get("action_support") == "high":
        items.append("focused solo work")
    if levels.get("pressure_level") == "high":
        items.append("closing pending tasks")
    if not items:
        items.append("cleaning up small responsibilities")
    return ", ".join(items[:2])


def pick_daily_remedies(levels: dict[str, str]) -> list[dict[str, Any]]:
    needs = (
        levels.get("reaction_risk") == "high"
        or levels.get("clarity_level") == "low"
        or levels.get("pressure_level") == "high"
    )
    return [dict(DAILY_REMEDY)] if needs else []


def build_daily_narrative(levels: dict[str, str], *, afflicted: bool = False) -> dict[str, Any]:
    context = dict(levels)
    context["afflicted"] = bool(afflicted)

    looping = levels.get("clarity_level") == "low" or levels.get("emotional_noise") == "high"
    heavy = levels.get("clarity_level") == "low" or levels.get("pressure_level") == "high"

    lines = [
        pick_rule(OPENING_RULES, context),
        pick_rule(CONTINUITY_ANCHOR_RULES, context),
        pick_rule(FRICTION_RULES, context),
        PATTERN_LOOPING if looping else PATTERN_CLEAN,
        pick_rule(RISK_ZONE_RULES, context),
        WORSENS_HEAVY if heavy else WORSENS_LIGHT,
        f"{pick_rule(BEST_USE_RULES, context)} {pick_rule(CALM_CLOSE_RULES, context)}",
    ]
    decision = [
        f"Good for: {_good_for(levels)}",
        f"Avoid: {pick_rule(AVOID_RULES, context)}",
    ]
    lines = lines[: MAX_LINES - len(decision)] + decision

    return {
        "narrative": "\n".join(lines),
        "remedies": pick_daily_remedies(levels),
    }
