"""Closed variant-meta types shared by the ranker, classifier and composer.

Matched variants arrive from the rule evaluator as loosely shaped dicts.
Everything in this module is the single normalization boundary: after
`normalize_variant_meta` every consumer can rely on closed enum values.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any


class Tone(str, Enum):
    informational = "informational"
    cautionary = "cautionary"
    opportunity = "opportunity"
    stabilizing = "stabilizing"


# Declaration order is the rank order (lowest first).
class Dominance(str, Enum):
    background = "background"
    supporting = "supporting"
    dominant = "dominant"

    @property
    def rank(self) -> int:
        return list(Dominance).index(self) + 1


class ConfidenceLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

    @property
    def rank(self) -> int:
        return list(ConfidenceLevel).index(self) + 1


class GuidanceTag(str, Enum):
    expand = "expand"
    reduce_risk = "reduce_risk"
    stabilize = "stabilize"
    observe = "observe"


DEFAULT_TONE = Tone.informational
DEFAULT_DOMINANCE = Dominance.supporting
DEFAULT_CONFIDENCE = ConfidenceLevel.medium

GUIDANCE_BY_TONE: dict[Tone, GuidanceTag] = {
    Tone.opportunity: GuidanceTag.expand,
    Tone.cautionary: GuidanceTag.reduce_risk,
    Tone.stabilizing: GuidanceTag.stabilize,
    Tone.informational: GuidanceTag.observe,
}

# Symmetric: each pair is stored as an unordered set.
CONTRADICTORY_GUIDANCE: frozenset[frozenset[GuidanceTag]] = frozenset(
    {
        frozenset({GuidanceTag.expand, GuidanceTag.reduce_risk}),
    }
)


def _coerce_enum(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return default


def effect_payload(variant: Any) -> dict[str, Any]:
    if not isinstance(variant, dict):
        return {}
    for key in ("effect", "effect_json"):
        payload = variant.get(key)
        if isinstance(payload, dict):
            return payload
    return {}


def normalize_variant_meta(variant: Any) -> dict[str, Any]:
    """Return tone/dominance/confidence as enums and the raw certainty note.

    The certainty note is left untouched here; the composer sanitizes it
    before it is placed in output.
    """
    meta = effect_payload(variant).get("variant_meta")
    if not isinstance(meta, dict):
        meta = {}
    return {
        "tone": _coerce_enum(Tone, meta.get("tone"), DEFAULT_TONE),
        "dominance": _coerce_enum(Dominance, meta.get("dominance"), DEFAULT_DOMINANCE),
        "confidence_level": _coerce_enum(ConfidenceLevel, meta.get("confidence_level"), DEFAULT_CONFIDENCE),
        "certainty_note": meta.get("certainty_note"),
    }


def guidance_tag(tone: Tone) -> GuidanceTag:
    return GUIDANCE_BY_TONE.get(tone, GuidanceTag.observe)


def is_contradictory(tag_a: GuidanceTag | None, tag_b: GuidanceTag | None) -> bool:
    if tag_a is None or tag_b is None or tag_a == tag_b:
        return False
    return frozenset({tag_a, tag_b}) in CONTRADICTORY_GUIDANCE


def variant_score(variant: Any) -> float:
    score = variant.get("score") if isinstance(variant, dict) else None
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return 0
    if math.isnan(score):
        return 0
    return score


def point_code(variant: Any) -> str | None:
    if not isinstance(variant, dict):
        return None
    value = variant.get("point_code") or variant.get("pointCode")
    return str(value) if value else None


def variant_code(variant: Any) -> str | None:
    if not isinstance(variant, dict):
        return None
    value = variant.get("variant_code") or variant.get("code")
    return str(value) if value else None
