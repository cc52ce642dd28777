"""Coarse topic buckets used to cap and group composer output."""

from __future__ import annotations

from typing import Any

from prediction_core.variant_meta import effect_payload

DOMAINS = ["business", "career", "relationships", "health", "mind", "spiritual", "money", "general"]

# Order matters: area rules always win over theme rules.
AREA_RULES: list[tuple[tuple[str, ...], str]] = [
    (("business",), "business"),
    (("job", "income"), "career"),
]

THEME_RULES: list[tuple[str, str]] = [
    ("career", "career"),
    ("relationship", "relationships"),
    ("health", "health"),
    ("mental", "mind"),
    ("spiritual", "spiritual"),
    ("money", "money"),
]


def _lowered(value: Any) -> str:
    if value is None:
        return ""
    return str(value).lower()


def classify_domain(variant: Any) -> str:
    effect = effect_payload(variant)
    area = _lowered(effect.get("area"))
    theme = _lowered(effect.get("theme"))

    for needles, domain in AREA_RULES:
        if any(needle in area for needle in needles):
            return domain
    for needle, domain in THEME_RULES:
        if needle in theme:
            return domain
    return theme or "general"
