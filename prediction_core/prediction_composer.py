"""Deterministic prediction composer.

Turns already-matched variants into headlines, supporting notes and a
suppressed list. It does not evaluate astrology conditions, change scores,
pick remedies or invent new predictions; it only selects, caps and words
what the evaluator matched.

Output shape::

    {
        "headlines": [...],
        "supporting_notes": [...],
        "suppressed_variants": [...],
        "applied_tone": "opportunity" | ... | None,
    }
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from prediction_core.domain_classifier import classify_domain
from prediction_core.text_sanitizer import sanitize_text
from prediction_core.variant_meta import (
    Dominance,
    ConfidenceLevel,
    GuidanceTag,
    Tone,
    guidance_tag,
    is_contradictory,
    normalize_variant_meta,
    point_code,
    variant_code,
    variant_score,
)
from prediction_core.variant_ranker import rank_variants

logger = logging.getLogger("prediction_composer")

DEFAULT_MAX_VARIANTS_PER_DOMAIN = 3
MIN_VARIANTS_PER_DOMAIN = 2
MAX_VARIANTS_PER_DOMAIN = 4

REASON_BACKGROUND = "background_variant_suppressed_by_default"
REASON_LOW_CONFIDENCE = "low_confidence_suppressed_by_default"
REASON_CONTRADICTION = "contradictory_dominant_suppressed"
REASON_DOMAIN_LIMIT = "domain_limit_reached_max_{limit}"

HEADLINE_TEMPLATES: dict[Tone, str] = {
    Tone.opportunity: "[{domain}] An opportunity signal is active; you may benefit from focused action and follow-through.",
    Tone.cautionary: "[{domain}] A caution signal is active; consider risk-control, buffers, and slower commitments.",
    Tone.stabilizing: "[{domain}] A stabilizing signal is active; stepwise structure and clear agreements can help.",
    Tone.informational: "[{domain}] A neutral signal is present; observe trends and proceed steadily.",
}

SUPPORTING_NOTE_TEMPLATES: dict[Tone, str] = {
    Tone.opportunity: "[{domain}] Supportive nuance: act on what is already working, keep execution simple.",
    Tone.cautionary: "[{domain}] Caution nuance: double-check assumptions and avoid rushed decisions.",
    Tone.stabilizing: "[{domain}] Stabilizing nuance: clarify roles, reduce ambiguity, and prefer documented steps.",
    Tone.informational: "[{domain}] Informational nuance: keep awareness and avoid over-interpreting small changes.",
}


def clamp_max_variants_per_domain(value: Any) -> int:
    if isinstance(value, bool):
        value = None
    try:
        limit = int(float(value))
    except (TypeError, ValueError, OverflowError):
        limit = 0
    if limit == 0:
        limit = DEFAULT_MAX_VARIANTS_PER_DOMAIN
    return max(MIN_VARIANTS_PER_DOMAIN, min(MAX_VARIANTS_PER_DOMAIN, limit))


def _suppressed_entry(variant: Any, meta: dict[str, Any], domain: str, reason: str) -> dict[str, Any]:
    return {
        "point_code": point_code(variant),
        "variant_code": variant_code(variant),
        "domain": domain,
        "dominance": meta["dominance"].value,
        "confidence_level": meta["confidence_level"].value,
        "tone": meta["tone"].value,
        "score": variant_score(variant),
        "reason": reason,
    }


def _emitted_entry(variant: Any, meta: dict[str, Any], domain: str, template: str) -> dict[str, Any]:
    return {
        "domain": domain,
        "point_code": point_code(variant),
        "variant_code": variant_code(variant),
        "dominance": meta["dominance"].value,
        "confidence_level": meta["confidence_level"].value,
        "tone": meta["tone"].value,
        "score": variant_score(variant),
        "certainty_note": sanitize_text(meta["certainty_note"]) or None,
        "text": sanitize_text(template.format(domain=domain)),
    }


def compose_prediction(
    matched_variants: Iterable[Any] | None = None,
    *,
    max_variants_per_domain: Any = DEFAULT_MAX_VARIANTS_PER_DOMAIN,
    include_background: bool = False,
    include_low_confidence: bool = False,
) -> dict[str, Any]:
    """Compose headlines / supporting notes from matched variants.

    Variants are ranked first, so callers may pass them in any order.
    Every input variant ends up in exactly one of headlines,
    supporting_notes or suppressed_variants.
    """
    max_per_domain = clamp_max_variants_per_domain(max_variants_per_domain)

    headlines: list[dict[str, Any]] = []
    supporting_notes: list[dict[str, Any]] = []
    suppressed: list[dict[str, Any]] = []

    domain_counts: dict[str, int] = {}
    domain_headline_tags: dict[str, set[GuidanceTag]] = {}

    for variant in rank_variants(matched_variants):
        meta = normalize_variant_meta(variant)
        domain = classify_domain(variant)
        dominance: Dominance = meta["dominance"]

        if dominance == Dominance.background and not include_background:
            suppressed.append(_suppressed_entry(variant, meta, domain, REASON_BACKGROUND))
            continue

        if meta["confidence_level"] == ConfidenceLevel.low and not include_low_confidence:
            suppressed.append(_suppressed_entry(variant, meta, domain, REASON_LOW_CONFIDENCE))
            continue

        used = domain_counts.get(domain, 0)
        if used >= max_per_domain:
            suppressed.append(
                _suppressed_entry(variant, meta, domain, REASON_DOMAIN_LIMIT.format(limit=max_per_domain))
            )
            continue

        tag = guidance_tag(meta["tone"])
        if dominance == Dominance.dominant and any(
            is_contradictory(existing, tag) for existing in domain_headline_tags.get(domain, set())
        ):
            suppressed.append(_suppressed_entry(variant, meta, domain, REASON_CONTRADICTION))
            continue

        if dominance == Dominance.dominant:
            headlines.append(_emitted_entry(variant, meta, domain, HEADLINE_TEMPLATES[meta["tone"]]))
            domain_headline_tags.setdefault(domain, set()).add(tag)
        else:
            supporting_notes.append(_emitted_entry(variant, meta, domain, SUPPORTING_NOTE_TEMPLATES[meta["tone"]]))

        domain_counts[domain] = used + 1

    logger.debug(
        "composed headlines=%d supporting=%d suppressed=%d max_per_domain=%d",
        len(headlines),
        len(supporting_notes),
        len(suppressed),
        max_per_domain,
    )

    return {
        "headlines": headlines,
        "supporting_notes": supporting_notes,
        "suppressed_variants": suppressed,
        "applied_tone": headlines[0]["tone"] if headlines else None,
    }
