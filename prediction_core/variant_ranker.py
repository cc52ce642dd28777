"""Deterministic ordering for matched prediction variants."""

from __future__ import annotations

from typing import Any, Iterable

from prediction_core.variant_meta import normalize_variant_meta, point_code, variant_code, variant_score


def variant_sort_key(variant: Any) -> tuple[int, int, float, str, str]:
    """Key for descending sort: dominance, confidence, score, point_code, variant_code."""
    meta = normalize_variant_meta(variant)
    return (
        meta["dominance"].rank,
        meta["confidence_level"].rank,
        variant_score(variant),
        point_code(variant) or "",
        variant_code(variant) or "",
    )


def rank_variants(matched_variants: Iterable[Any] | None) -> list[Any]:
    if matched_variants is None or isinstance(matched_variants, (str, bytes, dict)):
        return []
    try:
        variants = list(matched_variants)
    except TypeError:
        return []
    return sorted(variants, key=variant_sort_key, reverse=True)
