"""Runtime order for the short-horizon path.

Evaluation (external) -> composer -> safety guard -> renderer (external).
"""

from __future__ import annotations

from typing import Any, Iterable

from prediction_core.output_safety_guard import guard_composer_output, guard_logger
from prediction_core.prediction_composer import compose_prediction


def build_composer_output_for_delivery(
    matched_variants: Iterable[Any] | None,
    *,
    domain: str = "general",
    composer_options: dict[str, Any] | None = None,
    logger: Any = guard_logger,
) -> dict[str, Any]:
    options = dict(composer_options or {})
    composer_output = compose_prediction(
        matched_variants,
        max_variants_per_domain=options.get("max_variants_per_domain", 3),
        include_background=bool(options.get("include_background", False)),
        include_low_confidence=bool(options.get("include_low_confidence", False)),
    )
    return guard_composer_output(composer_output, domain=domain, logger=logger)
