"""Post-condition check that composer output is never empty.

Sits after the composer and before any polishing / rendering layer. It
never retries evaluation and never rewrites output that passes; when both
headlines and supporting notes are empty it substitutes a neutral headline
and emits a soft warning `{domain, timestamp, reason}`.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

guard_logger = logging.getLogger("composer_guard")

SAFE_NEUTRAL_TEXT = "At this time, no strong signals stand out. This appears to be a neutral phase."
EMPTY_OUTPUT_REASON = "empty_composer_output"


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _emit_empty_output_warning(log: Any, domain: str) -> None:
    if log is None:
        return
    event = {
        "domain": domain,
        "timestamp": _utc_iso_now(),
        "reason": EMPTY_OUTPUT_REASON,
    }
    try:
        log.warning(json.dumps(event, ensure_ascii=False, sort_keys=True))
    except Exception:
        # Diagnostics are best-effort; the fallback is returned regardless.
        pass


def guard_composer_output(
    composer_output: Any,
    *,
    domain: str = "general",
    logger: Any = guard_logger,
) -> dict[str, Any]:
    payload = composer_output if isinstance(composer_output, dict) else {}
    headlines = _as_list(payload.get("headlines"))
    supporting_notes = _as_list(payload.get("supporting_notes"))

    if headlines or supporting_notes:
        return composer_output

    _emit_empty_output_warning(logger, domain)

    return {
        "applied_tone": "informational",
        "headlines": [
            {
                "domain": domain,
                "point_code": None,
                "variant_code": None,
                "dominance": "background",
                "confidence_level": "low",
                "tone": "informational",
                "score": 0,
                "certainty_note": None,
                "text": SAFE_NEUTRAL_TEXT,
            }
        ],
        "supporting_notes": [],
        "suppressed_variants": _as_list(payload.get("suppressed_variants")),
    }
