from __future__ import annotations

import re
from typing import Any, Iterable

# Ordered; only the first pattern that matches is rewritten.
BANNED_LANGUAGE = [
    re.compile(r"\bguarantee(d)?\b", re.IGNORECASE),
    re.compile(r"\b100%", re.IGNORECASE),
    re.compile(r"\bcertain\b", re.IGNORECASE),
    re.compile(r"\bdefinitely\b", re.IGNORECASE),
    re.compile(r"\bmust(?= happen\b)", re.IGNORECASE),
    re.compile(r"\bwill(?= happen\b)", re.IGNORECASE),
    re.compile(r"\bfear\b", re.IGNORECASE),
    re.compile(r"\bterrible\b", re.IGNORECASE),
    re.compile(r"\bdisaster\b", re.IGNORECASE),
]

SOFTENED_REPLACEMENT = "may"

INFLUENCE_LABEL_PATTERNS = [
    re.compile(r"\b(sun|moon|mars|mercury|jupiter|venus|saturn|rahu|ketu)\b", re.IGNORECASE),
    re.compile(r"\b(maha|antar|pratyantar)?dasha\b", re.IGNORECASE),
    re.compile(r"\bsookshma\b", re.IGNORECASE),
    re.compile(r"\bnakshatra\b", re.IGNORECASE),
    re.compile(r"\bdusthana\b", re.IGNORECASE),
]


def sanitize_text(text: Any) -> str:
    """Soften the first banned absolute/fear phrase in `text`.

    Single pass: after the first match is rewritten the remaining text is
    returned as-is, even if it contains further banned phrases.
    """
    if not isinstance(text, str):
        return ""
    cleaned = text.strip()
    for pattern in BANNED_LANGUAGE:
        if pattern.search(cleaned):
            return pattern.sub(SOFTENED_REPLACEMENT, cleaned, count=1)
    return cleaned


def _scan(text: str, patterns: Iterable[re.Pattern]) -> list[dict[str, str]]:
    findings: list[dict[str, str]] = []
    for pattern in patterns:
        for match in pattern.finditer(text or ""):
            start = max(0, match.start() - 40)
            end = min(len(text), match.end() + 40)
            findings.append(
                {
                    "pattern": pattern.pattern,
                    "match": match.group(0),
                    "context": (text[start:end] or "").replace("\n", " "),
                }
            )
    return findings


def scan_banned_language(text: str) -> list[dict[str, str]]:
    return _scan(text, BANNED_LANGUAGE)


def scan_influence_labels(text: str) -> list[dict[str, str]]:
    """Find planet / period labels that must never reach user-facing text."""
    return _scan(text, INFLUENCE_LABEL_PATTERNS)
