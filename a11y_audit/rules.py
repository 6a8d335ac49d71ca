"""WCAG conformance levels and the axe-core tag sets they select."""
from __future__ import annotations
from typing import Dict, List

from . import console

BEST_PRACTICE_TAG = "best-practice"
DEFAULT_LEVEL = "AA"

# Each level includes every tag of the levels below it.
WCAG_LEVELS: Dict[str, List[str]] = {
    "A": ["wcag2a", "wcag21a"],
    "AA": ["wcag2a", "wcag21a", "wcag2aa", "wcag21aa"],
    "AAA": ["wcag2a", "wcag21a", "wcag2aa", "wcag21aa", "wcag2aaa"],
}

LEVEL_DESCRIPTIONS: Dict[str, str] = {
    "A": "Basic accessibility requirements.",
    "AA": "Includes Level A and addresses more complex accessibility barriers.",
    "AAA": "Includes Levels A and AA, offering the highest standard of accessibility.",
}


def parse_level(value: str | None) -> str:
    """Normalize a user-supplied level, falling back to AA for unknown input."""
    level = (value or "").strip().upper()
    if level in WCAG_LEVELS:
        return level
    console.warning(f"Invalid level '{value}' - defaulting to {DEFAULT_LEVEL} level.")
    return DEFAULT_LEVEL


def wcag_tags(level: str, include_best_practice: bool = True) -> List[str]:
    """Return the axe-core tags for ``level``.

    The best-practice tag is appended unless the caller opts out.
    """
    tags = list(WCAG_LEVELS[parse_level(level)])
    if include_best_practice:
        tags.append(BEST_PRACTICE_TAG)
    return tags


def split_rule_ids(raw: str | None) -> List[str]:
    """Split a comma-separated rule id string, dropping blanks."""
    if not raw:
        return []
    return [r.strip() for r in raw.split(",") if r.strip()]


__all__ = [
    "BEST_PRACTICE_TAG",
    "DEFAULT_LEVEL",
    "LEVEL_DESCRIPTIONS",
    "WCAG_LEVELS",
    "parse_level",
    "split_rule_ids",
    "wcag_tags",
]
