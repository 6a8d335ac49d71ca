"""Numbered highlighting of violating elements.

Each distinct rule id gets a sequence number in order of first appearance
(1-based). Every element matched by a violation's node locators is outlined
and gets a badge showing that number. An element that already carries a
badge is left alone, so an element flagged by several rules shows only the
number of the first one processed; the legend still lists every rule.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Sequence

from playwright.async_api import Error as PlaywrightError

from .schema import AxeViolation

logger = logging.getLogger(__name__)

HIGHLIGHT_CLASS = "a11y-violation-highlight"
BADGE_CLASS = "a11y-violation-number"
NO_DESCRIPTION = "No description available"

HIGHLIGHT_CSS = """
.a11y-violation-highlight {
  outline: 3px solid red !important;
  box-shadow: 0 0 10px red !important;
  position: relative;
}
.a11y-violation-number {
  position: absolute;
  background-color: black;
  color: yellow;
  width: 30px;
  height: 30px;
  border-radius: 50%;
  display: flex;
  justify-content: center;
  align-items: center;
  font-weight: bold;
  font-size: 16px;
  border: 2px solid white;
  top: 50%;
  left: 50%;
  transform: translate(-50%, -50%);
  z-index: 1000;
}
"""

# Returns the number of elements newly marked.
MARK_SCRIPT = """
(elements, number) => {
  let marked = 0;
  for (const el of elements) {
    if (el.querySelector(':scope > .a11y-violation-number')) {
      continue;
    }
    el.classList.add('a11y-violation-highlight');
    if (el.tagName.toLowerCase() === 'img') {
      el.style.display = 'inline-block';
    }
    el.style.position = 'relative';
    const badge = document.createElement('div');
    badge.classList.add('a11y-violation-number');
    badge.textContent = String(number);
    el.appendChild(badge);
    marked += 1;
  }
  return marked;
}
"""


def number_violations(violations: Sequence[AxeViolation]) -> Dict[str, int]:
    """Map each distinct rule id to its 1-based first-seen position."""
    numbering: Dict[str, int] = {}
    for v in violations:
        if v.id not in numbering:
            numbering[v.id] = len(numbering) + 1
    return numbering


def legend_lines(violations: Sequence[AxeViolation], numbering: Dict[str, int]) -> List[str]:
    descriptions: Dict[str, str] = {}
    for v in violations:
        descriptions.setdefault(v.id, v.description)
    return [
        f"{number}: {rule_id} - {descriptions.get(rule_id) or NO_DESCRIPTION}"
        for rule_id, number in sorted(numbering.items(), key=lambda x: x[1])
    ]


async def mark_violations(page, violations: Sequence[AxeViolation], numbering: Dict[str, int]) -> int:
    """Outline and badge every matched element; returns how many were marked."""
    await page.add_style_tag(content=HIGHLIGHT_CSS)
    marked = 0
    for v in violations:
        number = numbering[v.id]
        for node in v.nodes:
            for locator in node.locators():
                try:
                    marked += await page.eval_on_selector_all(locator, MARK_SCRIPT, number) or 0
                except PlaywrightError as e:
                    logger.debug("Skipping locator %r for %s: %s", locator, v.id, e)
    return marked


async def annotate(page, violations: Sequence[AxeViolation], screenshot_path: Path, legend_path: Path) -> Dict[str, int]:
    """Highlight violations, capture a full-page JPEG and write the legend file.

    Returns the rule id -> number mapping used for both.
    """
    numbering = number_violations(violations)
    marked = await mark_violations(page, violations, numbering)
    logger.debug("Marked %d elements for %d rules", marked, len(numbering))
    await page.screenshot(path=str(screenshot_path), full_page=True, type="jpeg", quality=60)
    legend = "\n".join(legend_lines(violations, numbering))
    await asyncio.to_thread(legend_path.write_text, legend, encoding="utf-8")
    return numbering


__all__ = [
    "BADGE_CLASS",
    "HIGHLIGHT_CLASS",
    "HIGHLIGHT_CSS",
    "MARK_SCRIPT",
    "annotate",
    "legend_lines",
    "mark_violations",
    "number_violations",
]
