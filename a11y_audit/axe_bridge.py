"""Bridge for running axe-core inside a live Playwright page.

The API is intentionally small: ``analyze`` injects axe-core into an already
loaded page, runs it with the selector's ``runOnly`` filter and returns the
validated violations plus the raw JSON-compatible result.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Tuple

from .schema import AxeViolation, RuleSelector

AXE_CDN = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

AXE_RUN_SCRIPT = """
async (options) => {
  if (!window.axe || !window.axe.run) {
    return { error: 'axe-core not loaded' };
  }
  return await window.axe.run(document, options);
}
"""


class AxeError(RuntimeError):
    """The rule engine did not produce a usable result."""


async def inject(page, axe_source: str = AXE_CDN):
    if axe_source.startswith(("http://", "https://")):
        await page.add_script_tag(url=axe_source)
    else:
        await page.add_script_tag(path=str(Path(axe_source)))


async def analyze(page, selector: RuleSelector, axe_source: str = AXE_CDN) -> Tuple[List[AxeViolation], Dict[str, Any]]:
    await inject(page, axe_source)
    raw = await page.evaluate(AXE_RUN_SCRIPT, {"runOnly": selector.run_only()})
    if not isinstance(raw, dict):
        raise AxeError(f"Unexpected axe result type: {type(raw).__name__}")
    if raw.get("error"):
        raise AxeError(str(raw["error"]))
    violations = [AxeViolation.model_validate(v) for v in raw.get("violations") or []]
    if selector.rule_ids:
        allowed = set(selector.rule_ids)
        violations = [v for v in violations if v.id in allowed]
    return violations, raw


__all__ = ["AXE_CDN", "AxeError", "analyze", "inject"]
