"""Concurrent audits over one shared Playwright browser."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

from playwright.async_api import async_playwright

from . import console, report, runner
from .config import AuditConfig
from .schema import AuditTarget, BatchResult, RuleSelector

logger = logging.getLogger(__name__)


async def run_batch(browser, targets: Sequence[AuditTarget], selector: RuleSelector, config: AuditConfig, stamp: Optional[str] = None) -> BatchResult:
    """Audit every target concurrently and wait for all of them to settle.

    Outcomes keep target order. Failed targets stay in the list with a
    zero-duration summary; only successful durations count toward the total.
    """
    stems = runner.report_stems(targets, stamp or runner.timestamp())
    results = await asyncio.gather(
        *[runner.audit_target(browser, t, selector, config, stem=s) for t, s in zip(targets, stems)],
        return_exceptions=True,
    )
    outcomes = []
    for target, r in zip(targets, results):
        if isinstance(r, BaseException):
            logger.error("Audit task for %s crashed: %r", target.location, r)
            console.error(f"Audit task for {target.location} crashed: {r}")
            continue
        if r is not None:
            outcomes.append(r)
    total = round(sum(o.summary.duration for o in outcomes if o.ok), 2)
    return BatchResult(outcomes=outcomes, total_duration=total)


async def audit_all(targets: Sequence[AuditTarget], config: AuditConfig, selector: Optional[RuleSelector] = None) -> Dict[str, Optional[str]]:
    """Launch the browser, run the batch and write the combined report.

    Returns the combined report paths (json/html/pdf).
    """
    selector = selector or config.selector()
    stamp = runner.timestamp()
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=config.headless)
        try:
            batch = await run_batch(browser, targets, selector, config, stamp=stamp)
            console.info(f"\nTotal test durations for all sites: {batch.total_duration:.2f} seconds")
            if batch.failures:
                console.warning(f"{len(batch.failures)} of {len(targets)} targets could not be audited.")
            combined = report.build_combined_report(batch.summaries, batch.total_duration)
            return await report.write_combined_report(
                combined,
                Path(config.reports_dir),
                f"combined_report_{stamp}",
                browser=browser if config.pdf else None,
            )
        finally:
            await browser.close()


__all__ = ["audit_all", "run_batch"]
