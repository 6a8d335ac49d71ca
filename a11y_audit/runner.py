"""Single-target audit: isolated browser context, axe-core run, artifacts."""
from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from . import annotate, axe_bridge, console, report
from .config import AuditConfig
from .schema import AuditOutcome, AuditSummary, AuditTarget, AxeViolation, RuleSelector

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d-%m-%Y_%H-%M"


def timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def report_stems(targets: Sequence[AuditTarget], stamp: str) -> List[str]:
    """File stems per target; repeated names get a numeric suffix.

    Example: [a, b, a] -> a_<stamp>, b_<stamp>, a_2_<stamp>
    """
    seen = {}
    stems = []
    for t in targets:
        seen[t.name] = seen.get(t.name, 0) + 1
        name = t.name if seen[t.name] == 1 else f"{t.name}_{seen[t.name]}"
        stems.append(f"{name}_{stamp}")
    return stems


def format_violation_list(violations: Sequence[AxeViolation]) -> str:
    return "\n".join(f"{i}. {v.id} - {v.description}" for i, v in enumerate(violations, start=1))


async def _audit_page(page, target: AuditTarget, selector: RuleSelector, config: AuditConfig, stem: str, started: float) -> AuditSummary:
    await page.goto(target.location, wait_until="networkidle", timeout=config.timeout_ms)
    violations, raw = await axe_bridge.analyze(page, selector, config.axe_source)

    out_dir = Path(config.reports_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    html_path = out_dir / f"{stem}.html"
    json_path = out_dir / f"{stem}.json"
    with report.captured_notices() as notices:
        html = report.render_violation_report(target, violations, selector, sink=notices.append)
    await report.write_bytes(html_path, html.encode("utf-8"))
    await report.write_bytes(json_path, report.encode_raw_results(raw))

    screenshot_path = legend_path = None
    if violations:
        if config.capture_screenshot:
            screenshot_path = out_dir / f"{stem}_highlight.jpg"
            legend_path = out_dir / f"{stem}_legend.txt"
            await annotate.annotate(page, violations, screenshot_path, legend_path)
            console.info(f"Screenshot saved: {screenshot_path}")
            console.info(f"Legend saved: {legend_path}")
        else:
            console.info("Screenshot capture skipped as per configuration.")

    total = len(violations)
    distinct = len({v.id for v in violations})
    console.success(f"\nAudit completed for: {target.location}")
    if total:
        console.error(f"The audit detected {total} violations across {distinct} distinct accessibility areas.")
    else:
        console.success("No accessibility violations found.")
    console.info("Note: Automated tests may not catch all issues; manual testing is required.")
    console.info("Reports generated:")
    console.info(f"   HTML: {html_path}")
    console.info(f"   JSON: {json_path}")

    duration = round(time.perf_counter() - started, 2)
    console.info(f"Test duration: {duration} seconds")
    console.separator()
    return AuditSummary(
        site=target.location,
        site_name=target.name,
        duration=duration,
        total_violations=total,
        distinct_areas=distinct,
        affected_nodes=sum(len(v.nodes) for v in violations),
        html_report_path=str(html_path),
        json_report_path=str(json_path),
        screenshot_path=str(screenshot_path) if screenshot_path else None,
        legend_path=str(legend_path) if legend_path else None,
        violation_list=format_violation_list(violations),
    )


async def audit_target(browser, target: AuditTarget, selector: RuleSelector, config: AuditConfig, stem: Optional[str] = None) -> AuditOutcome:
    """Audit one target in its own browser context.

    Never raises for per-target problems: navigation timeouts, network and
    evaluation errors come back as a failed outcome with a zero-duration summary.
    """
    started = time.perf_counter()
    stem = stem or f"{target.name}_{timestamp()}"
    context = page = None
    try:
        console.separator()
        console.header(f"Starting audit for: {target.location}")
        console.info(f"Audit settings: {selector.describe()}")
        context = await browser.new_context()
        page = await context.new_page()
        summary = await _audit_page(page, target, selector, config, stem, started)
        return AuditOutcome.success(target, summary)
    except Exception as e:
        reason = str(e).strip() or type(e).__name__
        console.error(f"Error auditing {target.location}: {reason}")
        logger.debug("Audit of %s failed", target.location, exc_info=True)
        return AuditOutcome.failure(target, reason)
    finally:
        await report.close_quietly(page, context)


__all__ = ["audit_target", "format_violation_list", "report_stems", "timestamp"]
