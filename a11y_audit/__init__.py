"""a11y_audit

Automated accessibility audits of websites and local pages.

Primary entrypoints:
 - cli.py (Typer CLI)
 - targets.py (target resolution + normalization)
 - orchestrator.py (concurrent per-target audits over one Playwright browser)
 - runner.py (single-target audit: navigation, axe-core, artifacts)
 - annotate.py (numbered violation highlighting + legend)
 - report.py (per-target and combined report rendering)
"""

__all__ = [
    "annotate",
    "orchestrator",
    "report",
    "runner",
    "targets",
]
