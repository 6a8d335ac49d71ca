"""Typer CLI for running accessibility audits and regenerating reports."""
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer

from . import console, orchestrator, report, rules, targets as target_resolver
from .config import DEFAULT_CONFIG_FILE, ConfigError, load_config

# loading A11Y_AUDIT_* variables from .env file
from dotenv import load_dotenv
load_dotenv()

app = typer.Typer(add_completion=False)


@app.command()
def run(
    targets: Optional[List[str]] = typer.Argument(None, help="URLs or .html files to audit. When given, local pages and the sites file are ignored."),
    config_file: str = typer.Option(DEFAULT_CONFIG_FILE, "--config", help="Audit config YAML (optional)."),
    level: Optional[str] = typer.Option(None, envvar="A11Y_AUDIT_LEVEL", help="WCAG level: A, AA or AAA."),
    best_practice: Optional[bool] = typer.Option(None, "--best-practice/--no-best-practice", help="Include axe best-practice rules."),
    rules_: Optional[str] = typer.Option(None, "--rules", help="Comma-separated axe rule ids; overrides the WCAG tags."),
    screenshot: Optional[bool] = typer.Option(None, "--screenshot/--no-screenshot", help="Capture a highlighted screenshot and legend."),
    reports_dir: Optional[str] = typer.Option(None, envvar="A11Y_AUDIT_REPORTS_DIR", help="Output directory."),
    local_pages_dir: Optional[str] = typer.Option(None, help="Directory of local .html pages."),
    sites_file: Optional[str] = typer.Option(None, help="JSON list of sites."),
    tips_file: Optional[str] = typer.Option(None, help="JSON file with accessibility tips."),
    timeout: Optional[int] = typer.Option(None, envvar="A11Y_AUDIT_TIMEOUT_MS", help="Navigation timeout in milliseconds."),
    axe_source: Optional[str] = typer.Option(None, envvar="A11Y_AUDIT_AXE_SOURCE", help="URL or path of axe.min.js."),
    pdf: Optional[bool] = typer.Option(None, "--pdf/--no-pdf", help="Render the combined report as PDF."),
    headed: bool = typer.Option(False, "--headed", help="Show the browser window."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
):
    """Audit all resolved targets concurrently and write per-target and combined reports."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        cfg = load_config(
            Path(config_file),
            level=level,
            include_best_practice=best_practice,
            rule_ids=rules_,
            capture_screenshot=screenshot,
            reports_dir=reports_dir,
            local_pages_dir=local_pages_dir,
            sites_file=sites_file,
            tips_file=tips_file,
            timeout_ms=timeout,
            axe_source=axe_source,
            pdf=pdf,
            headless=False if headed else None,
        )
    except ConfigError as e:
        console.error(f"Configuration error: {e}")
        raise typer.Exit(code=1)

    console.welcome(Path(cfg.tips_file))
    resolved = target_resolver.resolve_targets(targets or [], Path(cfg.local_pages_dir), Path(cfg.sites_file))
    if not resolved:
        console.warning("No sites found for auditing.")
        raise typer.Exit(code=0)
    console.info("Detected sites for auditing:")
    typer.echo(", ".join(t.raw for t in resolved))

    selector = cfg.selector()
    if selector.rule_ids:
        console.info(f"Specific rules for audit: {', '.join(selector.rule_ids)}")
    if not cfg.capture_screenshot:
        console.info("Screenshot capture has been disabled.")

    try:
        paths = asyncio.run(orchestrator.audit_all(resolved, cfg, selector))
    except Exception as e:
        console.error(f"Error occurred: {e}")
        raise typer.Exit(code=1)

    console.success("All accessibility reports (HTML & JSON) have been generated successfully.")
    console.success(f"Combined report: {paths.get('html')}")
    if paths.get("pdf"):
        console.success(f"Combined PDF report generated at: {paths['pdf']}")


@app.command("report")
def report_cmd(
    combined_json: str = typer.Argument(..., help="combined_report_*.json from a previous run."),
    pdf: bool = typer.Option(False, "--pdf/--no-pdf", help="Also print the rebuilt report to PDF."),
):
    """Regenerate the combined HTML (and optionally PDF) report from a saved combined JSON."""
    src = Path(combined_json)
    try:
        combined = report.load_combined_report(src)
    except (OSError, ValueError) as e:
        console.error(f"Could not load {src}: {e}")
        raise typer.Exit(code=1)
    out_html = src.with_suffix(".rebuilt.html")
    out_html.write_text(report.render_combined_html(combined), encoding="utf-8")
    if pdf:
        pdf_path = asyncio.run(_rebuild_pdf(out_html))
        if pdf_path:
            typer.echo(f"PDF regenerated: {pdf_path}")
    typer.echo("Report regenerated.")


async def _rebuild_pdf(html_path: Path):
    from playwright.async_api import async_playwright
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            return await report.render_pdf(browser, html_path, html_path.with_suffix(".pdf"))
        finally:
            await browser.close()


@app.command()
def levels():
    """Explain the WCAG levels and the axe-core tags each one selects."""
    typer.echo("WCAG Levels Explanation:")
    for level, text in rules.LEVEL_DESCRIPTIONS.items():
        typer.echo(f"  Level {level} - {text}")
        typer.echo(f"    tags: {', '.join(rules.wcag_tags(level))}")
    console.info("Note: Level AA is mandated by the European Accessibility Act.")
    typer.echo("Rule ids: https://github.com/dequelabs/axe-core/blob/develop/doc/rule-descriptions.md")


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
