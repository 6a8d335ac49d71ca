"""HTML, JSON and PDF reporting for audit runs."""
import asyncio
import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import orjson
import typer
from jinja2 import Template

from .schema import AuditSummary, AuditTarget, AxeViolation, CombinedReport, RuleSelector

logger = logging.getLogger(__name__)

NO_VIOLATIONS = "No violations detected."
NOT_AVAILABLE = "n/a"

VIOLATIONS_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8" />
<title>Accessibility Report: {{ target.name }}</title>
<style>
body { font-family: system-ui, sans-serif; line-height:1.4; }
table { border-collapse: collapse; width: 100%; }
th, td { border:1px solid #ccc; padding:4px 6px; vertical-align: top; }
th { background:#f2f2f2; }
.badge-fail { background:#a00; color:#fff; padding:2px 6px; border-radius:4px; }
.badge-pass { background:#007c00; color:#fff; padding:2px 6px; border-radius:4px; }
code { font-size: 0.85rem; }
header, main, footer { max-width: 1200px; margin: 0 auto; }
details { border: 1px solid #ccc; border-radius: 4px; padding: 0.5rem; margin-bottom: 1rem; }
details summary { cursor: pointer; }
</style>
</head>
<body>
<header>
<h1>Accessibility Report</h1>
<p>Target: <a href="{{ target.location }}">{{ target.location }}</a></p>
<p>Generated on: {{ generated_at }}</p>
<p>{{ selector.describe() }}</p>
</header>
<main id="main">
<section aria-labelledby="summary-h2">
<h2 id="summary-h2">Summary</h2>
{% if violations %}
<p><span class="badge-fail">{{ violations|length }}</span> violations across {{ distinct }} distinct rules ({{ affected }} affected elements).</p>
<table>
<caption>Violations in order reported by axe-core</caption>
<thead><tr><th>#</th><th>Rule</th><th>Impact</th><th>Description</th><th>Elements</th></tr></thead>
<tbody>
{% for v in violations %}
<tr>
  <td>{{ loop.index }}</td>
  <td>{% if v.helpUrl %}<a href="{{ v.helpUrl }}">{{ v.id }}</a>{% else %}{{ v.id }}{% endif %}</td>
  <td>{{ v.impact or 'n/a' }}</td>
  <td>{{ v.description }}</td>
  <td>{{ v.nodes|length }}</td>
</tr>
{% endfor %}
</tbody>
</table>
{% else %}
<p><span class="badge-pass">0</span> No accessibility violations found.</p>
{% endif %}
</section>
{% if violations %}
<section aria-labelledby="details-h2">
<h2 id="details-h2">Details</h2>
{% for v in violations %}
<details>
  <summary><strong>{{ loop.index }}. {{ v.id }}</strong> ({{ v.impact or 'n/a' }}): {{ v.help or v.description }}</summary>
  <ul>
  {% for n in v.nodes %}
    <li><code>{{ n.target|join(', ') }}</code>{% if n.html %}<pre>{{ n.html }}</pre>{% endif %}</li>
  {% endfor %}
  </ul>
</details>
{% endfor %}
</section>
{% endif %}
<p>Note: automated tests may not catch all issues; manual testing is required.</p>
</main>
</body>
</html>
"""

COMBINED_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8" />
<title>Accessibility Audit Summary Report</title>
<style>
body { font-family: system-ui, sans-serif; line-height:1.4; margin: 0 2rem; }
h1, .generated, .total { text-align: center; }
section { border-bottom: 1px solid #000; padding-bottom: 1rem; margin-bottom: 1rem; }
section h2 { color: #1a4fb0; text-decoration: underline; font-size: 1.2rem; }
dl { display: grid; grid-template-columns: max-content auto; gap: 0 1rem; }
dt { font-weight: bold; }
.failed { color: #a00; }
pre { white-space: pre-wrap; font-size: 0.85rem; }
.total { color: #007c00; font-size: 1.2rem; }
</style>
</head>
<body>
<h1>Accessibility Audit Summary Report</h1>
<p class="generated">Generated on: {{ generated_at }}</p>
{% for s in sections %}
<section>
  <h2>Site: {{ s.site }}</h2>
  {% if s.error %}<p class="failed">Audit failed: {{ s.error }}</p>{% endif %}
  <dl>
    <dt>Host</dt><dd>{{ s.site_name }}</dd>
    <dt>Test Duration</dt><dd>{{ s.duration }} seconds</dd>
    <dt>Total Violations</dt><dd>{{ s.total_violations }}</dd>
    <dt>Distinct Areas</dt><dd>{{ s.distinct_areas }}</dd>
    <dt>HTML Report</dt><dd>{{ s.html_report_path }}</dd>
    <dt>JSON Report</dt><dd>{{ s.json_report_path }}</dd>
    {% if s.screenshot_path %}<dt>Screenshot</dt><dd>{{ s.screenshot_path }}</dd>{% endif %}
    {% if s.legend_path %}<dt>Legend</dt><dd>{{ s.legend_path }}</dd>{% endif %}
  </dl>
  <h3>Violations:</h3>
  <pre>{{ s.violation_list }}</pre>
</section>
{% endfor %}
<p class="total">Total Test Duration for All Sites: {{ "%.2f"|format(total_duration) }} seconds</p>
</body>
</html>
"""


@contextmanager
def captured_notices():
    """Collect encoder notices for the duration of a block, then log them at debug level."""
    notices: List[str] = []
    try:
        yield notices
    finally:
        for notice in notices:
            logger.debug(notice)


def render_violation_report(
    target: AuditTarget,
    violations: Sequence[AxeViolation],
    selector: RuleSelector,
    sink: Optional[Callable[[str], None]] = None,
) -> str:
    html = Template(VIOLATIONS_TEMPLATE, autoescape=True).render(
        target=target,
        violations=violations,
        selector=selector,
        distinct=len({v.id for v in violations}),
        affected=sum(len(v.nodes) for v in violations),
        generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    )
    (sink or typer.echo)(f"HTML report rendered for {target.name} ({len(violations)} violations)")
    return html


def encode_raw_results(raw: dict) -> bytes:
    return orjson.dumps(raw, option=orjson.OPT_INDENT_2)


def build_combined_report(
    summaries: Sequence[AuditSummary],
    total_duration: float,
    generated_at: Optional[datetime] = None,
) -> CombinedReport:
    return CombinedReport(
        generated_at=generated_at or datetime.now(),
        summaries=list(summaries),
        total_duration=total_duration,
    )


def combined_sections(report: CombinedReport) -> List[Dict]:
    """One display dict per summary; absent fields get placeholders."""
    sections = []
    for s in report.summaries:
        section = s.model_dump()
        for key in ("total_violations", "distinct_areas", "html_report_path", "json_report_path"):
            if section[key] is None:
                section[key] = NOT_AVAILABLE
        section["violation_list"] = s.violation_list or NO_VIOLATIONS
        sections.append(section)
    return sections


def render_combined_html(report: CombinedReport) -> str:
    return Template(COMBINED_TEMPLATE, autoescape=True).render(
        generated_at=report.generated_at.strftime("%Y-%m-%d %H:%M:%S"),
        sections=combined_sections(report),
        total_duration=report.total_duration,
    )


async def write_bytes(path: Path, data: bytes):
    await asyncio.to_thread(path.write_bytes, data)


async def close_quietly(*handles):
    """Close pages/contexts in order; a failing close is logged and the rest still close."""
    for handle in handles:
        if handle is None:
            continue
        try:
            await handle.close()
        except Exception as e:
            logger.warning("Closing %s failed: %s", type(handle).__name__, e)


def load_combined_report(path: Path) -> CombinedReport:
    return CombinedReport.model_validate_json(path.read_bytes())


async def render_pdf(browser, html_path: Path, pdf_path: Path) -> Optional[Path]:
    """Print ``html_path`` to an A4 PDF with the given browser; None if rendering failed."""
    page = None
    try:
        page = await browser.new_page()
        await page.goto(html_path.resolve().as_uri(), wait_until="load")
        await page.pdf(
            path=str(pdf_path),
            format="A4",
            print_background=True,
            margin={"top": "12mm", "right": "12mm", "bottom": "12mm", "left": "12mm"},
        )
    except Exception as e:
        logger.warning("PDF render failed for %s: %s", html_path, e)
        return None
    finally:
        await close_quietly(page)
    return pdf_path


async def write_combined_report(report: CombinedReport, out_dir: Path, stem: str, browser=None) -> Dict[str, Optional[str]]:
    """Persist the combined report as JSON + HTML, and as PDF when a browser is given."""
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / f"{stem}.json"
    html_path = out_dir / f"{stem}.html"
    await write_bytes(json_path, orjson.dumps(report.model_dump(mode="json"), option=orjson.OPT_INDENT_2))
    await write_bytes(html_path, render_combined_html(report).encode("utf-8"))
    pdf_path = None
    if browser is not None:
        pdf_path = await render_pdf(browser, html_path, out_dir / f"{stem}.pdf")
    return {
        "json": str(json_path),
        "html": str(html_path),
        "pdf": str(pdf_path) if pdf_path else None,
    }
