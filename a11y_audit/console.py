"""Coloured console output for audit progress, plus accessibility tips."""
import random
from pathlib import Path
from typing import Optional

import orjson
import typer

SEPARATOR = "-" * 50


def separator():
    typer.secho(SEPARATOR, fg=typer.colors.BRIGHT_BLACK)


def header(text: str):
    typer.secho(text, fg=typer.colors.BLUE, bold=True)


def info(text: str):
    typer.secho(text, fg=typer.colors.CYAN)


def success(text: str):
    typer.secho(text, fg=typer.colors.GREEN)


def warning(text: str):
    typer.secho(text, fg=typer.colors.YELLOW)


def error(text: str):
    typer.secho(text, fg=typer.colors.RED, err=True)


def random_tip(tips_file: Path) -> Optional[str]:
    """Pick a random tip from a ``{"tips": [...]}`` JSON file, or None."""
    try:
        data = orjson.loads(tips_file.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        warning(f"Could not load {tips_file}: {e}")
        return None
    tips = data.get("tips") if isinstance(data, dict) else None
    if not isinstance(tips, list) or not tips:
        warning(f"No tips found in {tips_file}.")
        return None
    return str(random.choice(tips))


def welcome(tips_file: Path):
    typer.secho("\nWelcome to the Accessibility Audit Automation Program.", fg=typer.colors.GREEN, bold=True)
    tip = random_tip(tips_file)
    if tip:
        typer.echo(typer.style("\nAccessibility Tip: ", fg=typer.colors.MAGENTA, bold=True) + tip + "\n")
    typer.secho(
        "This tool audits website accessibility based on WCAG guidelines and generates "
        "reports in HTML and JSON formats.",
        bold=True,
    )
    typer.echo("Important: automated accessibility testing should be treated as a complementary step.")
    typer.echo("Manual testing remains essential for accessibility testing.\n")
