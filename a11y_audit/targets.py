"""Target resolution: CLI arguments, or local pages plus a JSON sites file.

Every raw value is normalized into a navigable URI:
 - values that already carry a scheme pass through unchanged
 - ``*.html`` values become ``file://`` URIs resolved against the working directory
 - anything else is treated as a host and gets ``https://`` prepended
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import unquote, urlparse

import orjson

from . import console
from .schema import AuditTarget

PAGE_EXTENSION = ".html"
DEFAULT_SCHEME = "https://"
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)


def normalize_location(raw: str, base_dir: Optional[Path] = None) -> str:
    value = raw.strip()
    if _SCHEME_RE.match(value):
        return value
    if value.lower().endswith(PAGE_EXTENSION):
        base = base_dir or Path.cwd()
        return (base / value).resolve().as_uri()
    return DEFAULT_SCHEME + value


def short_name(location: str) -> str:
    """Derive a filename-safe short name for a normalized location.

    Example: https://www.example.com/x -> example_com, file:///tmp/a.html -> a
    """
    try:
        parsed = urlparse(location)
        if parsed.scheme == "file":
            name = Path(unquote(parsed.path)).name
            return name[: -len(PAGE_EXTENSION)] if name.lower().endswith(PAGE_EXTENSION) else (name or "report")
        hostname = parsed.hostname
    except ValueError as e:
        console.error(f"Error parsing URL for hostname: {e}")
        return "report"
    if not hostname:
        return "report"
    return re.sub(r"^www\.", "", hostname, flags=re.IGNORECASE).replace(".", "_")


def make_target(raw: str, base_dir: Optional[Path] = None) -> AuditTarget:
    location = normalize_location(raw, base_dir)
    return AuditTarget(raw=raw, location=location, name=short_name(location))


def load_local_pages(pages_dir: Path) -> List[str]:
    """Page files found in ``pages_dir`` (sorted listing), as paths joined onto the directory."""
    try:
        entries = sorted(pages_dir.iterdir(), key=lambda p: p.name)
    except OSError:
        console.warning(f"No {pages_dir} folder or no HTML files found.")
        return []
    return [
        str(pages_dir / p.name)
        for p in entries
        if p.name.lower().endswith(PAGE_EXTENSION) and p.is_file()
    ]


def load_sites_file(sites_file: Path) -> List[str]:
    try:
        data = orjson.loads(sites_file.read_bytes())
    except (OSError, orjson.JSONDecodeError):
        console.warning(f"{sites_file} not found or invalid.")
        return []
    if not isinstance(data, list):
        console.warning(f"{sites_file} does not contain a list of sites; ignoring it.")
        return []
    sites = []
    for entry in data:
        if isinstance(entry, str) and entry.strip():
            sites.append(entry)
        else:
            console.warning(f"Skipping invalid entry in {sites_file}: {entry!r}")
    return sites


def resolve_raw_targets(cli_targets: Sequence[str], pages_dir: Path, sites_file: Path) -> List[str]:
    # CLI targets are exclusive: the directory and the sites file are not read at all.
    if cli_targets:
        return list(cli_targets)
    return load_local_pages(pages_dir) + load_sites_file(sites_file)


def resolve_targets(
    cli_targets: Sequence[str],
    pages_dir: Path,
    sites_file: Path,
    base_dir: Optional[Path] = None,
) -> List[AuditTarget]:
    """Ordered, normalized targets. Duplicates are kept."""
    return [make_target(raw, base_dir) for raw in resolve_raw_targets(cli_targets, pages_dir, sites_file)]


__all__ = [
    "PAGE_EXTENSION",
    "load_local_pages",
    "load_sites_file",
    "make_target",
    "normalize_location",
    "resolve_raw_targets",
    "resolve_targets",
    "short_name",
]
