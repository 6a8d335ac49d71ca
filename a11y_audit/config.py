"""Audit configuration: defaults, optional YAML file, CLI overrides."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, field_validator

from . import rules
from .axe_bridge import AXE_CDN
from .schema import RuleSelector

DEFAULT_CONFIG_FILE = "config/audit.yaml"


class ConfigError(ValueError):
    pass


class AuditConfig(BaseModel):
    level: str = rules.DEFAULT_LEVEL
    include_best_practice: bool = True
    rule_ids: List[str] = []
    capture_screenshot: bool = True
    timeout_ms: int = 30000
    headless: bool = True
    pdf: bool = True
    reports_dir: str = "reports"
    local_pages_dir: str = "local_pages"
    sites_file: str = "sites.json"
    tips_file: str = "tips.json"
    axe_source: str = AXE_CDN

    @field_validator("rule_ids", mode="before")
    @classmethod
    def _split_rule_ids(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return rules.split_rule_ids(v)
        return [str(r).strip() for r in v if str(r).strip()]

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v):
        return rules.parse_level(v)

    @field_validator("timeout_ms")
    @classmethod
    def _positive_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout_ms must be positive")
        return v

    def selector(self) -> RuleSelector:
        return RuleSelector(
            level=self.level,
            include_best_practice=self.include_best_practice,
            rule_ids=self.rule_ids,
        )


def read_config_file(path: Optional[Path]) -> Dict[str, Any]:
    if path is None or not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: Optional[Path] = None, **overrides: Any) -> AuditConfig:
    """Merge the YAML file with non-None overrides (CLI options win)."""
    values = read_config_file(path)
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return AuditConfig(**values)
    except ValueError as e:
        raise ConfigError(str(e)) from e


__all__ = ["AuditConfig", "ConfigError", "DEFAULT_CONFIG_FILE", "load_config", "read_config_file"]
