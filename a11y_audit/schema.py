from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union
from datetime import datetime

from . import rules


class AxeNode(BaseModel):
    html: Optional[str] = None
    # iframe targets are a flat list of selectors (one per frame); shadow DOM targets are nested lists
    target: List[Union[str, List[str]]] = []

    def locators(self) -> List[str]:
        """Plain CSS locators for this node; nested shadow DOM entries are skipped."""
        return [t for t in self.target if isinstance(t, str)]


class AxeViolation(BaseModel):
    id: str
    impact: Optional[str] = None
    description: str = ""
    help: Optional[str] = None
    helpUrl: Optional[str] = None
    nodes: List[AxeNode] = []
    tags: List[str] = []


class AuditTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str  # as supplied on the CLI, in the directory or in the sites file
    location: str  # fully qualified navigable URI
    name: str  # short name used for artifact file names


class RuleSelector(BaseModel):
    """Filter handed to the rule engine: explicit rule ids win over tags."""
    model_config = ConfigDict(frozen=True)

    level: str = "AA"
    include_best_practice: bool = True
    rule_ids: List[str] = []

    @property
    def tags(self) -> List[str]:
        return rules.wcag_tags(self.level, self.include_best_practice)

    def run_only(self) -> dict:
        if self.rule_ids:
            return {"type": "rule", "values": list(self.rule_ids)}
        return {"type": "tag", "values": self.tags}

    def describe(self) -> str:
        text = f"WCAG Tags: {', '.join(self.tags)}"
        if self.rule_ids:
            text += f" | Specific Rules: {', '.join(self.rule_ids)}"
        return text


class AuditSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    site: str
    site_name: str
    duration: float = 0.0
    total_violations: Optional[int] = None
    distinct_areas: Optional[int] = None
    affected_nodes: Optional[int] = None
    html_report_path: Optional[str] = None
    json_report_path: Optional[str] = None
    screenshot_path: Optional[str] = None
    legend_path: Optional[str] = None
    # "1. rule-id - description" per violation, newline separated
    violation_list: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, target: AuditTarget, reason: str) -> "AuditSummary":
        return cls(site=target.location, site_name=target.name, duration=0.0, error=reason)


class AuditOutcome(BaseModel):
    """Result of one target's audit task: ok with a summary, or failed with a reason."""
    target: AuditTarget
    status: str  # ok|failed
    summary: AuditSummary
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls, target: AuditTarget, summary: AuditSummary) -> "AuditOutcome":
        return cls(target=target, status="ok", summary=summary)

    @classmethod
    def failure(cls, target: AuditTarget, reason: str) -> "AuditOutcome":
        return cls(
            target=target,
            status="failed",
            summary=AuditSummary.failed(target, reason),
            reason=reason,
        )


class BatchResult(BaseModel):
    outcomes: List[AuditOutcome] = []
    total_duration: float = 0.0

    @property
    def summaries(self) -> List[AuditSummary]:
        return [o.summary for o in self.outcomes]

    @property
    def failures(self) -> List[AuditOutcome]:
        return [o for o in self.outcomes if not o.ok]


class CombinedReport(BaseModel):
    generated_at: datetime = Field(default_factory=datetime.now)
    summaries: List[AuditSummary] = []
    total_duration: float = 0.0
