"""Project compliance summary, computed from the stored child rows."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

from .domain import AnalysisStatus, ViolationSeverity, compliance_level, risk_level
from .exceptions import EntityNotFoundError
from .persistence import Repositories


@dataclass
class ProjectReport:
    """Point-in-time summary of one project's analyses and violations."""

    project_id: int
    project_name: str
    status: str
    generated_at: datetime
    total_analyses: int = 0
    analyses_by_status: dict[str, int] = field(default_factory=dict)
    latest_analysis_id: Optional[int] = None
    latest_overall_score: Optional[float] = None
    latest_compliance_score: Optional[float] = None
    compliance_level: str = "UNKNOWN"
    average_compliance_score: Optional[float] = None
    active_violations: int = 0
    active_by_severity: dict[str, int] = field(default_factory=dict)
    violations_by_status: dict[str, int] = field(default_factory=dict)
    top_categories: dict[str, int] = field(default_factory=dict)
    risk_level: str = "LOW"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat()
        return data


def build_project_report(
    repos: Repositories,
    project_id: int,
    now: Optional[datetime] = None,
    top_n: int = 5,
) -> ProjectReport:
    """Summarize *project_id*; raises EntityNotFoundError if it does not exist."""
    now = now or datetime.now()
    project = repos.projects.get(project_id)
    if project is None:
        raise EntityNotFoundError("Project", project_id)

    report = ProjectReport(
        project_id=project.id,
        project_name=project.name,
        status=project.status.value,
        generated_at=now,
    )

    by_status = repos.analyses.count_by_status(project_id)
    report.analyses_by_status = {s.value: n for s, n in by_status.items()}
    report.total_analyses = sum(by_status.values())

    latest = repos.analyses.latest_for_project(project_id, status=AnalysisStatus.COMPLETED)
    if latest is not None:
        report.latest_analysis_id = latest.id
        report.latest_overall_score = latest.overall_score
        report.latest_compliance_score = latest.compliance_score
        report.compliance_level = compliance_level(latest.compliance_score)
    report.average_compliance_score = repos.analyses.average_score(project_id)

    active = repos.violations.find_active(project_id=project_id, now=now)
    severities = Counter(v.severity for v in active)
    report.active_violations = len(active)
    report.active_by_severity = {s.value: severities.get(s, 0) for s in ViolationSeverity}
    report.risk_level = risk_level(severities.get(ViolationSeverity.CRITICAL, 0))

    report.violations_by_status = {
        s.value: n for s, n in repos.violations.count_by_status(project_id).items()
    }
    categories = repos.violations.count_by_category(project_id)
    report.top_categories = dict(list(categories.items())[:top_n])
    return report
