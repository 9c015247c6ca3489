"""Tests for the project compliance report."""

from datetime import timedelta

import pytest

from analysis_ledger.domain import ViolationSeverity
from analysis_ledger.exceptions import EntityNotFoundError
from analysis_ledger.reporting import build_project_report
from analysis_ledger.services import Finding


def _finding(severity, category="security"):
    return Finding("R1", "Rule", category, severity, "msg", file_path="a.py", line_number=1)


class TestProjectReport:
    def test_empty_project(self, repos, project, now):
        report = build_project_report(repos, project.id, now=now)
        assert report.project_name == "payments-api"
        assert report.status == "ACTIVE"
        assert report.total_analyses == 0
        assert report.latest_analysis_id is None
        assert report.compliance_level == "UNKNOWN"
        assert report.active_violations == 0
        assert report.risk_level == "LOW"
        assert report.active_by_severity == {s.value: 0 for s in ViolationSeverity}

    def test_missing_project(self, repos):
        with pytest.raises(EntityNotFoundError):
            build_project_report(repos, 77)

    def test_populated_project(self, ledger, repos, project, user, now):
        done = ledger.analyses.request_analysis(project.id, user.id)
        ledger.analyses.start(done.id, now)
        ledger.analyses.record_scores(done.id, compliance_violations=1, security_violations=0, performance_issues=0, quality_score=80.0)
        ledger.analyses.complete(done.id, now + timedelta(minutes=1))
        ledger.analyses.request_analysis(project.id, user.id)

        violations = ledger.violations.ingest(
            project.id,
            [
                _finding(ViolationSeverity.CRITICAL),
                _finding(ViolationSeverity.CRITICAL),
                _finding(ViolationSeverity.LOW, "style"),
                _finding(ViolationSeverity.LOW, "style"),
                _finding(ViolationSeverity.LOW, "style"),
                _finding(ViolationSeverity.MEDIUM, "docs"),
            ],
            analysis_id=done.id,
        )
        ledger.violations.resolve(violations[-1].id, "bob")

        report = build_project_report(repos, project.id, now=now, top_n=1)
        assert report.total_analyses == 2
        assert report.analyses_by_status["COMPLETED"] == 1
        assert report.analyses_by_status["PENDING"] == 1
        assert report.latest_analysis_id == done.id
        assert report.latest_compliance_score == 90.0
        assert report.compliance_level == "GOOD"
        assert report.latest_overall_score == pytest.approx(92.5)
        assert report.average_compliance_score == pytest.approx(90.0)
        assert report.active_violations == 5
        assert report.active_by_severity["CRITICAL"] == 2
        assert report.risk_level == "MEDIUM"
        assert report.violations_by_status["RESOLVED"] == 1
        assert report.top_categories == {"style": 3}

    def test_to_dict_is_serializable(self, repos, project, now):
        data = build_project_report(repos, project.id, now=now).to_dict()
        assert data["generated_at"] == now.isoformat()
        assert data["project_id"] == project.id
