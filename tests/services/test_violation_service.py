"""Tests for ViolationService: intake, transitions and tally upkeep."""

from datetime import timedelta

import pytest

from analysis_ledger.domain import Project, ViolationSeverity, ViolationStatus
from analysis_ledger.exceptions import ConstraintViolationError, InvalidStateError, WorkflowError
from analysis_ledger.services import Finding


def _finding(severity, rule_id="R-1", category="security"):
    return Finding(
        rule_id=rule_id,
        rule_name="Rule",
        rule_category=category,
        severity=severity,
        message="Something is off",
        file_path="src/app.py",
        line_number=3,
    )


@pytest.fixture
def analysis(ledger, project, user):
    a = ledger.analyses.request_analysis(project.id, user.id)
    return ledger.analyses.start(a.id)


@pytest.fixture
def ingested(ledger, project, analysis):
    return ledger.violations.ingest(
        project.id,
        [
            _finding(ViolationSeverity.CRITICAL),
            _finding(ViolationSeverity.HIGH),
            _finding("medium"),
            _finding(ViolationSeverity.LOW, category="style"),
            _finding(ViolationSeverity.INFO, category="style"),
        ],
        analysis_id=analysis.id,
    )


class TestFinding:
    def test_string_severity(self):
        assert _finding("critical").to_violation().severity is ViolationSeverity.CRITICAL

    def test_unknown_severity(self):
        with pytest.raises(ValueError):
            _finding("catastrophic").to_violation()


class TestIngest:
    def test_ingest_saves_open_violations(self, ingested, project, analysis):
        assert len(ingested) == 5
        assert all(v.id is not None for v in ingested)
        assert all(v.status is ViolationStatus.OPEN for v in ingested)
        assert all(v.project_id == project.id and v.analysis_id == analysis.id for v in ingested)

    def test_ingest_refreshes_tallies(self, ledger, ingested, analysis):
        stored = ledger.analyses.get(analysis.id)
        assert stored.total_violations == 5
        assert stored.critical_violations == 1
        assert stored.warning_violations == 2
        assert stored.info_violations == 2

    def test_ingest_without_analysis(self, ledger, project):
        violations = ledger.violations.ingest(project.id, [_finding(ViolationSeverity.LOW)])
        assert violations[0].analysis_id is None

    def test_ingest_is_atomic(self, ledger, repos, project, analysis):
        bad = _finding(ViolationSeverity.HIGH)
        bad.message = ""
        with pytest.raises(ConstraintViolationError):
            ledger.violations.ingest(project.id, [_finding(ViolationSeverity.CRITICAL), bad], analysis_id=analysis.id)
        assert repos.violations.count() == 0
        assert ledger.analyses.get(analysis.id).total_violations is None

    def test_analysis_from_other_project(self, ledger, project, analysis):
        other = ledger.projects.create(Project(name="other"))
        with pytest.raises(WorkflowError):
            ledger.violations.ingest(other.id, [_finding(ViolationSeverity.LOW)], analysis_id=analysis.id)


class TestTransitions:
    def test_resolve_updates_tallies(self, ledger, ingested, analysis, now):
        critical = ingested[0]
        resolved = ledger.violations.resolve(critical.id, "bob", "fixed", now)
        assert resolved.status is ViolationStatus.RESOLVED
        assert resolved.resolved_at == now
        stored = ledger.analyses.get(analysis.id)
        assert stored.critical_violations == 0
        assert stored.total_violations == 4

    def test_suppressed_still_counted(self, ledger, ingested, analysis, now):
        ledger.violations.suppress(ingested[1].id, now + timedelta(days=7), "next sprint")
        assert ledger.analyses.get(analysis.id).total_violations == 5

    def test_in_progress_still_counted(self, ledger, ingested, analysis):
        ledger.violations.mark_in_progress(ingested[2].id)
        assert ledger.violations.get(ingested[2].id).status is ViolationStatus.IN_PROGRESS
        assert ledger.analyses.get(analysis.id).warning_violations == 2

    def test_false_positive_and_wont_fix(self, ledger, ingested, analysis):
        ledger.violations.mark_false_positive(ingested[3].id, "generated code")
        ledger.violations.mark_wont_fix(ingested[4].id, "carol", "accepted")
        stored = ledger.analyses.get(analysis.id)
        assert stored.info_violations == 0
        assert stored.total_violations == 3
        assert ledger.violations.get(ingested[3].id).false_positive is True

    def test_terminal_refused(self, ledger, ingested):
        ledger.violations.resolve(ingested[0].id, "bob")
        with pytest.raises(InvalidStateError):
            ledger.violations.suppress(ingested[0].id, None)
        assert ledger.violations.get(ingested[0].id).status is ViolationStatus.RESOLVED

    def test_suppressed_can_be_resolved(self, ledger, ingested):
        ledger.violations.suppress(ingested[1].id, None, "later")
        assert ledger.violations.resolve(ingested[1].id, "bob").status is ViolationStatus.RESOLVED

    def test_violation_without_analysis(self, ledger, project):
        (violation,) = ledger.violations.ingest(project.id, [_finding(ViolationSeverity.LOW)])
        assert ledger.violations.resolve(violation.id, "bob").status is ViolationStatus.RESOLVED


class TestActive:
    def test_active_sorted_by_severity(self, ledger, project, ingested, now):
        ledger.violations.resolve(ingested[0].id, "bob")
        ledger.violations.suppress(ingested[1].id, now - timedelta(days=1), "expired")
        active = ledger.violations.active_for_project(project.id, now)
        assert [v.severity for v in active] == [
            ViolationSeverity.MEDIUM,
            ViolationSeverity.LOW,
            ViolationSeverity.INFO,
        ]
