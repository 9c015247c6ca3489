"""Tests for ComplianceViolation transitions and derived values."""

from datetime import datetime, timedelta

from analysis_ledger.domain import (
    UNKNOWN_LOCATION,
    ComplianceViolation,
    ViolationSeverity,
    ViolationStatus,
)


def _violation(**kwargs):
    return ComplianceViolation(
        project_id=1,
        rule_id="R1",
        rule_name="rule",
        rule_category="style",
        severity=ViolationSeverity.MEDIUM,
        message="msg",
        **kwargs,
    )


class TestIsActive:
    def test_fresh_violation_is_open_and_active(self):
        violation = _violation()
        assert violation.status is ViolationStatus.OPEN
        assert violation.is_active()

    def test_inactive_after_resolve(self):
        violation = _violation()
        violation.resolve("bob", "fixed in #12")
        assert not violation.is_active()

    def test_suppressed_until_tomorrow_is_active(self):
        violation = _violation()
        violation.suppress(datetime.now() + timedelta(days=1), "vendor code")
        assert violation.is_active()

    def test_suppressed_until_yesterday_is_inactive(self):
        violation = _violation()
        violation.suppress(datetime.now() - timedelta(days=1), "vendor code")
        assert not violation.is_active()

    def test_suppressed_indefinitely_is_active(self):
        violation = _violation()
        violation.suppress(None, "accepted risk")
        assert violation.is_active()

    def test_suppression_boundary_uses_now(self, now):
        violation = _violation()
        violation.suppress(now, "boundary")
        assert violation.is_active(now - timedelta(microseconds=1))
        assert not violation.is_active(now)

    def test_other_statuses_inactive(self):
        for status in (
            ViolationStatus.IN_PROGRESS,
            ViolationStatus.RESOLVED,
            ViolationStatus.FALSE_POSITIVE,
            ViolationStatus.WONT_FIX,
        ):
            assert not _violation(status=status).is_active()


class TestTransitions:
    def test_resolve_records_metadata(self, now):
        violation = _violation()
        violation.resolve("bob", "fixed", now)
        assert violation.status is ViolationStatus.RESOLVED
        assert violation.resolved_by == "bob"
        assert violation.resolved_at == now
        assert violation.resolution_notes == "fixed"

    def test_false_positive(self, now):
        violation = _violation()
        violation.mark_as_false_positive("test fixture", now)
        assert violation.status is ViolationStatus.FALSE_POSITIVE
        assert violation.false_positive is True
        assert violation.resolution_notes == "test fixture"
        assert violation.resolved_at == now

    def test_suppress_records_window(self, now):
        violation = _violation()
        violation.suppress(now, "legacy")
        assert violation.status is ViolationStatus.SUPPRESSED
        assert violation.suppressed_until == now
        assert violation.suppression_reason == "legacy"

    def test_in_progress_and_wont_fix(self, now):
        violation = _violation()
        violation.mark_in_progress()
        assert violation.status is ViolationStatus.IN_PROGRESS
        violation.mark_wont_fix("carol", "out of scope", now)
        assert violation.status is ViolationStatus.WONT_FIX
        assert violation.resolved_by == "carol"
        assert violation.resolved_at == now

    def test_status_can_be_assigned_directly(self):
        violation = _violation()
        violation.resolve("bob")
        violation.status = ViolationStatus.OPEN
        assert violation.is_active()


class TestLocation:
    def test_location_degrades_in_order(self):
        violation = _violation(file_path="src/main/java/Test.java", line_number=100, column_number=25)
        assert violation.location == "src/main/java/Test.java:100:25"
        violation.column_number = None
        assert violation.location == "src/main/java/Test.java:100"
        violation.line_number = None
        assert violation.location == "src/main/java/Test.java"
        violation.file_path = None
        assert violation.location == UNKNOWN_LOCATION == "Unknown location"

    def test_column_without_line_is_ignored(self):
        violation = _violation(file_path="a.py", column_number=7)
        assert violation.location == "a.py"

    def test_line_without_file_is_unknown(self):
        violation = _violation(line_number=3, column_number=4)
        assert violation.location == UNKNOWN_LOCATION


class TestConstruction:
    def test_permissive_values(self):
        violation = ComplianceViolation(line_number=-1, column_number=-1)
        assert violation.line_number == -1
        assert violation.project_id is None
        assert violation.priority is None

    def test_priority_follows_severity(self):
        assert _violation().priority == 3
