"""Tests for the status and severity taxonomies."""

import pytest

from analysis_ledger.domain import (
    AnalysisStatus,
    AnalysisType,
    ProjectStatus,
    UserRole,
    ViolationSeverity,
    ViolationStatus,
)
from analysis_ledger.domain.enums import TERMINAL_VIOLATION_STATUSES, sort_by_priority


class TestViolationSeverity:
    def test_priorities_rank_critical_first(self):
        assert [s.priority for s in ViolationSeverity] == [1, 2, 3, 4, 5]
        assert ViolationSeverity.CRITICAL.priority == 1
        assert ViolationSeverity.INFO.priority == 5

    def test_display_names(self):
        assert ViolationSeverity.CRITICAL.display_name == "Critical"
        assert ViolationSeverity.MEDIUM.display_name == "Medium"

    def test_by_priority(self):
        assert ViolationSeverity.by_priority(2) is ViolationSeverity.HIGH
        with pytest.raises(ValueError):
            ViolationSeverity.by_priority(9)

    def test_sort_by_priority(self):
        shuffled = [ViolationSeverity.LOW, ViolationSeverity.CRITICAL, ViolationSeverity.INFO, ViolationSeverity.HIGH]
        assert sort_by_priority(shuffled) == [
            ViolationSeverity.CRITICAL,
            ViolationSeverity.HIGH,
            ViolationSeverity.LOW,
            ViolationSeverity.INFO,
        ]


class TestStatuses:
    def test_terminal_violation_statuses(self):
        assert TERMINAL_VIOLATION_STATUSES == {
            ViolationStatus.RESOLVED,
            ViolationStatus.FALSE_POSITIVE,
            ViolationStatus.WONT_FIX,
        }
        assert not ViolationStatus.SUPPRESSED.is_terminal
        assert not ViolationStatus.OPEN.is_terminal

    def test_analysis_finished_states(self):
        finished = {s for s in AnalysisStatus if s.is_finished}
        assert finished == {AnalysisStatus.COMPLETED, AnalysisStatus.FAILED, AnalysisStatus.CANCELLED}

    def test_values_are_storage_names(self):
        for enum_type in (ProjectStatus, AnalysisStatus, AnalysisType, ViolationSeverity, ViolationStatus, UserRole):
            for member in enum_type:
                assert member.value == member.name

    def test_display_names(self):
        assert ViolationStatus.WONT_FIX.display_name == "Won't Fix"
        assert AnalysisType.COMPLIANCE.display_name == "Compliance Check"
        assert AnalysisStatus.IN_PROGRESS.display_name == "In Progress"
        assert ProjectStatus.ARCHIVED.display_name == "Archived"
        assert UserRole.ADMIN.display_name == "Administrator"
