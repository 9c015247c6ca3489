"""Tests for the Project aggregate root and the User record."""

from analysis_ledger.domain import (
    Analysis,
    ComplianceViolation,
    Project,
    ProjectStatus,
    User,
    UserRole,
)


class TestProject:
    def test_defaults(self):
        project = Project(name="web")
        assert project.status is ProjectStatus.ACTIVE
        assert project.analyses == []
        assert project.violations == []

    def test_add_analysis_sets_back_reference(self):
        project = Project(name="web", id=7)
        analysis = Analysis()
        project.add_analysis(analysis)
        assert analysis.project_id == 7
        assert project.analyses == [analysis]

    def test_add_is_idempotent_per_object(self):
        project = Project(name="web", id=7)
        violation = ComplianceViolation()
        project.add_violation(violation)
        project.add_violation(violation)
        assert len(project.violations) == 1
        assert violation.project_id == 7

    def test_distinct_but_equal_children_both_kept(self):
        project = Project(name="web", id=1)
        project.add_analysis(Analysis())
        project.add_analysis(Analysis())
        assert len(project.analyses) == 2

    def test_update_last_analysis_date(self, now):
        project = Project(name="web")
        project.update_last_analysis_date(now)
        assert project.last_analysis_date == now

    def test_permissive_counts(self):
        project = Project(files_count=-1, directories_count=-2)
        assert project.files_count == -1
        assert project.name is None

    def test_children_excluded_from_equality(self):
        a = Project(name="web", id=1)
        b = Project(name="web", id=1)
        a.add_analysis(Analysis())
        assert a == b


class TestUser:
    def test_defaults(self):
        user = User(username="dev", email="dev@example.com")
        assert user.role is UserRole.DEVELOPER
        assert user.is_active is True

    def test_accepts_anything(self):
        user = User(email="not-an-email")
        assert user.email == "not-an-email"
