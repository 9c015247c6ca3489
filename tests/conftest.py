"""Shared test fixtures for Analysis Ledger tests."""

from datetime import datetime

import pytest

from analysis_ledger.config import LedgerConfig
from analysis_ledger.domain import (
    ComplianceViolation,
    Project,
    User,
    UserRole,
    ViolationSeverity,
)
from analysis_ledger.persistence import LatencyRecorder, LedgerDB, Repositories
from analysis_ledger.services import Ledger


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def now():
    """A fixed clock reading for deterministic timestamps."""
    return datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def db():
    """Migrated in-memory ledger database."""
    with LedgerDB.in_memory() as database:
        yield database


@pytest.fixture
def file_db(tmp_path):
    """Migrated ledger database in a temporary file (WAL journal)."""
    config = LedgerConfig(database_path=str(tmp_path / "ledger" / "ledger.db"))
    with LedgerDB(config) as database:
        yield database


@pytest.fixture
def recorder():
    return LatencyRecorder()


@pytest.fixture
def repos(db, recorder):
    return Repositories(db, recorder)


@pytest.fixture
def ledger(db):
    return Ledger(db)


@pytest.fixture
def user(repos):
    """A saved developer."""
    return repos.users.save(User(username="alice", email="alice@example.com", password_hash="hash"))


@pytest.fixture
def admin(repos):
    return repos.users.save(User(username="root", email="root@example.com", role=UserRole.ADMIN))


@pytest.fixture
def project(repos, user):
    """A saved ACTIVE project owned by ``user``."""
    return repos.projects.save(
        Project(name="payments-api", description="Payment gateway", owner_id=user.id, technology_stack="python")
    )


@pytest.fixture
def make_violation(project):
    """Factory for unsaved, schema-valid violations on ``project``."""

    def _make(**overrides):
        fields = dict(
            project_id=project.id,
            rule_id="SEC-001",
            rule_name="Hardcoded secret",
            rule_category="security",
            severity=ViolationSeverity.HIGH,
            message="Secret literal in source",
            file_path="src/app/settings.py",
            line_number=12,
        )
        fields.update(overrides)
        return ComplianceViolation(**fields)

    return _make
