"""Repeatable P95 measurement of the repository latency contract.

For each entity type the harness runs ``benchmark_iterations`` sequential
create + update + read + delete cycles, then ``benchmark_bulk_rounds``
rounds of bulk save / bulk delete over ``benchmark_bulk_size`` entities.
Single-entity operations are held to ``single_op_p95_ms`` and bulk
operations to ``bulk_op_p95_ms``.

Example:
    >>> with LedgerDB.in_memory() as db:
    ...     report = run_benchmark(db)
    >>> report.passed
    True
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .config import LedgerConfig
from .domain import (
    Analysis,
    AnalysisType,
    ComplianceViolation,
    Project,
    User,
    UserRole,
    ViolationSeverity,
)
from .logging_config import get_logger
from .persistence import LatencyRecorder, LatencySummary, LedgerDB, Repositories
from .persistence.repositories import BaseRepository

logger = get_logger(__name__)

ENTITY_TYPES = ("user", "project", "analysis", "violation")

_SINGLE_OPS = ("save", "get", "delete", "crud_cycle")
_BULK_OPS = ("save_all", "delete_all")

_SEVERITIES = list(ViolationSeverity)


@dataclass(frozen=True)
class BenchmarkResult:
    summary: LatencySummary
    budget_ms: float
    bulk: bool

    @property
    def operation(self) -> str:
        return self.summary.operation

    @property
    def passed(self) -> bool:
        return self.summary.within(self.budget_ms)


@dataclass
class BenchmarkReport:
    results: list[BenchmarkResult]

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[BenchmarkResult]:
        return [r for r in self.results if not r.passed]

    def result(self, operation: str) -> BenchmarkResult:
        for r in self.results:
            if r.operation == operation:
                return r
        raise KeyError(operation)

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "results": [
                {
                    "operation": r.operation,
                    "bulk": r.bulk,
                    "count": r.summary.count,
                    "p50_ms": round(r.summary.p50_ms, 3),
                    "p95_ms": round(r.summary.p95_ms, 3),
                    "max_ms": round(r.summary.max_ms, 3),
                    "budget_ms": r.budget_ms,
                    "passed": r.passed,
                }
                for r in self.results
            ],
        }


class _Fixtures:
    """Builds benchmark entities that satisfy every schema constraint."""

    def __init__(self, repos: Repositories) -> None:
        self.tag = uuid.uuid4().hex[:8]
        self.user = repos.users.save(
            User(username=f"bench-{self.tag}", email=f"bench-{self.tag}@example.com", role=UserRole.ADMIN)
        )
        self.project = repos.projects.save(Project(name=f"bench-{self.tag}", owner_id=self.user.id))

    def make(self, entity_type: str, i: int) -> Any:
        if entity_type == "user":
            return User(
                username=f"u-{self.tag}-{i}",
                email=f"u-{self.tag}-{i}@example.com",
                password_hash="x" * 60,
            )
        if entity_type == "project":
            return Project(name=f"p-{self.tag}-{i}", description="benchmark project", technology_stack="python")
        if entity_type == "analysis":
            return Analysis(project_id=self.project.id, user_id=self.user.id, type=AnalysisType.FULL)
        return ComplianceViolation(
            project_id=self.project.id,
            rule_id=f"R{i % 20:03d}",
            rule_name="benchmark rule",
            rule_category="security",
            severity=_SEVERITIES[i % len(_SEVERITIES)],
            message="benchmark violation",
            file_path=f"src/module_{i % 10}.py",
            line_number=i + 1,
        )

    @staticmethod
    def touch(entity: Any, i: int) -> None:
        if isinstance(entity, User):
            entity.first_name = f"Bench{i}"
        elif isinstance(entity, Project):
            entity.description = f"updated {i}"
        elif isinstance(entity, Analysis):
            entity.start_analysis()
            entity.set_security_violations(i % 12)
            entity.add_metric("iteration", i)
        else:
            entity.resolve("benchmark", "auto-resolved")


def _repo_for(repos: Repositories, entity_type: str) -> BaseRepository:
    return {
        "user": repos.users,
        "project": repos.projects,
        "analysis": repos.analyses,
        "violation": repos.violations,
    }[entity_type]


def _crud_cycles(repo: BaseRepository, make: Callable[[int], Any], touch, iterations: int, recorder) -> None:
    for i in range(iterations):
        with recorder.measure(f"{repo.metric_name}.crud_cycle"):
            entity = repo.save(make(i))
            touch(entity, i)
            repo.save(entity)
            repo.get(entity.id)
            repo.delete(entity)


def _bulk_rounds(repo: BaseRepository, make: Callable[[int], Any], size: int, rounds: int) -> None:
    for r in range(rounds):
        batch = [make(r * size + i) for i in range(size)]
        repo.save_all(batch)
        repo.delete_all(batch)


def run_benchmark(
    db: LedgerDB,
    config: Optional[LedgerConfig] = None,
    entity_types: Iterable[str] = ENTITY_TYPES,
) -> BenchmarkReport:
    """Measure the latency contract against *db* and report per operation."""
    config = config or db.config
    entity_types = list(entity_types)
    unknown = set(entity_types) - set(ENTITY_TYPES)
    if unknown:
        raise ValueError(f"Unknown entity type(s): {', '.join(sorted(unknown))}")

    setup = Repositories(db)
    fixtures = _Fixtures(setup)
    recorder = LatencyRecorder()
    repos = Repositories(db, recorder)

    try:
        for entity_type in entity_types:
            repo = _repo_for(repos, entity_type)
            logger.info("Benchmarking %s repository", entity_type)
            _crud_cycles(
                repo,
                lambda i, t=entity_type: fixtures.make(t, i),
                fixtures.touch,
                config.benchmark_iterations,
                recorder,
            )
            _bulk_rounds(
                repo,
                lambda i, t=entity_type: fixtures.make(t, config.benchmark_iterations + i),
                config.benchmark_bulk_size,
                config.benchmark_bulk_rounds,
            )
    finally:
        setup.projects.delete(fixtures.project)
        setup.users.delete(fixtures.user)

    results = []
    for entity_type in entity_types:
        for op in _SINGLE_OPS:
            summary = recorder.summary(f"{entity_type}.{op}")
            results.append(BenchmarkResult(summary, config.single_op_p95_ms, bulk=False))
        for op in _BULK_OPS:
            summary = recorder.summary(f"{entity_type}.{op}")
            results.append(BenchmarkResult(summary, config.bulk_op_p95_ms, bulk=True))

    report = BenchmarkReport(results)
    for failure in report.failures:
        logger.warning(
            "%s P95 %.2f ms exceeds budget %.0f ms", failure.operation, failure.summary.p95_ms, failure.budget_ms
        )
    return report
