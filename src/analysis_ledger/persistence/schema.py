"""Declared column constraints, checked before any row is written.

The domain classes accept anything; these declarations are what the
database will hold them to. Uniqueness and foreign keys are left to SQLite
itself and translated by the repositories.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..domain import (
    Analysis,
    AnalysisStatus,
    AnalysisType,
    ComplianceViolation,
    Project,
    ProjectStatus,
    User,
    UserRole,
    ViolationSeverity,
    ViolationStatus,
)
from ..domain.scoring import MAX_SCORE, MIN_SCORE
from ..exceptions import ConstraintViolationError, ErrorCode, FieldViolation

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


@dataclass(frozen=True)
class Column:
    """Constraint declaration for one entity attribute."""

    name: str
    required: bool = False
    not_blank: bool = False
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    enum: Optional[type[Enum]] = None
    pattern: Optional[re.Pattern] = None

    def check(self, value: Any) -> Optional[FieldViolation]:
        if value is None:
            if self.required:
                return FieldViolation(self.name, "must not be null", ErrorCode.LD100)
            return None
        if self.enum is not None and not isinstance(value, self.enum):
            return FieldViolation(self.name, f"must be a {self.enum.__name__}", ErrorCode.LD102)
        if isinstance(value, str):
            if self.not_blank and not value.strip():
                return FieldViolation(self.name, "must not be blank", ErrorCode.LD100)
            if self.max_length is not None and len(value) > self.max_length:
                return FieldViolation(
                    self.name, f"length {len(value)} exceeds {self.max_length}", ErrorCode.LD101
                )
            if self.pattern is not None and not self.pattern.match(value):
                return FieldViolation(self.name, "is not well-formed", ErrorCode.LD102)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if isinstance(value, float) and not math.isfinite(value):
                return FieldViolation(self.name, "must be a finite number", ErrorCode.LD102)
            if self.minimum is not None and value < self.minimum:
                return FieldViolation(self.name, f"must be >= {self.minimum:g}", ErrorCode.LD102)
            if self.maximum is not None and value > self.maximum:
                return FieldViolation(self.name, f"must be <= {self.maximum:g}", ErrorCode.LD102)
        return None


def _count(name: str) -> Column:
    return Column(name, minimum=0)


def _score(name: str) -> Column:
    return Column(name, minimum=MIN_SCORE, maximum=MAX_SCORE)


USER_COLUMNS = (
    Column("username", required=True, not_blank=True, max_length=50),
    Column("email", required=True, not_blank=True, max_length=255, pattern=_EMAIL_RE),
    Column("password_hash", max_length=255),
    Column("role", required=True, enum=UserRole),
    Column("first_name", max_length=100),
    Column("last_name", max_length=100),
)

PROJECT_COLUMNS = (
    Column("name", required=True, not_blank=True, max_length=100),
    Column("description", max_length=500),
    Column("status", required=True, enum=ProjectStatus),
    Column("repository_url", max_length=2048),
    Column("project_path", max_length=2048),
    Column("technology_stack", max_length=255),
    _count("files_count"),
    _count("directories_count"),
    _count("lines_of_code"),
)

ANALYSIS_COLUMNS = (
    Column("project_id", required=True),
    Column("user_id", required=True),
    Column("type", required=True, enum=AnalysisType),
    Column("status", required=True, enum=AnalysisStatus),
    _count("duration_seconds"),
    _count("lines_analyzed"),
    _count("files_analyzed"),
    _score("compliance_score"),
    _score("quality_score"),
    _score("security_score"),
    _score("performance_score"),
    _count("total_violations"),
    _count("critical_violations"),
    _count("warning_violations"),
    _count("info_violations"),
    Column("summary", max_length=10_000),
)

VIOLATION_COLUMNS = (
    Column("project_id", required=True),
    Column("rule_id", required=True, not_blank=True, max_length=100),
    Column("rule_name", required=True, not_blank=True, max_length=255),
    Column("rule_category", required=True, not_blank=True, max_length=100),
    Column("severity", required=True, enum=ViolationSeverity),
    Column("message", required=True, not_blank=True, max_length=2000),
    Column("file_path", max_length=1024),
    _count("line_number"),
    _count("column_number"),
    Column("status", required=True, enum=ViolationStatus),
    Column("resolved_by", max_length=255),
    Column("resolution_notes", max_length=2000),
    Column("suppression_reason", max_length=500),
)


def collect(columns: tuple[Column, ...], entity: Any) -> list[FieldViolation]:
    violations = []
    for column in columns:
        problem = column.check(getattr(entity, column.name, None))
        if problem is not None:
            violations.append(problem)
    return violations


def _raise_if(entity_name: str, violations: list[FieldViolation]) -> None:
    if violations:
        raise ConstraintViolationError(entity_name, violations)


def validate_user(user: User) -> None:
    _raise_if("User", collect(USER_COLUMNS, user))


def validate_project(project: Project) -> None:
    _raise_if("Project", collect(PROJECT_COLUMNS, project))


def validate_analysis(analysis: Analysis) -> None:
    violations = collect(ANALYSIS_COLUMNS, analysis)
    if analysis.start_time and analysis.end_time and analysis.end_time < analysis.start_time:
        violations.append(FieldViolation("end_time", "precedes start_time", ErrorCode.LD102))
    violations.extend(_check_metrics(analysis.metrics))
    violations.extend(_check_errors(analysis.errors))
    _raise_if("Analysis", violations)


def _check_metrics(metrics: Any) -> list[FieldViolation]:
    if metrics is None:
        return [FieldViolation("metrics", "must not be null", ErrorCode.LD100)]
    if not isinstance(metrics, dict):
        return [FieldViolation("metrics", "must be a mapping", ErrorCode.LD102)]
    problems = []
    for key, value in metrics.items():
        if not isinstance(key, str) or not key:
            problems.append(FieldViolation("metrics", f"invalid key {key!r}", ErrorCode.LD102))
        elif not isinstance(value, str):
            problems.append(FieldViolation("metrics", f"value for {key!r} must be text", ErrorCode.LD102))
    return problems


def _check_errors(errors: Any) -> list[FieldViolation]:
    if errors is None:
        return [FieldViolation("errors", "must not be null", ErrorCode.LD100)]
    if not isinstance(errors, list):
        return [FieldViolation("errors", "must be a list", ErrorCode.LD102)]
    return [
        FieldViolation("errors", f"entry {i} must be text", ErrorCode.LD102)
        for i, message in enumerate(errors)
        if not isinstance(message, str)
    ]


def validate_violation(violation: ComplianceViolation) -> None:
    _raise_if("ComplianceViolation", collect(VIOLATION_COLUMNS, violation))
