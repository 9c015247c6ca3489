"""Mapping between domain objects and SQLite rows.

Timestamps are stored as ISO-8601 text with microseconds so that string
comparison in SQL orders them correctly. Enums are stored by value.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
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

# Columns each repository writes, besides id/created_at/updated_at/version.
USER_FIELDS = (
    "username",
    "email",
    "password_hash",
    "role",
    "is_active",
    "first_name",
    "last_name",
    "last_login",
)

PROJECT_FIELDS = (
    "name",
    "description",
    "owner_id",
    "status",
    "repository_url",
    "project_path",
    "technology_stack",
    "files_count",
    "directories_count",
    "lines_of_code",
    "last_analysis_date",
)

ANALYSIS_FIELDS = (
    "project_id",
    "user_id",
    "analysis_type",
    "status",
    "start_time",
    "end_time",
    "duration_seconds",
    "lines_analyzed",
    "files_analyzed",
    "compliance_score",
    "quality_score",
    "security_score",
    "performance_score",
    "total_violations",
    "critical_violations",
    "warning_violations",
    "info_violations",
    "summary",
)

VIOLATION_FIELDS = (
    "project_id",
    "analysis_id",
    "rule_id",
    "rule_name",
    "rule_category",
    "severity",
    "message",
    "file_path",
    "line_number",
    "column_number",
    "code_snippet",
    "suggestion",
    "status",
    "resolved_by",
    "resolved_at",
    "resolution_notes",
    "false_positive",
    "suppressed_until",
    "suppression_reason",
)


def to_db(value: Any) -> Any:
    """Convert a Python value to its SQLite parameter form."""
    if isinstance(value, datetime):
        return value.isoformat(timespec="microseconds")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _enum(enum_type: type[Enum], value: Optional[str]):
    return enum_type(value) if value is not None else None


def _audit(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "created_at": parse_ts(row["created_at"]),
        "updated_at": parse_ts(row["updated_at"]),
        "version": row["version"],
    }


# ── users ─────────────────────────────────────────────────────────


def user_to_row(user: User) -> dict[str, Any]:
    return {name: to_db(getattr(user, name)) for name in USER_FIELDS}


def row_to_user(row: sqlite3.Row) -> User:
    return User(
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=_enum(UserRole, row["role"]),
        is_active=bool(row["is_active"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        last_login=parse_ts(row["last_login"]),
        **_audit(row),
    )


# ── projects ──────────────────────────────────────────────────────


def project_to_row(project: Project) -> dict[str, Any]:
    return {name: to_db(getattr(project, name)) for name in PROJECT_FIELDS}


def row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        name=row["name"],
        description=row["description"],
        owner_id=row["owner_id"],
        status=_enum(ProjectStatus, row["status"]),
        repository_url=row["repository_url"],
        project_path=row["project_path"],
        technology_stack=row["technology_stack"],
        files_count=row["files_count"],
        directories_count=row["directories_count"],
        lines_of_code=row["lines_of_code"],
        last_analysis_date=parse_ts(row["last_analysis_date"]),
        **_audit(row),
    )


# ── analyses ──────────────────────────────────────────────────────


def analysis_to_row(analysis: Analysis) -> dict[str, Any]:
    row = {}
    for name in ANALYSIS_FIELDS:
        attr = "type" if name == "analysis_type" else name
        row[name] = to_db(getattr(analysis, attr))
    return row


def row_to_analysis(row: sqlite3.Row) -> Analysis:
    """Build an Analysis without metrics/errors; the repository fills those."""
    return Analysis(
        project_id=row["project_id"],
        user_id=row["user_id"],
        type=AnalysisType(row["analysis_type"]),
        status=AnalysisStatus(row["status"]),
        start_time=parse_ts(row["start_time"]),
        end_time=parse_ts(row["end_time"]),
        duration_seconds=row["duration_seconds"],
        lines_analyzed=row["lines_analyzed"],
        files_analyzed=row["files_analyzed"],
        compliance_score=row["compliance_score"],
        quality_score=row["quality_score"],
        security_score=row["security_score"],
        performance_score=row["performance_score"],
        total_violations=row["total_violations"],
        critical_violations=row["critical_violations"],
        warning_violations=row["warning_violations"],
        info_violations=row["info_violations"],
        summary=row["summary"],
        **_audit(row),
    )


# ── violations ────────────────────────────────────────────────────


def violation_to_row(violation: ComplianceViolation) -> dict[str, Any]:
    return {name: to_db(getattr(violation, name)) for name in VIOLATION_FIELDS}


def row_to_violation(row: sqlite3.Row) -> ComplianceViolation:
    return ComplianceViolation(
        project_id=row["project_id"],
        analysis_id=row["analysis_id"],
        rule_id=row["rule_id"],
        rule_name=row["rule_name"],
        rule_category=row["rule_category"],
        severity=_enum(ViolationSeverity, row["severity"]),
        message=row["message"],
        file_path=row["file_path"],
        line_number=row["line_number"],
        column_number=row["column_number"],
        code_snippet=row["code_snippet"],
        suggestion=row["suggestion"],
        status=_enum(ViolationStatus, row["status"]),
        resolved_by=row["resolved_by"],
        resolved_at=parse_ts(row["resolved_at"]),
        resolution_notes=row["resolution_notes"],
        false_positive=bool(row["false_positive"]),
        suppressed_until=parse_ts(row["suppressed_until"]),
        suppression_reason=row["suppression_reason"],
        **_audit(row),
    )
