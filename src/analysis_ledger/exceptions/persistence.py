"""Persistence-time errors: schema constraints, storage failures, stale rows."""

from dataclasses import dataclass
from typing import List, Optional

from .base import LedgerError
from .taxonomy import ErrorCode


class PersistenceError(LedgerError):
    """Base class for errors raised by the persistence layer."""

    code = ErrorCode.LD900


@dataclass(frozen=True)
class FieldViolation:
    """One failed column constraint."""

    field: str
    reason: str
    code: ErrorCode = ErrorCode.LD100

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class ConstraintViolationError(PersistenceError):
    """Raised at save time when an entity breaks the declared schema.

    Entities accept anything in memory; this is where missing required
    fields, overlong values and uniqueness clashes surface.
    """

    def __init__(self, entity: str, violations: List[FieldViolation]):
        self.entity = entity
        self.violations = list(violations)
        first = self.violations[0] if self.violations else None
        super().__init__(
            f"{entity} violates schema constraints",
            details={v.field: v.reason for v in self.violations},
            code=first.code if first else ErrorCode.LD100,
        )

    @property
    def fields(self) -> List[str]:
        return [v.field for v in self.violations]


class StaleEntityError(PersistenceError):
    """Raised when an update targets a row version that is no longer current."""

    code = ErrorCode.LD902

    def __init__(self, entity: str, entity_id: int, expected_version: Optional[int]):
        super().__init__(
            f"{entity} {entity_id} was modified concurrently",
            details={"id": str(entity_id), "expected_version": str(expected_version)},
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version


class MigrationError(PersistenceError):
    """Raised when the schema cannot be created or upgraded."""

    code = ErrorCode.LD901
