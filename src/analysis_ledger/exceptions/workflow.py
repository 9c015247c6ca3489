"""Service-layer workflow errors: missing entities, duplicates, bad state."""

from typing import Any

from .base import LedgerError
from .taxonomy import ErrorCode


class WorkflowError(LedgerError):
    """Base class for errors raised by service workflows."""

    pass


class EntityNotFoundError(WorkflowError):
    """Raised when a workflow needs an entity that does not exist."""

    code = ErrorCode.LD200

    def __init__(self, entity: str, key: Any, field: str = "id"):
        super().__init__(
            f"{entity} not found with {field}: {key}",
            details={"entity": entity, field: str(key)},
        )
        self.entity = entity
        self.key = key
        self.field = field


class DuplicateEntityError(WorkflowError):
    """Raised when a natural key (e.g. project name) is already taken."""

    code = ErrorCode.LD201

    def __init__(self, entity: str, field: str, value: Any):
        super().__init__(
            f"{entity} with {field} '{value}' already exists",
            details={"entity": entity, field: str(value)},
        )
        self.entity = entity
        self.field = field
        self.value = value


class InvalidStateError(WorkflowError):
    """Raised when a workflow refuses to act on an entity's current status."""

    code = ErrorCode.LD202

    def __init__(self, entity: str, entity_id: Any, status: str, expected: str):
        super().__init__(
            f"{entity} {entity_id} is {status}, expected {expected}",
            details={"id": str(entity_id), "status": status, "expected": expected},
        )
        self.entity = entity
        self.entity_id = entity_id
        self.status = status
        self.expected = expected
