"""Exception hierarchy for Analysis Ledger."""

from .base import LedgerError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError
from .persistence import (
    ConstraintViolationError,
    FieldViolation,
    MigrationError,
    PersistenceError,
    StaleEntityError,
)
from .taxonomy import ErrorCode
from .workflow import (
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidStateError,
    WorkflowError,
)

__all__ = [
    "LedgerError",
    "ErrorCode",
    "PersistenceError",
    "ConstraintViolationError",
    "FieldViolation",
    "StaleEntityError",
    "MigrationError",
    "WorkflowError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "InvalidStateError",
    "ConfigurationError",
    "InvalidConfigError",
    "ConfigFileError",
]
