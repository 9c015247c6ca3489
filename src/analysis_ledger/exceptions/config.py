"""Configuration exceptions: bad values and unreadable config files."""

from pathlib import Path
from typing import Any

from .base import LedgerError
from .taxonomy import ErrorCode


class ConfigurationError(LedgerError):
    """Base class for configuration-related errors."""

    code = ErrorCode.LD800


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ConfigFileError(ConfigurationError):
    """Raised when a config file is missing or cannot be parsed."""

    code = ErrorCode.LD801

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid config file '{path}'", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason
