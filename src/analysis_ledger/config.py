"""Configuration loading and management for Analysis Ledger.

Configuration sources are merged in priority order:
    1. Defaults (defined in LedgerConfig)
    2. Global config (~/.analysis-ledger.toml)
    3. Project config (./analysis-ledger.toml)
    4. Explicit config file
    5. Environment variables (LEDGER_* prefix)
    6. Keyword overrides (CLI flags, tests)

Example:
    >>> config = load_config(database_path=":memory:")
    >>> config.single_op_p95_ms
    100.0
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigFileError, InvalidConfigError

JournalMode = Literal["WAL", "DELETE", "MEMORY", "TRUNCATE"]
SyncMode = Literal["OFF", "NORMAL", "FULL"]

MEMORY_DATABASE = ":memory:"


@dataclass(frozen=True)
class LedgerConfig:
    """Settings for the ledger database and its latency contract.

    Attributes:
        Storage:
            database_path: SQLite file (or ``:memory:``)
            journal_mode: SQLite journal mode
            synchronous: SQLite synchronous pragma
            busy_timeout_ms: How long a writer waits for the lock

        Paging:
            default_page_size: Page size when callers do not pass one
            max_page_size: Upper bound for requested page sizes

        Latency contract:
            single_op_p95_ms: P95 budget for one create/read/update/delete
            bulk_op_p95_ms: P95 budget for a bulk save/delete
            benchmark_iterations: CRUD cycles measured per entity type
            benchmark_bulk_size: Entities per bulk operation
            benchmark_bulk_rounds: Bulk rounds measured per entity type
    """

    # Storage
    database_path: str = ".ledger/ledger.db"
    journal_mode: JournalMode = "WAL"
    synchronous: SyncMode = "NORMAL"
    busy_timeout_ms: int = 5000

    # Paging
    default_page_size: int = 20
    max_page_size: int = 500

    # Latency contract
    single_op_p95_ms: float = 100.0
    bulk_op_p95_ms: float = 500.0
    benchmark_iterations: int = 150
    benchmark_bulk_size: int = 150
    benchmark_bulk_rounds: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.database_path:
            raise InvalidConfigError("database_path", self.database_path, "must not be empty")
        if self.journal_mode not in ("WAL", "DELETE", "MEMORY", "TRUNCATE"):
            raise InvalidConfigError("journal_mode", self.journal_mode, "unsupported journal mode")
        if self.synchronous not in ("OFF", "NORMAL", "FULL"):
            raise InvalidConfigError("synchronous", self.synchronous, "unsupported synchronous mode")
        if self.busy_timeout_ms < 0:
            raise InvalidConfigError("busy_timeout_ms", self.busy_timeout_ms, "must be non-negative")

        if self.default_page_size < 1:
            raise InvalidConfigError("default_page_size", self.default_page_size, "must be at least 1")
        if self.max_page_size < self.default_page_size:
            raise InvalidConfigError(
                "max_page_size", self.max_page_size, "must be >= default_page_size"
            )

        if self.single_op_p95_ms <= 0:
            raise InvalidConfigError("single_op_p95_ms", self.single_op_p95_ms, "must be positive")
        if self.bulk_op_p95_ms <= 0:
            raise InvalidConfigError("bulk_op_p95_ms", self.bulk_op_p95_ms, "must be positive")
        if self.benchmark_iterations < 1:
            raise InvalidConfigError(
                "benchmark_iterations", self.benchmark_iterations, "must be at least 1"
            )
        if self.benchmark_bulk_size < 1:
            raise InvalidConfigError("benchmark_bulk_size", self.benchmark_bulk_size, "must be at least 1")
        if self.benchmark_bulk_rounds < 1:
            raise InvalidConfigError(
                "benchmark_bulk_rounds", self.benchmark_bulk_rounds, "must be at least 1"
            )

    @property
    def in_memory(self) -> bool:
        return self.database_path == MEMORY_DATABASE

    @property
    def busy_timeout_seconds(self) -> float:
        return self.busy_timeout_ms / 1000.0


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> LedgerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated LedgerConfig instance

    Raises:
        ConfigFileError: If a config file is missing or unparseable
        InvalidConfigError: If a merged value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".analysis-ledger.toml"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / "analysis-ledger.toml"
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    merged.update({k: v for k, v in overrides.items() if v is not None})

    # [ledger] table is accepted as an alias for top-level keys
    section = merged.pop("ledger", None)
    if isinstance(section, dict):
        merged = {**section, **merged}

    unknown = set(merged) - set(LedgerConfig.__dataclass_fields__)
    if unknown:
        key = sorted(unknown)[0]
        raise InvalidConfigError(key, merged[key], "unknown configuration key")

    return LedgerConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from LEDGER_* environment variables.

    ``LEDGER_DATABASE_PATH=/tmp/x.db`` sets ``database_path`` and so on for
    every LedgerConfig field.
    """
    type_hints = get_type_hints(LedgerConfig)

    result: dict[str, Any] = {}

    for field_name in LedgerConfig.__dataclass_fields__:
        env_key = f"LEDGER_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            result[field_name] = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(field_name, env_value, f"bad {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # str and Literal aliases
    return value


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e))
