"""SQLite-backed ledger database.

One ``LedgerDB`` owns one connection. Statements run in autocommit mode
unless wrapped in ``transaction()``, which is the unit of work used by the
repositories and services.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..config import MEMORY_DATABASE, LedgerConfig
from ..exceptions import MigrationError, PersistenceError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

# SQL LOWER() only folds ASCII; substring filters call this instead.
CASEFOLD_FUNCTION = "ledger_casefold"


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id            INTEGER PRIMARY KEY AUTOINCREMENT,
        username      TEXT    NOT NULL UNIQUE,
        email         TEXT    NOT NULL UNIQUE,
        password_hash TEXT,
        role          TEXT    NOT NULL,
        is_active     INTEGER NOT NULL DEFAULT 1,
        first_name    TEXT,
        last_name     TEXT,
        last_login    TEXT,
        created_at    TEXT    NOT NULL,
        updated_at    TEXT    NOT NULL,
        version       INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS projects (
        id                 INTEGER PRIMARY KEY AUTOINCREMENT,
        name               TEXT    NOT NULL UNIQUE,
        description        TEXT,
        owner_id           INTEGER REFERENCES users(id) ON DELETE SET NULL,
        status             TEXT    NOT NULL,
        repository_url     TEXT,
        project_path       TEXT,
        technology_stack   TEXT,
        files_count        INTEGER,
        directories_count  INTEGER,
        lines_of_code      INTEGER,
        last_analysis_date TEXT,
        created_at         TEXT    NOT NULL,
        updated_at         TEXT    NOT NULL,
        version            INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS analyses (
        id                  INTEGER PRIMARY KEY AUTOINCREMENT,
        project_id          INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
        user_id             INTEGER NOT NULL REFERENCES users(id),
        analysis_type       TEXT    NOT NULL,
        status              TEXT    NOT NULL,
        start_time          TEXT,
        end_time            TEXT,
        duration_seconds    INTEGER,
        lines_analyzed      INTEGER,
        files_analyzed      INTEGER,
        compliance_score    REAL,
        quality_score       REAL,
        security_score      REAL,
        performance_score   REAL,
        total_violations    INTEGER,
        critical_violations INTEGER,
        warning_violations  INTEGER,
        info_violations     INTEGER,
        summary             TEXT,
        created_at          TEXT    NOT NULL,
        updated_at          TEXT    NOT NULL,
        version             INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS analysis_metrics (
        analysis_id  INTEGER NOT NULL REFERENCES analyses(id) ON DELETE CASCADE,
        metric_key   TEXT    NOT NULL,
        metric_value TEXT    NOT NULL,
        PRIMARY KEY (analysis_id, metric_key)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS analysis_errors (
        analysis_id   INTEGER NOT NULL REFERENCES analyses(id) ON DELETE CASCADE,
        position      INTEGER NOT NULL,
        error_message TEXT    NOT NULL,
        PRIMARY KEY (analysis_id, position)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS compliance_violations (
        id                 INTEGER PRIMARY KEY AUTOINCREMENT,
        project_id         INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
        analysis_id        INTEGER REFERENCES analyses(id) ON DELETE SET NULL,
        rule_id            TEXT    NOT NULL,
        rule_name          TEXT    NOT NULL,
        rule_category      TEXT    NOT NULL,
        severity           TEXT    NOT NULL,
        message            TEXT    NOT NULL,
        file_path          TEXT,
        line_number        INTEGER,
        column_number      INTEGER,
        code_snippet       TEXT,
        suggestion         TEXT,
        status             TEXT    NOT NULL,
        resolved_by        TEXT,
        resolved_at        TEXT,
        resolution_notes   TEXT,
        false_positive     INTEGER NOT NULL DEFAULT 0,
        suppressed_until   TEXT,
        suppression_reason TEXT,
        created_at         TEXT    NOT NULL,
        updated_at         TEXT    NOT NULL,
        version            INTEGER NOT NULL DEFAULT 1
    )
    """,
)

_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_projects_owner ON projects(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_projects_status ON projects(status)",
    "CREATE INDEX IF NOT EXISTS idx_analyses_project ON analyses(project_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_analyses_user ON analyses(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_analyses_status ON analyses(status)",
    "CREATE INDEX IF NOT EXISTS idx_violations_project ON compliance_violations(project_id, status)",
    "CREATE INDEX IF NOT EXISTS idx_violations_analysis ON compliance_violations(analysis_id)",
    "CREATE INDEX IF NOT EXISTS idx_violations_severity ON compliance_violations(severity)",
    "CREATE INDEX IF NOT EXISTS idx_violations_rule ON compliance_violations(rule_id)",
)

TABLE_NAMES = (
    "users",
    "projects",
    "analyses",
    "analysis_metrics",
    "analysis_errors",
    "compliance_violations",
)


class LedgerDB:
    """Manages the ledger SQLite database.

    Usage::

        with LedgerDB(config) as db:
            with db.transaction():
                projects.save(project)
    """

    def __init__(self, config: Optional[LedgerConfig] = None, db_path: Optional[str] = None) -> None:
        self.config = config or LedgerConfig()
        self.db_path: str = db_path or self.config.database_path
        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0

    @classmethod
    def in_memory(cls, config: Optional[LedgerConfig] = None) -> "LedgerDB":
        return cls(config, db_path=MEMORY_DATABASE)

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("LedgerDB is not connected. Use as context manager or call connect().")
        return self._conn

    @property
    def is_memory(self) -> bool:
        return self.db_path == MEMORY_DATABASE

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    # ── lifecycle ─────────────────────────────────────────────────

    def _ensure_dir(self) -> None:
        if not self.is_memory:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        if self._conn is not None:
            return self._conn
        self._ensure_dir()
        try:
            conn = sqlite3.connect(
                self.db_path,
                isolation_level=None,
                timeout=self.config.busy_timeout_seconds,
            )
            conn.execute(f"PRAGMA journal_mode={self.config.journal_mode}")
            conn.execute(f"PRAGMA synchronous={self.config.synchronous}")
            conn.execute(f"PRAGMA busy_timeout={int(self.config.busy_timeout_ms)}")
            conn.execute("PRAGMA foreign_keys=ON")
            conn.create_function(CASEFOLD_FUNCTION, 1, _casefold, deterministic=True)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open ledger database: {e}", details={"path": self.db_path}) from e
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("Ledger DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._depth = 0

    def __enter__(self) -> "LedgerDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── unit of work ──────────────────────────────────────────────

    @contextmanager
    def transaction(self, immediate: bool = True) -> Iterator[sqlite3.Connection]:
        """Run the enclosed block atomically.

        The outermost call opens the transaction (``BEGIN IMMEDIATE`` takes
        the write lock up front). Nested calls run inside a savepoint, so an
        exception that escapes the inner block undoes only its writes if the
        caller handles it, and everything if it propagates.
        """
        conn = self.conn
        if self._depth == 0:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            self._depth = 1
            try:
                yield conn
            except BaseException:
                self._depth = 0
                conn.execute("ROLLBACK")
                raise
            self._depth = 0
            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                conn.execute("ROLLBACK")
                raise PersistenceError(f"Commit failed: {e}") from e
            return

        self._depth += 1
        savepoint = f"sp_{self._depth}"
        conn.execute(f"SAVEPOINT {savepoint}")
        try:
            yield conn
        except BaseException:
            conn.execute(f"ROLLBACK TO {savepoint}")
            conn.execute(f"RELEASE {savepoint}")
            raise
        else:
            conn.execute(f"RELEASE {savepoint}")
        finally:
            self._depth -= 1

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create / upgrade all tables."""
        try:
            with self.transaction():
                c = self.conn
                c.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
                row = c.execute("SELECT version FROM schema_version").fetchone()
                if row is None:
                    c.execute("INSERT INTO schema_version (version) VALUES (?)", (_SCHEMA_VERSION,))
                elif row["version"] > _SCHEMA_VERSION:
                    raise MigrationError(
                        f"Database schema v{row['version']} is newer than supported v{_SCHEMA_VERSION}",
                        details={"path": self.db_path},
                    )
                for ddl in _TABLES:
                    c.execute(ddl)
                for ddl in _INDEXES:
                    c.execute(ddl)
        except sqlite3.Error as e:
            raise MigrationError(f"Schema migration failed: {e}", details={"path": self.db_path}) from e

    def schema_version(self) -> int:
        row = self.conn.execute("SELECT version FROM schema_version").fetchone()
        return int(row["version"]) if row else 0

    def table_counts(self) -> dict[str, int]:
        """Row count per ledger table."""
        return {
            table: int(self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])
            for table in TABLE_NAMES
        }
