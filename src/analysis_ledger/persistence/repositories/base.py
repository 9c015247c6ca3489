"""Shared repository machinery: CRUD, paging, filtering, timing.

Every write runs inside ``LedgerDB.transaction()``; when a service already
holds a unit of work the repository call joins it. Updates are guarded by
the row ``version`` so a concurrent writer's change is never silently
overwritten.
"""

from __future__ import annotations

import math
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Iterable, Iterator, Optional, Sequence, TypeVar

from ...exceptions import (
    ConstraintViolationError,
    ErrorCode,
    FieldViolation,
    PersistenceError,
    StaleEntityError,
)
from ...logging_config import get_logger
from ..database import CASEFOLD_FUNCTION, LedgerDB
from ..rows import to_db
from ..timing import LatencyRecorder, timed

logger = get_logger(__name__)

T = TypeVar("T")

# Keeps IN (...) lists below SQLite's host-parameter limit.
CHUNK_SIZE = 500


def like_pattern(text: str) -> str:
    """Casefolded ``%text%`` with LIKE wildcards escaped by backslash."""
    escaped = text.casefold().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass
class Page(Generic[T]):
    """One page of a filtered, ordered result set. Pages are zero-based."""

    items: list[T]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class Where:
    """Accumulates AND-ed SQL predicates. ``None`` arguments add nothing."""

    def __init__(self) -> None:
        self.clauses: list[str] = []
        self.params: list[Any] = []

    def eq(self, column: str, value: Any) -> "Where":
        if value is None:
            return self
        if isinstance(value, (list, tuple, set, frozenset)):
            values = [to_db(v) for v in value]
            if not values:
                self.clauses.append("0")
            else:
                self.clauses.append(f"{column} IN ({', '.join('?' * len(values))})")
                self.params.extend(values)
            return self
        self.clauses.append(f"{column} = ?")
        self.params.append(to_db(value))
        return self

    def is_null(self, column: str, flag: Optional[bool]) -> "Where":
        if flag is not None:
            self.clauses.append(f"{column} IS NULL" if flag else f"{column} IS NOT NULL")
        return self

    def contains(self, column: str, text: Optional[str]) -> "Where":
        """Case-insensitive substring match; ``%`` and ``_`` are literal."""
        return self.contains_any((column,), text)

    def contains_any(self, columns: Sequence[str], text: Optional[str]) -> "Where":
        """Substring match against any of *columns*."""
        if text is None:
            return self
        pattern = like_pattern(text)
        tests = [f"{CASEFOLD_FUNCTION}({column}) LIKE ? ESCAPE '\\'" for column in columns]
        self.clauses.append(tests[0] if len(tests) == 1 else f"({' OR '.join(tests)})")
        self.params.extend(pattern for _ in columns)
        return self

    def between(self, column: str, bounds: Optional[tuple[Any, Any]]) -> "Where":
        """Inclusive range; either end of *bounds* may be ``None``."""
        if bounds is None:
            return self
        low, high = bounds
        if low is not None:
            self.clauses.append(f"{column} >= ?")
            self.params.append(to_db(low))
        if high is not None:
            self.clauses.append(f"{column} <= ?")
            self.params.append(to_db(high))
        return self

    def before(self, column: str, value: Any) -> "Where":
        if value is not None:
            self.clauses.append(f"{column} < ?")
            self.params.append(to_db(value))
        return self

    def after(self, column: str, value: Any) -> "Where":
        if value is not None:
            self.clauses.append(f"{column} > ?")
            self.params.append(to_db(value))
        return self

    def raw(self, clause: str, *params: Any) -> "Where":
        self.clauses.append(f"({clause})")
        self.params.extend(to_db(p) for p in params)
        return self

    def sql(self) -> str:
        return f" WHERE {' AND '.join(self.clauses)}" if self.clauses else ""


def translate_integrity_error(entity_name: str, exc: sqlite3.IntegrityError) -> ConstraintViolationError:
    """Turn SQLite's constraint message into a ConstraintViolationError."""
    message = str(exc)
    if message.startswith("UNIQUE constraint failed:"):
        columns = [c.strip().split(".")[-1] for c in message.split(":", 1)[1].split(",")]
        violations = [FieldViolation(c, "already exists", ErrorCode.LD103) for c in columns]
    elif message.startswith("NOT NULL constraint failed:"):
        column = message.split(":", 1)[1].strip().split(".")[-1]
        violations = [FieldViolation(column, "must not be null", ErrorCode.LD100)]
    elif "FOREIGN KEY" in message:
        violations = [FieldViolation("reference", "referenced row missing or still referenced", ErrorCode.LD104)]
    else:
        violations = [FieldViolation("row", message, ErrorCode.LD102)]
    return ConstraintViolationError(entity_name, violations)


class BaseRepository(Generic[T]):
    """CRUD over one table. Subclasses supply the mapping hooks."""

    table: str = ""
    entity_name: str = ""
    metric_name: str = ""
    sortable: frozenset[str] = frozenset({"id", "created_at", "updated_at"})
    default_order: str = "id"

    def __init__(self, db: LedgerDB, recorder: Optional[LatencyRecorder] = None) -> None:
        self.db = db
        self.recorder = recorder

    @property
    def conn(self) -> sqlite3.Connection:
        return self.db.conn

    # ── hooks ─────────────────────────────────────────────────────

    def _to_row(self, entity: T) -> dict[str, Any]:
        raise NotImplementedError

    def _from_row(self, row: sqlite3.Row) -> T:
        raise NotImplementedError

    def _validate(self, entity: T) -> None:
        pass

    def _write_children(self, entity: T) -> None:
        pass

    def _attach_children(self, entities: list[T]) -> None:
        pass

    def _filter(self, where: Where, **criteria: Any) -> None:
        if criteria:
            raise TypeError(f"Unknown {self.entity_name} criteria: {', '.join(sorted(criteria))}")

    # ── statement helpers ─────────────────────────────────────────

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(self.entity_name, e) from e
        except sqlite3.Error as e:
            raise PersistenceError(f"{self.entity_name} statement failed: {e}") from e

    def _executemany(self, sql: str, rows: Iterable[Sequence[Any]]) -> None:
        try:
            self.conn.executemany(sql, rows)
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(self.entity_name, e) from e
        except sqlite3.Error as e:
            raise PersistenceError(f"{self.entity_name} statement failed: {e}") from e

    def _order_clause(self, order_by: Optional[str]) -> str:
        """``"name"`` ascending, ``"-name"`` descending; id breaks ties."""
        key = order_by or self.default_order
        descending = key.startswith("-")
        column = key.lstrip("-")
        if column not in self.sortable:
            raise ValueError(f"Cannot order {self.entity_name} by {column!r}")
        direction = "DESC" if descending else "ASC"
        if column == "id":
            return f"id {direction}"
        return f"{column} {direction}, id {direction}"

    def _where(self, criteria: dict[str, Any]) -> Where:
        where = Where()
        self._filter(where, **criteria)
        return where

    def _select(
        self,
        where: Where,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[T]:
        sql = f"SELECT * FROM {self.table}{where.sql()} ORDER BY {self._order_clause(order_by)}"
        params = list(where.params)
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        rows = self._execute(sql, params).fetchall()
        entities = [self._from_row(r) for r in rows]
        if entities:
            self._attach_children(entities)
        return entities

    def _count(self, where: Where) -> int:
        row = self._execute(f"SELECT COUNT(*) FROM {self.table}{where.sql()}", where.params).fetchone()
        return int(row[0])

    # ── reads ─────────────────────────────────────────────────────

    @timed("get")
    def get(self, entity_id: int) -> Optional[T]:
        """Entity by id, or ``None``."""
        found = self._select(Where().eq("id", entity_id))
        return found[0] if found else None

    @timed("get_many")
    def get_many(self, ids: Iterable[int]) -> list[T]:
        ids = list(ids)
        result: list[T] = []
        for start in range(0, len(ids), CHUNK_SIZE):
            result.extend(self._select(Where().eq("id", ids[start : start + CHUNK_SIZE])))
        return result

    @timed("exists")
    def exists(self, entity_id: int) -> bool:
        row = self._execute(f"SELECT 1 FROM {self.table} WHERE id = ?", (entity_id,)).fetchone()
        return row is not None

    @timed("find")
    def find(self, order_by: Optional[str] = None, limit: Optional[int] = None, **criteria: Any) -> list[T]:
        """All entities matching *criteria*, ordered."""
        return self._select(self._where(criteria), order_by=order_by, limit=limit)

    def find_all(self, order_by: Optional[str] = None) -> list[T]:
        return self.find(order_by=order_by)

    @timed("find_page")
    def find_page(
        self,
        page: int = 0,
        size: Optional[int] = None,
        order_by: Optional[str] = None,
        **criteria: Any,
    ) -> Page[T]:
        """One zero-based page of matching entities plus the total count."""
        config = self.db.config
        size = config.default_page_size if size is None else size
        if page < 0:
            raise ValueError("page must be >= 0")
        if size < 1 or size > config.max_page_size:
            raise ValueError(f"size must be between 1 and {config.max_page_size}")
        where = self._where(criteria)
        items = self._select(where, order_by=order_by, limit=size, offset=page * size)
        return Page(items=items, page=page, size=size, total=self._count(where))

    @timed("count")
    def count(self, **criteria: Any) -> int:
        return self._count(self._where(criteria))

    # ── writes ────────────────────────────────────────────────────

    @contextmanager
    def _restoring(self, entities: Sequence[T]) -> Iterator[None]:
        """Undo in-memory id/version/timestamp changes if the write fails."""
        state = [(e.id, e.version, e.created_at, e.updated_at) for e in entities]
        try:
            yield
        except BaseException:
            for entity, (id_, version, created, updated) in zip(entities, state):
                entity.id, entity.version = id_, version
                entity.created_at, entity.updated_at = created, updated
            raise

    def _insert(self, entity: T, row: dict[str, Any], now: datetime) -> None:
        created = entity.created_at or now
        columns = list(row) + ["created_at", "updated_at", "version"]
        values = list(row.values()) + [to_db(created), to_db(now), 1]
        if entity.id is not None:
            columns.insert(0, "id")
            values.insert(0, entity.id)
        sql = f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({', '.join('?' * len(columns))})"
        cur = self._execute(sql, values)
        if entity.id is None:
            entity.id = cur.lastrowid
        entity.created_at = created
        entity.updated_at = now
        entity.version = 1

    def _update(self, entity: T, row: dict[str, Any], now: datetime) -> None:
        assignments = ", ".join(f"{c} = ?" for c in row)
        sql = f"UPDATE {self.table} SET {assignments}, updated_at = ?, version = version + 1 WHERE id = ?"
        params = list(row.values()) + [to_db(now), entity.id]
        checked = entity.version is not None
        if checked:
            sql += " AND version = ?"
            params.append(entity.version)
        cur = self._execute(sql, params)
        if cur.rowcount == 0:
            if checked:
                raise StaleEntityError(self.entity_name, entity.id, entity.version)
            self._insert(entity, row, now)
            return
        if checked:
            entity.version += 1
        else:
            entity.version = self._execute(
                f"SELECT version FROM {self.table} WHERE id = ?", (entity.id,)
            ).fetchone()[0]
        entity.updated_at = now

    def _write(self, entity: T, now: datetime) -> None:
        self._validate(entity)
        row = self._to_row(entity)
        if entity.id is None:
            self._insert(entity, row, now)
        else:
            self._update(entity, row, now)
        self._write_children(entity)

    @timed("save")
    def save(self, entity: T) -> T:
        """Insert or update *entity*; assigns id, timestamps and version."""
        with self._restoring([entity]), self.db.transaction():
            self._write(entity, datetime.now())
        return entity

    @timed("save_all")
    def save_all(self, entities: Iterable[T]) -> list[T]:
        """Save every entity in one transaction; all or nothing."""
        entities = list(entities)
        now = datetime.now()
        with self._restoring(entities), self.db.transaction():
            for entity in entities:
                self._write(entity, now)
        logger.debug("Saved %d %s rows", len(entities), self.table)
        return entities

    @timed("delete")
    def delete(self, entity: T) -> bool:
        if entity.id is None:
            return False
        return self._delete_ids([entity.id]) > 0

    @timed("delete_by_id")
    def delete_by_id(self, entity_id: int) -> bool:
        return self._delete_ids([entity_id]) > 0

    @timed("delete_all")
    def delete_all(self, entities: Optional[Iterable[T]] = None) -> int:
        """Delete the given entities (or every row) in one transaction."""
        if entities is None:
            with self.db.transaction():
                return self._execute(f"DELETE FROM {self.table}").rowcount
        ids = [e.id for e in entities if e.id is not None]
        return self._delete_ids(ids)

    def _delete_ids(self, ids: list[int]) -> int:
        deleted = 0
        with self.db.transaction():
            for start in range(0, len(ids), CHUNK_SIZE):
                chunk = ids[start : start + CHUNK_SIZE]
                cur = self._execute(
                    f"DELETE FROM {self.table} WHERE id IN ({', '.join('?' * len(chunk))})", chunk
                )
                deleted += cur.rowcount
        return deleted
