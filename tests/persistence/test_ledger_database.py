"""Tests for LedgerDB: connection, migration and the unit of work."""

import sqlite3

import pytest

from analysis_ledger.config import LedgerConfig
from analysis_ledger.domain import User
from analysis_ledger.exceptions import MigrationError
from analysis_ledger.persistence import LedgerDB
from analysis_ledger.persistence.database import TABLE_NAMES


class TestConnection:
    def test_conn_requires_connect(self):
        db = LedgerDB.in_memory()
        with pytest.raises(RuntimeError):
            db.conn

    def test_in_memory_flag(self):
        assert LedgerDB.in_memory().is_memory
        assert not LedgerDB(LedgerConfig(database_path="x/y.db")).is_memory

    def test_connect_is_idempotent(self, db):
        assert db.connect() is db.conn

    def test_file_database_creates_parent_dir(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "ledger.db"
        with LedgerDB(LedgerConfig(database_path=str(path))):
            pass
        assert path.exists()

    def test_file_database_pragmas(self, file_db):
        assert file_db.conn.execute("PRAGMA journal_mode").fetchone()[0].lower() == "wal"
        assert file_db.conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_close_resets(self, tmp_path):
        db = LedgerDB(LedgerConfig(database_path=str(tmp_path / "a.db")))
        db.connect()
        db.close()
        with pytest.raises(RuntimeError):
            db.conn


class TestMigration:
    def test_all_tables_created(self, db):
        names = {
            row[0] for row in db.conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert set(TABLE_NAMES) <= names
        assert "schema_version" in names

    def test_schema_version(self, db):
        assert db.schema_version() == 1

    def test_table_counts_start_empty(self, db):
        assert db.table_counts() == {table: 0 for table in TABLE_NAMES}

    def test_reopen_keeps_data(self, tmp_path):
        config = LedgerConfig(database_path=str(tmp_path / "ledger.db"))
        with LedgerDB(config) as db:
            db.conn.execute(
                "INSERT INTO users (username, email, role, created_at, updated_at) "
                "VALUES ('a', 'a@x.io', 'VIEWER', '2024-01-01', '2024-01-01')"
            )
        with LedgerDB(config) as db:
            assert db.table_counts()["users"] == 1
            assert db.conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0] == 1

    def test_newer_schema_refused(self, tmp_path):
        path = tmp_path / "ledger.db"
        with LedgerDB(LedgerConfig(database_path=str(path))):
            pass
        raw = sqlite3.connect(path)
        raw.execute("UPDATE schema_version SET version = 99")
        raw.commit()
        raw.close()

        db = LedgerDB(LedgerConfig(database_path=str(path)))
        with pytest.raises(MigrationError):
            db.connect()
        db.close()


class TestTransaction:
    def _count_users(self, db):
        return db.conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]

    def _insert_user(self, db, name):
        db.conn.execute(
            "INSERT INTO users (username, email, role, created_at, updated_at) "
            "VALUES (?, ?, 'VIEWER', '2024-01-01', '2024-01-01')",
            (name, f"{name}@example.com"),
        )

    def test_commit(self, db):
        with db.transaction():
            assert db.in_transaction
            self._insert_user(db, "a")
        assert not db.in_transaction
        assert self._count_users(db) == 1

    def test_rollback_on_error(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction():
                self._insert_user(db, "a")
                raise RuntimeError("boom")
        assert not db.in_transaction
        assert self._count_users(db) == 0

    def test_nested_failure_rolls_back_only_inner(self, db):
        with db.transaction():
            self._insert_user(db, "outer")
            with pytest.raises(ValueError):
                with db.transaction():
                    self._insert_user(db, "inner")
                    raise ValueError("inner failed")
            assert db.in_transaction
        assert self._count_users(db) == 1
        assert db.conn.execute("SELECT username FROM users").fetchone()[0] == "outer"

    def test_propagated_inner_failure_rolls_back_everything(self, db):
        with pytest.raises(ValueError):
            with db.transaction():
                self._insert_user(db, "outer")
                with db.transaction():
                    self._insert_user(db, "inner")
                    raise ValueError("inner failed")
        assert self._count_users(db) == 0

    def test_repository_save_joins_outer_transaction(self, db, repos):
        with pytest.raises(RuntimeError):
            with db.transaction():
                repos.users.save(User(username="bob", email="bob@example.com"))
                raise RuntimeError("abort")
        assert repos.users.count() == 0
