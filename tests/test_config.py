"""Tests for configuration loading and validation."""

import os

import pytest

from analysis_ledger.config import LedgerConfig, load_config
from analysis_ledger.exceptions import ConfigFileError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep ~/.analysis-ledger.toml, ./analysis-ledger.toml and LEDGER_* out of the way."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("LEDGER_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_contract_defaults(self):
        config = load_config()
        assert config.single_op_p95_ms == 100.0
        assert config.bulk_op_p95_ms == 500.0
        assert config.benchmark_iterations == 150
        assert config.benchmark_bulk_size == 150
        assert config.default_page_size == 20

    def test_in_memory(self):
        assert LedgerConfig(database_path=":memory:").in_memory
        assert not LedgerConfig().in_memory

    def test_busy_timeout_seconds(self):
        assert LedgerConfig(busy_timeout_ms=2500).busy_timeout_seconds == 2.5


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"database_path": ""},
            {"journal_mode": "ROLLBACK"},
            {"synchronous": "SOMETIMES"},
            {"busy_timeout_ms": -1},
            {"default_page_size": 0},
            {"default_page_size": 50, "max_page_size": 10},
            {"single_op_p95_ms": 0},
            {"bulk_op_p95_ms": -5},
            {"benchmark_iterations": 0},
            {"benchmark_bulk_size": 0},
            {"benchmark_bulk_rounds": 0},
        ],
    )
    def test_rejects_bad_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            LedgerConfig(**kwargs)


class TestSources:
    def test_project_file(self, tmp_path):
        (tmp_path / "analysis-ledger.toml").write_text('database_path = "project.db"\n')
        assert load_config().database_path == "project.db"

    def test_global_file(self, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        (home / ".analysis-ledger.toml").write_text("default_page_size = 5\n")
        assert load_config().default_page_size == 5

    def test_ledger_table(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("[ledger]\nsingle_op_p95_ms = 50.0\n")
        assert load_config(path).single_op_p95_ms == 50.0

    def test_explicit_file_overrides_project_file(self, tmp_path):
        (tmp_path / "analysis-ledger.toml").write_text('database_path = "project.db"\n')
        explicit = tmp_path / "explicit.toml"
        explicit.write_text('database_path = "explicit.db"\n')
        assert load_config(explicit).database_path == "explicit.db"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "analysis-ledger.toml").write_text("benchmark_iterations = 10\n")
        monkeypatch.setenv("LEDGER_BENCHMARK_ITERATIONS", "25")
        monkeypatch.setenv("LEDGER_BULK_OP_P95_MS", "750")
        config = load_config()
        assert config.benchmark_iterations == 25
        assert config.bulk_op_p95_ms == 750.0

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("LEDGER_DATABASE_PATH", "env.db")
        assert load_config(database_path="flag.db").database_path == "flag.db"
        assert load_config(database_path=None).database_path == "env.db"

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("LEDGER_MAX_PAGE_SIZE", "lots")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config()
        assert exc_info.value.key == "max_page_size"

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("colour = 'red'\n")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.key == "colour"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileError):
            load_config(tmp_path / "nope.toml")

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("database_path = \n")
        with pytest.raises(ConfigFileError):
            load_config(path)
