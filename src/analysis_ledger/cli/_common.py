"""Shared CLI helpers."""

import json
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

import typer
from rich.console import Console

from ..config import LedgerConfig
from ..domain import Project
from ..exceptions import EntityNotFoundError, LedgerError
from ..persistence import LedgerDB
from ..services import Ledger

console = Console()

_SEVERITY_STYLES = {
    "CRITICAL": "bold red",
    "HIGH": "red",
    "MEDIUM": "yellow",
    "LOW": "cyan",
    "INFO": "dim",
}


def get_config(ctx: typer.Context) -> LedgerConfig:
    return ctx.obj["config"]


@contextmanager
def open_ledger(ctx: typer.Context) -> Iterator[Ledger]:
    """Open the configured database; ledger errors end the command with exit 1."""
    try:
        with LedgerDB(get_config(ctx)) as db:
            yield Ledger(db)
    except LedgerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def resolve_project(ledger: Ledger, ref: str) -> Project:
    """Look a project up by numeric id, falling back to its name."""
    project = ledger.projects.get(int(ref)) if ref.isdigit() else None
    if project is None:
        project = ledger.projects.get_by_name(ref)
    if project is None:
        raise EntityNotFoundError("Project", ref, field="id or name")
    return project


def fmt_ts(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def fmt_score(value: Optional[float]) -> str:
    return f"{value:.1f}" if value is not None else "-"


def severity_style(name: str) -> str:
    return _SEVERITY_STYLES.get(name, "")


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))
