"""CLI entry point: registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..config import load_config
from ..exceptions import LedgerError
from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="analysis-ledger",
    help="Analysis Ledger - analysis runs, scores and compliance violations",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"analysis-ledger {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(
        None,
        "--db",
        help="SQLite database file (default: .ledger/ledger.db)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Append DEBUG logs to this file"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Inspect and benchmark the analysis ledger."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        settings = load_config(config_file=config, database_path=db)
    except LedgerError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)
    ctx.obj = {"config": settings}


# Import subcommands to register them
from .init import init as _init  # noqa: F401, E402
from .projects import projects as _projects  # noqa: F401, E402
from .analyses import analyses as _analyses  # noqa: F401, E402
from .violations import violations as _violations  # noqa: F401, E402
from .report import report as _report  # noqa: F401, E402
from .bench import bench as _bench  # noqa: F401, E402


def main() -> None:
    app()
