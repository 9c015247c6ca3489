"""Init CLI command -- create the ledger database and its schema."""

import typer
from rich.table import Table

from . import app
from ._common import console, get_config, open_ledger, print_json


@app.command()
def init(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Create (or upgrade) the ledger database.

    Safe to run repeatedly: tables are only created when missing.

    [bold cyan]Examples:[/bold cyan]

      analysis-ledger init

      analysis-ledger --db /tmp/ledger.db init
    """
    config = get_config(ctx)
    with open_ledger(ctx) as ledger:
        version = ledger.db.schema_version()
        counts = ledger.db.table_counts()

    if json_output:
        print_json({"database": config.database_path, "schema_version": version, "tables": counts})
        return

    console.print(f"[green]Ledger ready[/green] at [bold]{config.database_path}[/bold] (schema v{version})")
    table = Table(show_header=True, pad_edge=True)
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, n in counts.items():
        table.add_row(name, str(n))
    console.print(table)
