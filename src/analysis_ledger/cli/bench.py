"""Bench CLI command -- measure the repository P95 latency contract."""

from dataclasses import replace
from typing import List, Optional

import typer
from rich.table import Table

from ..benchmark import ENTITY_TYPES, run_benchmark
from ..exceptions import LedgerError
from ..persistence import LedgerDB
from . import app
from ._common import console, get_config, print_json


@app.command()
def bench(
    ctx: typer.Context,
    entity: Optional[List[str]] = typer.Option(
        None,
        "--entity",
        "-e",
        help="Entity type to benchmark: user, project, analysis, violation (repeatable; default: all)",
    ),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-n", min=1, help="CRUD cycles per entity"),
    bulk_size: Optional[int] = typer.Option(None, "--bulk-size", min=1, help="Entities per bulk operation"),
    rounds: Optional[int] = typer.Option(None, "--rounds", min=1, help="Bulk rounds per entity"),
    on_disk: bool = typer.Option(
        False,
        "--on-disk",
        help="Benchmark the configured database file instead of a scratch in-memory one",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Run the P95 latency benchmark.

    Exits with code 1 when any operation exceeds its budget.

    [bold cyan]Examples:[/bold cyan]

      analysis-ledger bench

      analysis-ledger bench --entity project --iterations 500 --on-disk
    """
    entity_types = [e.lower() for e in entity] if entity else list(ENTITY_TYPES)
    unknown = sorted(set(entity_types) - set(ENTITY_TYPES))
    if unknown:
        console.print(f"[red]Unknown entity type:[/red] {', '.join(unknown)}")
        raise typer.Exit(2)

    config = get_config(ctx)
    overrides = {
        "benchmark_iterations": iterations,
        "benchmark_bulk_size": bulk_size,
        "benchmark_bulk_rounds": rounds,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})

    db = LedgerDB(config) if on_disk else LedgerDB.in_memory(config)
    try:
        with db:
            result = run_benchmark(db, config, entity_types)
    except LedgerError as e:
        console.print(f"[red]Benchmark failed:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print_json(result.to_dict())
    else:
        table = Table(title="Repository latency (ms)", pad_edge=True)
        table.add_column("Operation", style="cyan")
        table.add_column("N", justify="right")
        table.add_column("P50", justify="right")
        table.add_column("P95", justify="right", style="bold")
        table.add_column("Max", justify="right", style="dim")
        table.add_column("Budget", justify="right")
        table.add_column("")
        for r in result.results:
            s = r.summary
            table.add_row(
                r.operation,
                str(s.count),
                f"{s.p50_ms:.2f}",
                f"{s.p95_ms:.2f}",
                f"{s.max_ms:.2f}",
                f"{r.budget_ms:.0f}",
                "[green]ok[/green]" if r.passed else "[red]over[/red]",
            )
        console.print(table)

    if not result.passed:
        raise typer.Exit(1)
