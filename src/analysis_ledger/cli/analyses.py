"""Analyses CLI command -- list a project's analysis runs and scores."""

from typing import Optional

import typer
from rich.table import Table

from . import app
from ._common import console, fmt_score, fmt_ts, open_ledger, print_json, resolve_project


@app.command()
def analyses(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project id or name"),
    page: int = typer.Option(0, "--page", min=0, help="Zero-based page number"),
    size: Optional[int] = typer.Option(None, "--size", min=1, help="Page size"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List a project's analyses, newest first.

    [bold cyan]Examples:[/bold cyan]

      analysis-ledger analyses my-service

      analysis-ledger analyses 3 --json
    """
    with open_ledger(ctx) as ledger:
        target = resolve_project(ledger, project)
        result = ledger.analyses.list_for_project(target.id, page=page, size=size)

    if json_output:
        print_json(
            {
                "project": target.name,
                "total": result.total,
                "analyses": [
                    {
                        "id": a.id,
                        "type": a.type.value,
                        "status": a.status.value,
                        "start_time": a.start_time,
                        "end_time": a.end_time,
                        "duration_seconds": a.duration_seconds,
                        "overall_score": a.overall_score,
                        "total_violations": a.total_violations,
                        "errors": a.errors,
                    }
                    for a in result
                ],
            }
        )
        return

    if not result.items:
        console.print(f"[yellow]No analyses recorded for {target.name}.[/yellow]")
        return

    table = Table(title=f"Analyses of {target.name}", pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Started", style="green")
    table.add_column("Duration", justify="right")
    table.add_column("Overall", justify="right")
    table.add_column("Violations", justify="right", style="yellow")
    for a in result:
        table.add_row(
            str(a.id),
            a.type.display_name,
            a.status.display_name,
            fmt_ts(a.start_time),
            f"{a.duration_seconds}s" if a.duration_seconds is not None else "-",
            fmt_score(a.overall_score),
            str(a.total_violations) if a.total_violations is not None else "-",
        )
    console.print(table)
