"""Projects CLI command -- list projects with their status."""

from typing import Optional

import click
import typer
from rich.table import Table

from ..domain import ProjectStatus
from . import app
from ._common import console, fmt_ts, open_ledger, print_json


@app.command()
def projects(
    ctx: typer.Context,
    status: Optional[str] = typer.Option(
        None,
        "--status",
        "-s",
        help="Only projects with this status",
        click_type=click.Choice([s.value for s in ProjectStatus], case_sensitive=False),
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Case-insensitive name substring"),
    page: int = typer.Option(0, "--page", min=0, help="Zero-based page number"),
    size: Optional[int] = typer.Option(None, "--size", min=1, help="Page size"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List projects, one page at a time.

    [bold cyan]Examples:[/bold cyan]

      analysis-ledger projects

      analysis-ledger projects --status ARCHIVED --json
    """
    criteria = {"name_contains": name}
    if status:
        criteria["status"] = ProjectStatus(status.upper())

    with open_ledger(ctx) as ledger:
        result = ledger.projects.list_page(page=page, size=size, **criteria)
        counts = ledger.projects.count_by_status()

    if json_output:
        print_json(
            {
                "page": result.page,
                "size": result.size,
                "total": result.total,
                "counts": {s.value: n for s, n in counts.items()},
                "projects": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "status": p.status.value,
                        "technology_stack": p.technology_stack,
                        "files_count": p.files_count,
                        "last_analysis_date": p.last_analysis_date,
                    }
                    for p in result
                ],
            }
        )
        return

    if not result.items:
        console.print("[yellow]No projects found.[/yellow]")
        return

    table = Table(title=f"Projects (page {result.page + 1}/{max(result.total_pages, 1)})", pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Stack", style="dim")
    table.add_column("Files", justify="right")
    table.add_column("Last analysis", style="green")
    for p in result:
        table.add_row(
            str(p.id),
            p.name,
            p.status.display_name,
            p.technology_stack or "-",
            str(p.files_count) if p.files_count is not None else "-",
            fmt_ts(p.last_analysis_date),
        )
    console.print(table)
