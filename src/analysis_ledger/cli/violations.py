"""Violations CLI command -- list a project's compliance violations."""

from typing import Optional

import click
import typer
from rich.table import Table

from ..domain import ViolationSeverity
from . import app
from ._common import console, open_ledger, print_json, resolve_project, severity_style


@app.command()
def violations(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project id or name"),
    show_all: bool = typer.Option(False, "--all", "-a", help="Include resolved and inactive violations"),
    severity: Optional[str] = typer.Option(
        None,
        "--severity",
        help="Only this severity",
        click_type=click.Choice([s.value for s in ViolationSeverity], case_sensitive=False),
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List violations for a project, most severe first.

    By default only active violations (open, or suppressed with a window
    still running) are shown.

    [bold cyan]Examples:[/bold cyan]

      analysis-ledger violations my-service

      analysis-ledger violations my-service --all --severity CRITICAL
    """
    with open_ledger(ctx) as ledger:
        target = resolve_project(ledger, project)
        if show_all:
            rows = ledger.repos.violations.find(project_id=target.id)
            rows.sort(key=lambda v: (v.severity.priority, v.id))
        else:
            rows = ledger.violations.active_for_project(target.id)

    if severity:
        wanted = ViolationSeverity(severity.upper())
        rows = [v for v in rows if v.severity is wanted]

    if json_output:
        print_json(
            [
                {
                    "id": v.id,
                    "rule_id": v.rule_id,
                    "severity": v.severity.value,
                    "status": v.status.value,
                    "location": v.location,
                    "message": v.message,
                    "analysis_id": v.analysis_id,
                }
                for v in rows
            ]
        )
        return

    if not rows:
        console.print(f"[green]No matching violations for {target.name}.[/green]")
        return

    table = Table(title=f"Violations in {target.name}", pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Severity")
    table.add_column("Rule", style="cyan")
    table.add_column("Status")
    table.add_column("Location", style="dim")
    table.add_column("Message")
    for v in rows:
        table.add_row(
            str(v.id),
            f"[{severity_style(v.severity.value)}]{v.severity.display_name}[/]",
            v.rule_id,
            v.status.display_name,
            v.location,
            v.message,
        )
    console.print(table)
