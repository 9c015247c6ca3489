"""Report CLI command -- compliance summary for one project."""

import typer
from rich.panel import Panel
from rich.table import Table

from ..reporting import build_project_report
from . import app
from ._common import console, fmt_score, open_ledger, print_json, resolve_project, severity_style

_LEVEL_STYLES = {
    "EXCELLENT": "bold green",
    "GOOD": "green",
    "FAIR": "yellow",
    "POOR": "red",
    "CRITICAL": "bold red",
    "UNKNOWN": "dim",
}

_RISK_STYLES = {
    "LOW": "green",
    "MEDIUM": "yellow",
    "HIGH": "red",
    "CRITICAL": "bold red",
}


@app.command()
def report(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project id or name"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Summarize a project's latest scores and outstanding violations.

    [bold cyan]Examples:[/bold cyan]

      analysis-ledger report my-service

      analysis-ledger report my-service --json
    """
    with open_ledger(ctx) as ledger:
        target = resolve_project(ledger, project)
        summary = build_project_report(ledger.repos, target.id)

    if json_output:
        print_json(summary.to_dict())
        return

    level_style = _LEVEL_STYLES.get(summary.compliance_level, "")
    risk_style = _RISK_STYLES.get(summary.risk_level, "")
    console.print(
        Panel(
            f"Status: {summary.status}\n"
            f"Analyses: {summary.total_analyses}\n"
            f"Latest overall score: {fmt_score(summary.latest_overall_score)}\n"
            f"Compliance: {fmt_score(summary.latest_compliance_score)} "
            f"[{level_style}]{summary.compliance_level}[/]\n"
            f"Average compliance: {fmt_score(summary.average_compliance_score)}\n"
            f"Active violations: {summary.active_violations} "
            f"(risk [{risk_style}]{summary.risk_level}[/])",
            title=f"[bold]{summary.project_name}[/bold]",
            expand=False,
        )
    )

    table = Table(title="Active violations by severity", pad_edge=True)
    table.add_column("Severity")
    table.add_column("Count", justify="right")
    for name, count in summary.active_by_severity.items():
        table.add_row(f"[{severity_style(name)}]{name}[/]", str(count))
    console.print(table)

    if summary.top_categories:
        categories = Table(title="Top rule categories", pad_edge=True)
        categories.add_column("Category", style="cyan")
        categories.add_column("Active", justify="right")
        for name, count in summary.top_categories.items():
            categories.add_row(name, str(count))
        console.print(categories)
