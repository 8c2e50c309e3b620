"""Suggestions command - list stored suggestions."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.table import Table as RichTable

from slopcollector.advice.suggestions import list_suggestions
from slopcollector.cli.common import (
    DataDirOption,
    JsonFlag,
    ProjectIdArg,
    VerboseOption,
    console,
    get_manager,
    setup_logging,
)
from slopcollector.core.models import SuggestionStatus

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "blue"}


def suggestions(
    project_id: ProjectIdArg,
    status: Annotated[
        SuggestionStatus | None,
        typer.Option("--status", help="Only show suggestions with this status"),
    ] = None,
    data_dir: DataDirOption = None,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """List suggestions for a project, highest impact first."""
    setup_logging(verbose)
    manager = get_manager(data_dir)
    try:
        with manager.session_scope() as session:
            items = list_suggestions(session, project_id, status=status.value if status else None)
    finally:
        manager.close()

    if json_output:
        print(json.dumps([s.to_wire() for s in items], indent=2))
        return

    if not items:
        console.print("[yellow]No suggestions[/yellow]")
        return

    table = RichTable(title=f"Suggestions ({len(items)})")
    table.add_column("Severity")
    table.add_column("Table")
    table.add_column("Column")
    table.add_column("Title")
    table.add_column("Impact", justify="right")
    table.add_column("Status", style="dim")
    table.add_column("ID", style="dim")
    for s in items:
        style = _SEVERITY_STYLE.get(s.severity, "white")
        table.add_row(
            f"[{style}]{s.severity}[/{style}]",
            s.table_name,
            s.column_name or "",
            s.title,
            s.impact or "",
            s.status or "",
            s.id,
        )
    console.print(table)
