"""Diagram command - emit React Flow nodes and edges as JSON."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from slopcollector.advice.suggestions import list_suggestions
from slopcollector.cli.common import (
    DataDirOption,
    ProjectIdArg,
    VerboseOption,
    console,
    get_manager,
    setup_logging,
)
from slopcollector.core.exceptions import SnapshotNotFoundError
from slopcollector.core.models import SuggestionStatus
from slopcollector.graphs import DiagramBuilder, snapshot_to_tables
from slopcollector.snapshots.service import SnapshotService


class Direction(str, Enum):
    TB = "TB"
    LR = "LR"


def diagram(
    project_id: ProjectIdArg,
    direction: Annotated[
        Direction,
        typer.Option("--direction", help="TB (top-bottom) or LR (left-right)"),
    ] = Direction.TB,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write JSON to this file instead of stdout"),
    ] = None,
    data_dir: DataDirOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Lay out the latest snapshot as diagram JSON."""
    setup_logging(verbose)
    manager = get_manager(data_dir)
    try:
        with manager.session_scope() as session:
            snapshot = SnapshotService(session).get_latest_snapshot(project_id)
            suggestions = list_suggestions(
                session, project_id, status=SuggestionStatus.PENDING.value
            )
    except SnapshotNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    finally:
        manager.close()

    layout = DiagramBuilder().build(
        snapshot_to_tables(snapshot), suggestions, direction=direction.value
    )
    payload = json.dumps(layout.to_flow(), indent=2)

    if output is None:
        print(payload)
        return

    output.write_text(payload)
    console.print(
        f"[green]Wrote {len(layout.nodes)} nodes and {len(layout.edges)} edges to {output}[/green]"
    )
