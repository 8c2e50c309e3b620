"""Sync command - introspect a project and store a snapshot."""

from __future__ import annotations

import typer

from slopcollector.cli.common import (
    DataDirOption,
    ProjectIdArg,
    VerboseOption,
    console,
    get_manager,
    setup_logging,
)
from slopcollector.core.exceptions import PersistenceError, ProjectNotFoundError
from slopcollector.snapshots.service import SnapshotService


def sync(
    project_id: ProjectIdArg,
    data_dir: DataDirOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Introspect a project's schema and store a new snapshot."""
    setup_logging(verbose)
    manager = get_manager(data_dir)
    try:
        with console.status("Introspecting schema..."):
            with manager.session_scope() as session:
                result = SnapshotService(session).sync_project(project_id)
    except (ProjectNotFoundError, PersistenceError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    finally:
        manager.close()

    if not result.synced:
        console.print(f"[yellow]{result.message}[/yellow]")
        return

    console.print(f"[green]Snapshot {result.snapshot_id}[/green]")
    console.print(
        f"  {result.table_count} tables, {result.column_count} columns, "
        f"{result.index_count} indexes, {result.foreign_key_count} foreign keys"
    )
