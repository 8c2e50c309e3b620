"""Reset command - delete the local database."""

from __future__ import annotations

from typing import Annotated

import typer

from slopcollector.cli.common import (
    DataDirOption,
    VerboseOption,
    console,
    resolve_data_dir,
    setup_logging,
)
from slopcollector.core.connections import DATABASE_FILENAME


def reset(
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Skip confirmation prompt",
        ),
    ] = False,
    verbose: VerboseOption = 0,
) -> None:
    """Delete slopcollector.db and its WAL files.

    Projects, snapshots and suggestions are all removed.
    """
    setup_logging(verbose)
    directory = resolve_data_dir(data_dir)

    files_to_delete = [
        directory / name
        for name in (DATABASE_FILENAME, f"{DATABASE_FILENAME}-wal", f"{DATABASE_FILENAME}-shm")
        if (directory / name).exists()
    ]

    if not files_to_delete:
        console.print(f"[yellow]No database files found in {directory}[/yellow]")
        return

    console.print("\n[bold]Files to delete:[/bold]")
    for f in files_to_delete:
        console.print(f"  {f.name} ({f.stat().st_size / 1024:.1f} KB)")

    if not force and not typer.confirm("\nDelete these files?"):
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)

    for f in files_to_delete:
        f.unlink()
        console.print(f"[green]Deleted {f.name}[/green]")
