"""Projects command - list registered projects."""

from __future__ import annotations

import json

from rich.table import Table as RichTable
from sqlalchemy import select

from slopcollector.cli.common import (
    DataDirOption,
    JsonFlag,
    VerboseOption,
    console,
    get_manager,
    setup_logging,
)
from slopcollector.storage import Project


def projects(
    data_dir: DataDirOption = None,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """List registered projects."""
    setup_logging(verbose)
    manager = get_manager(data_dir)
    try:
        with manager.session_scope() as session:
            rows = session.execute(select(Project).order_by(Project.created_at)).scalars().all()
            data = [
                {
                    "project_id": p.project_id,
                    "name": p.name,
                    "url": p.supabase_url,
                    "schema": p.schema_name,
                    "last_synced_at": p.last_synced_at.isoformat() if p.last_synced_at else None,
                }
                for p in rows
            ]
    finally:
        manager.close()

    if json_output:
        print(json.dumps(data, indent=2))
        return

    if not data:
        console.print("[yellow]No projects yet[/yellow]")
        return

    table = RichTable(title="Projects")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Schema")
    table.add_column("Last sync", style="dim")
    for p in data:
        table.add_row(p["project_id"], p["name"], p["url"], p["schema"], p["last_synced_at"] or "-")
    console.print(table)
