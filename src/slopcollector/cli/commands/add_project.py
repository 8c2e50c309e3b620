"""Add-project command - register a Supabase project."""

from __future__ import annotations

from typing import Annotated

import typer

from slopcollector.cli.common import (
    DataDirOption,
    VerboseOption,
    console,
    get_manager,
    setup_logging,
)
from slopcollector.storage import Project


def add_project(
    name: Annotated[str, typer.Argument(help="Display name for the project")],
    url: Annotated[str, typer.Argument(help="Project URL, e.g. https://xyz.supabase.co")],
    api_key: Annotated[
        str,
        typer.Option(
            "--api-key",
            "-k",
            envvar="SUPABASE_API_KEY",
            help="Anon or service role key (default: SUPABASE_API_KEY)",
        ),
    ],
    schema: Annotated[str, typer.Option("--schema", "-s", help="Schema to introspect")] = "public",
    data_dir: DataDirOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Register a project to sync.

    Examples:

        slopcollector add-project shop https://xyz.supabase.co -k $KEY
    """
    setup_logging(verbose)
    manager = get_manager(data_dir, create=True)
    try:
        with manager.session_scope() as session:
            project = Project(
                name=name,
                supabase_url=url.rstrip("/"),
                api_key=api_key,
                schema_name=schema,
            )
            session.add(project)
            session.flush()
            project_id = project.project_id
    finally:
        manager.close()

    console.print(f"[green]Added project {name}[/green] ({project_id})")
    console.print(f"Run 'slopcollector sync {project_id}' to capture its schema.")
