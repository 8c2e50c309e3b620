"""Main CLI application entry point."""

from __future__ import annotations

import typer

from slopcollector.cli.commands import (
    add_project,
    advise,
    diagram,
    projects,
    reset,
    scan_code,
    suggestions,
    sync,
)

app = typer.Typer(
    name="slopcollector",
    help="SlopCollector - Supabase schema diagrams and optimization advice.",
    no_args_is_help=True,
)

app.command()(add_project.add_project)
app.command()(projects.projects)
app.command()(sync.sync)
app.command()(diagram.diagram)
app.command()(scan_code.scan_code)
app.command()(advise.advise)
app.command()(suggestions.suggestions)
app.command()(reset.reset)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
