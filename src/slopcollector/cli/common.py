"""Options, console and database access shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from slopcollector.core.connections import ConnectionConfig, ConnectionManager
from slopcollector.core.logging import configure_logging

# SUPABASE_API_KEY and the LLM provider keys usually live in .env
load_dotenv()

console = Console()

_LEVELS = ("WARNING", "INFO", "DEBUG")

DataDirOption = Annotated[
    Path | None,
    typer.Option(
        "--data-dir",
        "-d",
        help="Directory holding slopcollector.db (default: SLOPCOLLECTOR_DATA_DIR)",
        file_okay=False,
        resolve_path=True,
    ),
]
ProjectIdArg = Annotated[str, typer.Argument(help="Project ID (see 'slopcollector projects')")]
JsonFlag = Annotated[bool, typer.Option("--json", help="Print JSON to stdout")]
VerboseOption = Annotated[
    int,
    typer.Option("--verbose", "-v", count=True, help="-v for INFO logs, -vv for DEBUG"),
]


def setup_logging(verbosity: int = 0) -> None:
    """Console logs on stderr; quiet unless -v is given."""
    configure_logging(
        log_level=_LEVELS[min(verbosity, len(_LEVELS) - 1)],
        log_format="console",
        show_timestamps=verbosity > 0,
    )


def resolve_data_dir(data_dir: Path | None) -> Path:
    if data_dir is not None:
        return data_dir
    from slopcollector.core.config import get_settings

    return get_settings().data_dir


def get_manager(data_dir: Path | None, create: bool = False) -> ConnectionManager:
    """Open the database in `data_dir`; the caller closes the manager.

    Exits with status 1 when no database exists yet and `create` is false.
    """
    config = ConnectionConfig.for_directory(resolve_data_dir(data_dir))
    if not create and not config.sqlite_path.exists():
        console.print(f"[red]No database found at {config.sqlite_path}[/red]")
        console.print("Run 'slopcollector add-project' first.")
        raise typer.Exit(1)

    manager = ConnectionManager(config)
    manager.initialize()
    return manager
