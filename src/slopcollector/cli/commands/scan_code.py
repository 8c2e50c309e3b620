"""Scan-code command - record where application code queries the schema."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from slopcollector.cli.common import (
    DataDirOption,
    JsonFlag,
    ProjectIdArg,
    VerboseOption,
    console,
    get_manager,
    setup_logging,
)
from slopcollector.codescan import CodeScanService, GitHubSource, read_directory
from slopcollector.codescan.models import SourceFile
from slopcollector.core.config import get_settings
from slopcollector.core.exceptions import SlopCollectorError


def _read_source(source: str, branch: str, max_files: int) -> tuple[list[SourceFile], str]:
    path = Path(source)
    if path.exists() or "github.com" not in source:
        return read_directory(path, max_files), str(path.resolve())

    settings = get_settings()
    github = GitHubSource(
        source, branch, token=settings.github_token, timeout=settings.http_timeout
    )
    try:
        with console.status(f"Fetching {github.label}..."):
            return github.fetch(max_files), github.label
    finally:
        github.close()


def scan_code(
    project_id: ProjectIdArg,
    source: Annotated[
        str,
        typer.Argument(help="Local checkout directory or GitHub repository URL"),
    ],
    branch: Annotated[str, typer.Option("--branch", "-b", help="GitHub branch")] = "main",
    max_files: Annotated[
        int | None,
        typer.Option("--max-files", min=1, help="Default: SLOPCOLLECTOR_CODE_SCAN_MAX_FILES"),
    ] = None,
    data_dir: DataDirOption = None,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """Scan application code and replace the project's stored code patterns."""
    setup_logging(verbose)
    limit = max_files or get_settings().code_scan_max_files

    manager = get_manager(data_dir)
    try:
        files, label = _read_source(source, branch, limit)
        with manager.session_scope() as session:
            result = CodeScanService(session).scan_project(project_id, files, label)
    except SlopCollectorError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    finally:
        manager.close()

    if json_output:
        print(json.dumps(result.to_wire(), indent=2))
        return

    summary = result.summary
    console.print(
        f"[green]{result.patterns_found} patterns[/green] in {result.files_scanned} files "
        f"({summary.filter_count} filters, {summary.join_count} joins, "
        f"{summary.sort_count} sorts)"
    )
    if result.tables_analyzed:
        console.print(f"Tables: {', '.join(result.tables_analyzed)}")
    for hint in result.suggestions:
        console.print(f"  {hint}")
