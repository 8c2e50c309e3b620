"""Advise command - generate LLM optimization advice."""

from __future__ import annotations

from typing import Annotated

import typer

from slopcollector.advice import AdviceGenerator, AdviceService
from slopcollector.cli.common import (
    DataDirOption,
    ProjectIdArg,
    VerboseOption,
    console,
    get_manager,
    setup_logging,
)
from slopcollector.core.exceptions import SlopCollectorError
from slopcollector.llm import PromptRenderer, create_provider_from_config, load_llm_config


def advise(
    project_id: ProjectIdArg,
    skip_cooldown: Annotated[
        bool,
        typer.Option("--force", "-f", help="Ignore the cooldown between runs"),
    ] = False,
    no_code_patterns: Annotated[
        bool,
        typer.Option("--no-code-patterns", help="Leave code usage patterns out of the prompt"),
    ] = False,
    data_dir: DataDirOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Generate optimization suggestions for the latest snapshot."""
    setup_logging(verbose)

    try:
        config = load_llm_config()
        generator = AdviceGenerator(config, create_provider_from_config(config), PromptRenderer())
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]LLM is not configured: {e}[/red]")
        raise typer.Exit(1) from e

    manager = get_manager(data_dir)
    try:
        with console.status("Asking the model for advice..."):
            with manager.session_scope() as session:
                result = AdviceService(session, generator).generate_for_project(
                    project_id,
                    skip_cooldown=skip_cooldown,
                    include_code_patterns=not no_code_patterns,
                )
    except SlopCollectorError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    finally:
        manager.close()

    console.print(f"\n{result.summary}\n")
    stored = result.stored
    console.print(
        f"[green]{stored.new} new[/green], "
        f"{stored.applied_detected} detected as applied, {stored.skipped} skipped"
    )
    console.print(f"Run 'slopcollector suggestions {project_id}' to review them.")
