"""Implementation of the 'analyze' command.

The analyze command finds the last release tag and computes the next
version from the commits made since.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table

from semrel.config import load_config
from semrel.core.analyzer import AnalysisResult, analyze_commits
from semrel.exceptions import SemrelError
from semrel.logging import configure_logging
from semrel.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from semrel.config.models import SemrelConfig

EXIT_NOT_RELEASABLE = 2


def load_project(
    path: str | None,
    overrides: dict[str, dict[str, Any]],
    err_console: Console,
) -> tuple[SemrelConfig, GitRepository]:
    """Load configuration and open the repository, exiting on failure."""
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path).with_overrides(**overrides)
    except SemrelError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    configure_logging(config.debug)

    try:
        repo = GitRepository(project_path)
    except SemrelError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    return config, repo


def run_analysis(repo: GitRepository, config: SemrelConfig, err_console: Console) -> AnalysisResult:
    """Analyze commits, exiting with a message on configuration or git errors."""
    try:
        return analyze_commits(repo, config)
    except SemrelError as e:
        err_console.print(f"[red]Error analyzing commits:[/] {e}")
        raise SystemExit(1) from e


def run_analyze(
    path: str | None,
    overrides: dict[str, dict[str, Any]],
    as_json: bool,
    strict: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the analyze command.

    Args:
        path: Optional path to the repository
        overrides: Per-section configuration values given on the command line
        as_json: Print the outputs as a JSON object
        strict: Exit with code 2 when nothing is releasable
        console: Console for standard output
        err_console: Console for error output
    """
    config, repo = load_project(path, overrides, err_console)
    result = run_analysis(repo, config, err_console)

    if as_json:
        console.print_json(json.dumps(result.as_outputs()))
    else:
        if config.version.show_version_path:
            _print_version_path(result, console)
        _print_summary(result, console)

    if strict and not result.is_releasable:
        raise SystemExit(EXIT_NOT_RELEASABLE)


def _print_version_path(result: AnalysisResult, console: Console) -> None:
    console.print(f"[dim]{result.last_version}: last release[/]")
    for step in result.version_path:
        console.print(f"[dim]{step.version}:[/] {step.subject} [dim]({step.bump})[/]")


def _print_summary(result: AnalysisResult, console: Console) -> None:
    table = Table(show_header=False, box=None)
    table.add_row("Last tag", result.last_tag or "[dim]none[/]")
    table.add_row("Last tag hash", result.last_tag_hash)
    table.add_row("Commits found", str(result.commits_found))
    table.add_row("Last version", f"[cyan]{result.last_version}[/]")
    table.add_row("Next version", f"[green]{result.next_version}[/]")
    table.add_row(
        "Last codepush-incompatible version",
        str(result.last_incompatible_codepush_version),
    )
    console.print(table)

    if result.is_releasable:
        console.print(
            Panel(
                f"Next version ([green]{result.next_version}[/]) is higher than last version "
                f"([cyan]{result.last_version}[/]). This version should be released.",
                title="[green]Releasable[/]",
                border_style="green",
            )
        )
    else:
        console.print(
            "[yellow]There are no commits that would change the next version "
            "since the last release.[/]"
        )
