"""Implementation of the 'changelog' command.

The changelog command analyzes the repository and renders release notes
for the next version.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from semrel.cli.commands.analyze import load_project, run_analysis
from semrel.core.changelog import generate_changelog
from semrel.exceptions import SemrelError

if TYPE_CHECKING:
    from rich.console import Console


def run_changelog(
    path: str | None,
    overrides: dict[str, dict[str, Any]],
    output: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the changelog command.

    Args:
        path: Optional path to the repository
        overrides: Per-section configuration values given on the command line
        output: File to write the notes to; printed to stdout when None
        console: Console for standard output
        err_console: Console for error output
    """
    config, repo = load_project(path, overrides, err_console)
    analysis = run_analysis(repo, config, err_console)

    if not analysis.is_releasable:
        err_console.print(
            "[yellow]No releasable changes found; notes are rendered for "
            f"version {analysis.next_version}.[/]"
        )

    try:
        notes = generate_changelog(repo, analysis, config)
    except SemrelError as e:
        err_console.print(f"[red]Error generating changelog:[/] {e}")
        raise SystemExit(1) from e

    if output is None:
        console.print(notes, markup=False, highlight=False, soft_wrap=True)
        return

    output_path = Path(output)
    output_path.write_text(notes + "\n")
    err_console.print(f"  [green]✓[/] Wrote release notes to {output_path}")
