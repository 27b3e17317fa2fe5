"""CLI entry point for semrel."""

from __future__ import annotations

import click

from semrel import __version__
from semrel.cli.commands.analyze import run_analyze
from semrel.cli.commands.changelog import run_changelog
from semrel.cli.console import console, err_console
from semrel.logging import configure_logging

path_argument = click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=str),
)
match_option = click.option(
    "--match",
    default=None,
    help="Glob selecting release tags (git describe --match).",
)
commit_format_option = click.option(
    "--commit-format",
    default=None,
    help='"default", "angular" or a custom pattern with four groups.',
)
debug_option = click.option("--debug", is_flag=True, help="Verbose logging.")


@click.group()
@click.version_option(version=__version__, prog_name="semrel")
def cli() -> None:
    """Next semantic version and release notes from conventional commits."""
    configure_logging()


@cli.command()
@path_argument
@match_option
@commit_format_option
@click.option(
    "--single-step",
    is_flag=True,
    help="Apply each bump level at most once.",
)
@click.option(
    "--fold",
    is_flag=True,
    help="Apply a single bump at the highest level reached.",
)
@click.option(
    "--show-version-path",
    is_flag=True,
    help="Print the version reached after every commit.",
)
@debug_option
@click.option("--json", "as_json", is_flag=True, help="Print the results as JSON.")
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 2 when there is nothing to release.",
)
def analyze(
    path: str | None,
    match: str | None,
    commit_format: str | None,
    single_step: bool,
    fold: bool,
    show_version_path: bool,
    debug: bool,
    as_json: bool,
    strict: bool,
) -> None:
    """Compute the next version from commits since the last release tag."""
    overrides = {
        "commits": {"commit_format": commit_format},
        "version": {
            "match": match,
            "single_step": single_step or None,
            "fold": fold or None,
            "show_version_path": show_version_path or None,
            "debug": debug or None,
        },
    }
    run_analyze(path, overrides, as_json, strict, console, err_console)


@cli.command()
@path_argument
@match_option
@commit_format_option
@click.option(
    "--format",
    "notes_format",
    type=click.Choice(["markdown", "slack", "plain"]),
    default=None,
    help="Output style.",
)
@click.option("--title", default=None, help="Text appended to the version in the title.")
@click.option("--commit-url", default=None, help="Base URL of commit links.")
@click.option("--display-author/--no-display-author", default=None, help="Show commit authors.")
@click.option("--display-title/--no-title", default=None, help="Show the title line.")
@click.option("--display-links/--no-links", default=None, help="Show commit links.")
@click.option("--group-by-scope", is_flag=True, help="Group entries by scope.")
@debug_option
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    help="Write the notes to a file instead of stdout.",
)
def changelog(
    path: str | None,
    match: str | None,
    commit_format: str | None,
    notes_format: str | None,
    title: str | None,
    commit_url: str | None,
    display_author: bool | None,
    display_title: bool | None,
    display_links: bool | None,
    group_by_scope: bool,
    debug: bool,
    output: str | None,
) -> None:
    """Render release notes for the next version."""
    overrides = {
        "commits": {"commit_format": commit_format},
        "version": {"match": match, "debug": debug or None},
        "changelog": {
            "format": notes_format,
            "title": title,
            "commit_url": commit_url,
            "display_author": display_author,
            "display_title": display_title,
            "display_links": display_links,
            "group_by_scope": group_by_scope or None,
        },
    }
    run_changelog(path, overrides, output, console, err_console)


def main() -> None:
    cli()
