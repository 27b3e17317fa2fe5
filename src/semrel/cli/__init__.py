"""Command line interface for semrel."""

from __future__ import annotations

from semrel.cli.app import cli, main

__all__ = ["cli", "main"]
