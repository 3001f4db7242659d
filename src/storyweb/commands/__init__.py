"""Subcommand modules for storyweb.

Provides register_commands(), which imports command modules lazily to
keep ``storyweb --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from storyweb.commands.graph import graph

    cli.add_command(graph)
