"""Subcommands of the ``agentloop`` group."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach ``run``, ``agents``, ``graph`` and ``sessions`` to *cli*."""
    from agentloop.cli_commands import agents, graph, run, sessions

    for command in (run.run, agents.agents, graph.graph, sessions.sessions):
        cli.add_command(command)
