"""``agentloop graph``: render an agent's structure as Graphviz DOT."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.markup import escape

from agentloop.cli_commands._output import console, load_workflow


@click.command()
@click.argument("workflow", type=click.Path(exists=True))
@click.option("--agent", "-a", "agent_name", required=True, help="Agent to render.")
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write the DOT source to a file instead of stdout.",
)
def graph(workflow: str, agent_name: str, output: str | None) -> None:
    """Print the DOT graph of AGENT from the WORKFLOW yaml file."""
    from agentloop.agents.graph import build_dot
    from agentloop.errors import AgentError

    _, registry = load_workflow(workflow)
    try:
        agent = registry.get(agent_name)
    except AgentError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    dot = build_dot(agent)
    if output:
        Path(output).write_text(dot, encoding="utf-8")
        console.print(f"[green]Wrote graph to {escape(output)}[/green]")
    else:
        click.echo(dot)
