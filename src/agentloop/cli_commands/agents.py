"""``agentloop agents``: list the agents a workflow defines."""

from __future__ import annotations

import json

import click

from agentloop.cli_commands._output import console, load_workflow, print_definitions_table


@click.command()
@click.argument("workflow", type=click.Path(exists=True))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def agents(workflow: str, fmt: str) -> None:
    """List agents in WORKFLOW, including ones that failed to initialize."""
    _, registry = load_workflow(workflow)
    definitions = registry.definitions()

    if not definitions:
        console.print("[yellow]No agents defined.[/yellow]")
        return

    if fmt == "json":
        data = [d.model_dump() for d in definitions]
        click.echo(json.dumps(data, indent=2))
    else:
        print_definitions_table(definitions)
