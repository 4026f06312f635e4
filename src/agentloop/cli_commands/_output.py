"""Shared CLI output formatters and workflow loading."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from agentloop.agents.base import Agent
    from agentloop.core.interface.models import Message
    from agentloop.registry import AgentDefinition, AgentRegistry
    from agentloop.sdk.models import WorkflowSpec
    from agentloop.sessions.models import Session

console = Console()


def load_workflow(path: str) -> tuple[WorkflowSpec, AgentRegistry]:
    """Load a workflow file and build its registry, exiting on validation errors.

    The workflow's directory goes first on ``sys.path`` so tool modules kept
    next to the YAML file import the way a script's siblings do.
    """
    from agentloop.sdk.workflow import WorkflowLoader, build_registry

    try:
        spec = WorkflowLoader(Path(path)).load()
    except Exception as exc:
        console.print(f"[red]Validation error:[/red] {escape(str(exc))}")
        sys.exit(1)

    workflow_dir = str(Path(path).resolve().parent)
    if workflow_dir not in sys.path:
        sys.path.insert(0, workflow_dir)
    return spec, build_registry(spec)


def print_agent_header(agent: Agent) -> None:
    """Describe the agent about to run, the way the interactive loop opens."""
    console.print(f"--- Starting Agent: {escape(agent.name)} ---")
    if agent.description:
        console.print(f"Description: {escape(agent.description)}")
    console.print(f"Model: {escape(agent.model_identifier)}")
    if agent.tools:
        console.print("Available Tools:")
        for tool in agent.tools:
            console.print(f"  - {escape(tool.name)}: {escape(_truncate(tool.description))}")
    console.print("------------------------------------")
    console.print("Type 'exit' or 'quit' to stop.")


def print_response(agent_name: str, response: Message | None) -> None:
    if response is None or not response.texts:
        console.print(f"\\[{escape(agent_name)}]: (Agent returned no displayable content)")
        return
    console.print(f"\\[{escape(agent_name)}]: {escape(chr(10).join(response.texts))}")


def print_definitions_table(definitions: list[AgentDefinition]) -> None:
    """Pretty-print registry definitions as a table."""
    table = Table(title="Agents")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Description")
    table.add_column("Status")

    for definition in definitions:
        status = "[green]ready[/green]" if definition.available else f"[red]{escape(definition.init_error or '')}[/red]"
        table.add_row(
            definition.name,
            definition.kind or "-",
            _truncate(definition.description),
            status,
        )

    console.print(table)


def print_sessions_table(sessions: list[Session]) -> None:
    table = Table(title="Sessions")
    table.add_column("ID", style="cyan")
    table.add_column("Agent")
    table.add_column("Turns")
    table.add_column("Last update")

    for session in sessions:
        table.add_row(
            session.id,
            session.agent_name,
            str(session.turn_count),
            session.last_update_time.isoformat(timespec="seconds"),
        )

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
