"""``agentloop sessions``: inspect and delete stored sessions."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import TYPE_CHECKING

import click
from rich.markup import escape

from agentloop.cli_commands._output import console, print_sessions_table

if TYPE_CHECKING:
    from agentloop.sessions.models import Session

_dir_option = click.option(
    "--dir",
    "directory",
    default=".sessions",
    type=click.Path(file_okay=False),
    help="Directory holding session files.",
)


@click.group()
def sessions() -> None:
    """Manage stored sessions."""


@sessions.command("list")
@click.option("--agent", "-a", "agent_name", required=True, help="Only sessions owned by this agent.")
@_dir_option
def list_sessions(agent_name: str, directory: str) -> None:
    """List sessions of an agent, most recent first."""
    from agentloop.sessions.store import FileSessionStore

    store = FileSessionStore(directory)

    async def _load() -> list[Session]:
        ids = await store.list_by_agent(agent_name)
        loaded = [await store.get(session_id) for session_id in ids]
        return [s for s in loaded if s is not None]

    found = asyncio.run(_load())
    if not found:
        console.print(f"[yellow]No sessions found for agent '{escape(agent_name)}'.[/yellow]")
        return
    print_sessions_table(found)


@sessions.command("show")
@click.argument("session_id")
@_dir_option
def show_session(session_id: str, directory: str) -> None:
    """Print a stored session as JSON."""
    from agentloop.errors import AgentError
    from agentloop.sessions.store import FileSessionStore

    try:
        session = asyncio.run(FileSessionStore(directory).get(session_id))
    except AgentError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    if session is None:
        console.print(f"[red]Session not found:[/red] {escape(session_id)}")
        sys.exit(1)
    click.echo(json.dumps(session.model_dump(mode="json"), indent=2))


@sessions.command("delete")
@click.argument("session_id")
@_dir_option
def delete_session(session_id: str, directory: str) -> None:
    """Delete a stored session."""
    from agentloop.errors import AgentError
    from agentloop.sessions.store import FileSessionStore

    try:
        asyncio.run(FileSessionStore(directory).delete(session_id))
    except AgentError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    console.print(f"[green]Deleted session {escape(session_id)}[/green]")
