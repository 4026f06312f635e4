"""``agentloop run``: talk to one agent of a workflow interactively."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

import click
from rich.markup import escape

from agentloop.cli_commands._output import console, load_workflow, print_agent_header, print_response

if TYPE_CHECKING:
    from agentloop.runner import Runner
    from agentloop.sessions.models import Session

_EXIT_WORDS = {"exit", "quit"}


@click.command()
@click.argument("workflow", type=click.Path(exists=True))
@click.option("--agent", "-a", "agent_name", required=True, help="Name of the agent to run.")
@click.option("--session-id", "-s", default=None, help="Resume an existing session.")
@click.option("--verbose", "-v", is_flag=True, help="Log agentloop internals at DEBUG level.")
@click.option("--telemetry", is_flag=True, help="Enable telemetry.")
def run(
    workflow: str,
    agent_name: str,
    session_id: str | None,
    verbose: bool,
    telemetry: bool,
) -> None:
    """Start an interactive session with AGENT from the WORKFLOW yaml file."""
    from agentloop.errors import AgentError
    from agentloop.runner import Runner
    from agentloop.sessions.store import FileSessionStore

    if verbose:
        logging.getLogger("agentloop").setLevel(logging.DEBUG)

    spec, registry = load_workflow(workflow)

    if telemetry or (spec.telemetry is not None and spec.telemetry.enabled):
        _enable_telemetry(spec.telemetry.otlp_endpoint if spec.telemetry else None)

    try:
        agent = registry.get(agent_name)
    except AgentError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    runner = Runner(
        agent,
        FileSessionStore(spec.runner.sessions_dir),
        max_history_turns=spec.runner.max_history_turns,
    )

    with asyncio.Runner() as loop:
        try:
            session = loop.run(runner.get_or_create_session(session_id))
        except AgentError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            sys.exit(1)
        console.print(f"Session: {session.id} ({session.turn_count} previous turns)")
        print_agent_header(agent)
        _interactive(loop, runner, session)


def _interactive(loop: asyncio.Runner, runner: Runner, session: Session) -> None:
    from agentloop.errors import AgentError

    name = runner.agent.name
    while True:
        try:
            line = click.prompt("[user]", prompt_suffix=": ", default="", show_default=False)
        except click.Abort:
            console.print()
            break

        text = line.strip()
        if not text:
            continue
        if text.lower() in _EXIT_WORDS:
            break

        try:
            response = loop.run(runner.run_turn(session, text))
        except AgentError as exc:
            console.print(f"\\[{escape(name)}-error]: {escape(str(exc))}")
            continue
        except KeyboardInterrupt:
            console.print(f"\\[{escape(name)}-error]: interrupted")
            continue

        print_response(name, response)

    console.print("Exiting.")


def _enable_telemetry(otlp_endpoint: str | None) -> None:
    from agentloop.utils.telemetry import configure_telemetry

    try:
        configure_telemetry(otlp_endpoint=otlp_endpoint)
    except ImportError as exc:
        console.print(f"[yellow]Telemetry disabled:[/yellow] {escape(str(exc))}")
