"""Command line entry point: ``agentloop [--log-level LEVEL] COMMAND``."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from agentloop import __version__
from agentloop.cli_commands import register_commands

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_NOISY_LOGGERS = ("LiteLLM", "httpx", "httpcore")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="agentloop")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="AGENTLOOP_LOG_LEVEL",
    help="Threshold for log records written to stderr.",
)
def main(log_level: str) -> None:
    """Run tool-calling agents and agent workflows defined in YAML."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


register_commands(main)

if __name__ == "__main__":
    main()
