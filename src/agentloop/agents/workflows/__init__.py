"""Workflow agents: sequential, parallel and loop composition."""

from agentloop.agents.workflows.loop import LoopAgent, stop_when_text_contains
from agentloop.agents.workflows.parallel import ParallelAgent
from agentloop.agents.workflows.sequential import SequentialAgent

__all__ = [
    "LoopAgent",
    "ParallelAgent",
    "SequentialAgent",
    "stop_when_text_contains",
]
