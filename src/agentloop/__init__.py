"""agentloop, an agent orchestration runtime: tool-calling loop and workflow combinators."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from agentloop.agents.llm_agent import LlmAgent as LlmAgent
    from agentloop.agents.workflows.loop import LoopAgent as LoopAgent
    from agentloop.agents.workflows.parallel import ParallelAgent as ParallelAgent
    from agentloop.agents.workflows.sequential import SequentialAgent as SequentialAgent
    from agentloop.core.interface.models import Message as Message
    from agentloop.runner import Runner as Runner

_LAZY_EXPORTS = {
    "LlmAgent": "agentloop.agents.llm_agent",
    "LoopAgent": "agentloop.agents.workflows.loop",
    "ParallelAgent": "agentloop.agents.workflows.parallel",
    "SequentialAgent": "agentloop.agents.workflows.sequential",
    "Message": "agentloop.core.interface.models",
    "Runner": "agentloop.runner",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'agentloop' has no attribute {name!r}")
