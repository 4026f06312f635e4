"""Agents: the agent contract, the tool-calling engine and workflows."""

from agentloop.agents.base import Agent, AgentStructure, WorkflowAgent
from agentloop.agents.callbacks import CallbackContext, Callbacks, LlmRequest, LlmResponse
from agentloop.agents.graph import build_dot
from agentloop.agents.invocation import InvocationContext
from agentloop.agents.llm_agent import LlmAgent
from agentloop.agents.workflows import (
    LoopAgent,
    ParallelAgent,
    SequentialAgent,
    stop_when_text_contains,
)

__all__ = [
    "Agent",
    "AgentStructure",
    "CallbackContext",
    "Callbacks",
    "InvocationContext",
    "LlmAgent",
    "LlmRequest",
    "LlmResponse",
    "LoopAgent",
    "ParallelAgent",
    "SequentialAgent",
    "WorkflowAgent",
    "build_dot",
    "stop_when_text_contains",
]
