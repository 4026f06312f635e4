"""Agent contract: one behavioral method plus descriptive accessors.

Leaf agents (:class:`~agentloop.agents.llm_agent.LlmAgent`) and workflow
agents share this contract, which is what lets a workflow contain other
workflows to any depth.  Workflows answer the model/tool/provider accessors
with sentinels since they never talk to a model themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

from pydantic import BaseModel

from agentloop.errors import ConfigurationError

if TYPE_CHECKING:
    from agentloop.agents.invocation import InvocationContext
    from agentloop.core.interface.models import Message
    from agentloop.core.interface.provider import ModelProvider
    from agentloop.tools.base import Tool

AgentKind = Literal["llm", "sequential", "parallel", "loop"]


class AgentStructure(BaseModel):
    """Structural description of an agent: its kind, tools and children.

    Generic walkers (graph rendering, CLI listings) use this instead of
    switching on concrete agent classes.
    """

    name: str
    kind: AgentKind
    description: str = ""
    tools: list[str] = []
    children: list[AgentStructure] = []


@runtime_checkable
class Agent(Protocol):
    """The capability set every agent exposes."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def model_identifier(self) -> str: ...

    @property
    def system_instruction(self) -> Message | None: ...

    @property
    def tools(self) -> list[Tool]: ...

    @property
    def provider(self) -> ModelProvider | None: ...

    async def process(
        self,
        history: Sequence[Message],
        message: Message,
        *,
        ctx: InvocationContext | None = None,
    ) -> Message | None:
        """Turn (history, message) into a final response message.

        Implementations never mutate *history*.
        """
        ...

    def describe(self) -> AgentStructure: ...


class WorkflowAgent(ABC):
    """Base class for composite agents that only call other agents.

    Subclasses set :attr:`kind` and implement :meth:`process`.
    """

    kind: AgentKind

    def __init__(
        self,
        name: str,
        sub_agents: Sequence[Agent],
        *,
        description: str = "",
    ) -> None:
        if not name:
            raise ConfigurationError("workflow agents require a name")
        self._name = name
        self._description = description
        self.sub_agents: list[Agent] = list(sub_agents)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def model_identifier(self) -> str:
        return f"workflow-{self.kind}"

    @property
    def system_instruction(self) -> Message | None:
        return None

    @property
    def tools(self) -> list[Tool]:
        return []

    @property
    def provider(self) -> ModelProvider | None:
        return None

    def describe(self) -> AgentStructure:
        return AgentStructure(
            name=self._name,
            kind=self.kind,
            description=self._description,
            children=[agent.describe() for agent in self.sub_agents],
        )

    @abstractmethod
    async def process(
        self,
        history: Sequence[Message],
        message: Message,
        *,
        ctx: InvocationContext | None = None,
    ) -> Message | None: ...

    def _context(self, ctx: InvocationContext | None, message: Message) -> InvocationContext:
        """Derive this agent's view of the invocation, creating one if needed."""
        from agentloop.agents.invocation import InvocationContext

        if ctx is None:
            return InvocationContext(agent_name=self._name, user_content=message)
        return ctx.child(self._name)

    def __repr__(self) -> str:
        names = ", ".join(agent.name for agent in self.sub_agents)
        return f"{type(self).__name__}(name={self._name!r}, sub_agents=[{names}])"
