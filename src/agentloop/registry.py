"""AgentRegistry: an explicit, injectable table of named agents.

Front ends (CLI, servers) build one registry and pass it down.  Agents that
failed to construct are still recorded with their error so a listing can
show why they are unavailable.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from agentloop.errors import ConfigurationError

if TYPE_CHECKING:
    from agentloop.agents.base import Agent

logger = logging.getLogger(__name__)


class AgentDefinition(BaseModel):
    """Registry entry metadata; ``init_error`` is set when construction failed."""

    name: str
    kind: str = ""
    description: str = ""
    init_error: str | None = None

    @property
    def available(self) -> bool:
        return self.init_error is None


class AgentRegistry:
    """Maps agent names to instances.

    Usage::

        registry = AgentRegistry()
        registry.register("weather", weather_agent)
        registry.register("broken", None, error=exc)
        agent = registry.get("weather")
    """

    def __init__(self) -> None:
        self._agents: dict[str, Agent] = {}
        self._definitions: dict[str, AgentDefinition] = {}

    def register(self, name: str, agent: Agent | None, error: BaseException | str | None = None) -> None:
        """Record *agent* under *name*; a later registration replaces an earlier one."""
        if error is not None or agent is None:
            message = str(error) if error is not None else "agent was not constructed"
            logger.warning("Could not initialize '%s' agent: %s", name, message)
            self._definitions[name] = AgentDefinition(name=name, init_error=message)
            self._agents.pop(name, None)
            return

        structure = agent.describe()
        self._definitions[name] = AgentDefinition(
            name=name,
            kind=structure.kind,
            description=agent.description,
        )
        self._agents[name] = agent

    def get(self, name: str) -> Agent:
        agent = self._agents.get(name)
        if agent is not None:
            return agent
        definition = self._definitions.get(name)
        if definition is not None and definition.init_error:
            raise ConfigurationError(f"agent '{name}' is not initialized: {definition.init_error}")
        raise ConfigurationError(f"unknown agent '{name}'; available: {', '.join(self.names()) or '(none)'}")

    def __contains__(self, name: object) -> bool:
        return name in self._agents

    def names(self) -> list[str]:
        """Sorted names of successfully initialized agents."""
        return sorted(self._agents)

    def definitions(self) -> list[AgentDefinition]:
        """All definitions, including failed ones, sorted by name."""
        return [self._definitions[name] for name in sorted(self._definitions)]
