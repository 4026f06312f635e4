"""Sequential workflow: sub-agents run in declared order, one pass.

Each sub-agent's final response becomes the next sub-agent's input, and a
shared history grows with every (input, response) pair so later agents see
what earlier ones did.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from agentloop.agents.base import WorkflowAgent
from agentloop.core.interface.models import Message
from agentloop.errors import AgentCancelledError, ConfigurationError, SubAgentError
from agentloop.utils.telemetry import (
    ATTR_AGENT_KIND,
    ATTR_AGENT_NAME,
    ATTR_SUB_AGENTS,
    get_tracer,
)

if TYPE_CHECKING:
    from agentloop.agents.base import Agent
    from agentloop.agents.invocation import InvocationContext

_tracer = get_tracer(__name__)


class SequentialAgent(WorkflowAgent):
    """Pipe one agent's output into the next.

    Usage::

        pipeline = SequentialAgent("report", [researcher, writer, editor])
        reply = await pipeline.process(history, Message.user("Topic: tides"))

    A failing sub-agent aborts the pipeline; later agents never run.
    """

    kind = "sequential"

    def __init__(
        self,
        name: str,
        sub_agents: Sequence[Agent],
        *,
        description: str = "",
    ) -> None:
        super().__init__(name, sub_agents, description=description)

    async def process(
        self,
        history: Sequence[Message],
        message: Message,
        *,
        ctx: InvocationContext | None = None,
    ) -> Message | None:
        if not self.sub_agents:
            raise ConfigurationError(f"sequential agent '{self.name}' has no sub-agents to run")

        inv = self._context(ctx, message)
        shared_history = list(history)
        current = message
        response: Message | None = None
        total = len(self.sub_agents)

        with _tracer.start_as_current_span("workflow.sequential") as span:
            span.set_attribute(ATTR_AGENT_NAME, self.name)
            span.set_attribute(ATTR_AGENT_KIND, self.kind)
            span.set_attribute(ATTR_SUB_AGENTS, total)

            for index, sub_agent in enumerate(self.sub_agents, start=1):
                inv.check_cancelled(f"before step {index}/{total}")
                inv.send_internal_log(
                    "--- Running sub-agent (%d/%d): %s ---", index, total, sub_agent.name
                )
                try:
                    response = await sub_agent.process(shared_history, current, ctx=inv)
                except AgentCancelledError:
                    raise
                except Exception as exc:
                    raise SubAgentError(
                        self.name, sub_agent.name, f"sequential step {index}/{total}", exc
                    ) from exc

                if not current.is_empty:
                    shared_history.append(current)
                if response is not None:
                    shared_history.append(response)
                    current = response
                else:
                    current = Message.empty()

        return response
