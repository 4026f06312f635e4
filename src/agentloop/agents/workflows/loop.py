"""Loop workflow: repeat sub-agents until a stop condition or the cap.

Each iteration's final response is the next iteration's input.  Reaching
``max_iterations`` is not an error: the last response is returned as a
best-effort answer.  This differs from the tool-round cap of
:class:`~agentloop.agents.llm_agent.LlmAgent`, which fails the turn.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from agentloop.agents.base import Agent, WorkflowAgent
from agentloop.agents.workflows.sequential import SequentialAgent
from agentloop.errors import AgentCancelledError, AgentError, ConfigurationError, SubAgentError
from agentloop.utils.telemetry import (
    ATTR_AGENT_KIND,
    ATTR_AGENT_NAME,
    ATTR_ITERATION,
    ATTR_MAX_ITERATIONS,
    get_tracer,
)

if TYPE_CHECKING:
    from agentloop.agents.invocation import InvocationContext
    from agentloop.core.interface.models import Message

_tracer = get_tracer(__name__)

StopCondition = Callable[["Message"], bool]


def _never(_: Message) -> bool:
    return False


def stop_when_text_contains(phrase: str) -> StopCondition:
    """Stop once the latest response's text contains *phrase* (case-insensitive)."""
    needle = phrase.lower()

    def condition(response: Message) -> bool:
        return needle in response.text.lower()

    return condition


class LoopAgent(WorkflowAgent):
    """Repeat a sub-agent (or a sequence of them) until told to stop.

    Usage::

        guesser = LoopAgent(
            "guesser",
            [guess_agent, judge_agent],
            max_iterations=5,
            stop_condition=stop_when_text_contains("correct"),
        )

    With several sub-agents each iteration runs them as a
    :class:`SequentialAgent`.  A sub-agent returning no message is fatal.
    """

    kind = "loop"

    def __init__(
        self,
        name: str,
        sub_agents: Agent | Sequence[Agent],
        *,
        max_iterations: int,
        stop_condition: StopCondition | None = None,
        description: str = "",
    ) -> None:
        agents = [sub_agents] if isinstance(sub_agents, Agent) else list(sub_agents)
        super().__init__(name, agents, description=description)
        if not self.sub_agents:
            raise ConfigurationError(f"loop agent '{name}' needs at least one sub-agent")
        if max_iterations < 1:
            raise ConfigurationError(f"loop agent '{name}': max_iterations must be at least 1")
        self.max_iterations = max_iterations
        self.stop_condition = stop_condition or _never

        if len(self.sub_agents) == 1:
            self._body: Agent = self.sub_agents[0]
        else:
            self._body = SequentialAgent(f"{name}.body", self.sub_agents)

    async def process(
        self,
        history: Sequence[Message],
        message: Message,
        *,
        ctx: InvocationContext | None = None,
    ) -> Message:
        inv = self._context(ctx, message)
        loop_history = list(history)
        current = message
        response: Message | None = None

        with _tracer.start_as_current_span("workflow.loop") as span:
            span.set_attribute(ATTR_AGENT_NAME, self.name)
            span.set_attribute(ATTR_AGENT_KIND, self.kind)
            span.set_attribute(ATTR_MAX_ITERATIONS, self.max_iterations)

            inv.send_internal_log(
                "Starting loop for agent '%s' (max %d iterations)...",
                self._body.name,
                self.max_iterations,
            )
            for iteration in range(1, self.max_iterations + 1):
                stage = f"loop iteration {iteration}/{self.max_iterations}"
                inv.check_cancelled(stage)
                inv.send_internal_log("Loop iteration %d/%d", iteration, self.max_iterations)
                span.set_attribute(ATTR_ITERATION, iteration)

                try:
                    response = await self._body.process(loop_history, current, ctx=inv)
                except AgentCancelledError:
                    raise
                except Exception as exc:
                    raise SubAgentError(self.name, self._body.name, stage, exc) from exc

                if response is None:
                    raise AgentError(
                        f"loop agent '{self.name}' sub-agent '{self._body.name}' "
                        f"returned no response on iteration {iteration}"
                    )

                if not current.is_empty:
                    loop_history.append(current)
                loop_history.append(response)
                current = response

                if self.stop_condition(response):
                    inv.send_internal_log("Loop stop condition met on iteration %d.", iteration)
                    break

        assert response is not None
        return response
