"""Parallel workflow: fan the same input out, then synthesize one answer.

All sub-agents receive the same (history, message).  When every branch has
succeeded, their text parts are joined into a synthesis prompt and one
extra model call (no tools, no history) produces the final answer.  Only
text survives into the synthesis prompt; function-call or
function-response parts a branch still carries are not forwarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from agentloop.agents.base import WorkflowAgent
from agentloop.core.interface.models import Message
from agentloop.errors import (
    AgentCancelledError,
    ConfigurationError,
    EmptyResponseError,
    ModelBackendError,
    SubAgentError,
)
from agentloop.utils.telemetry import (
    ATTR_AGENT_KIND,
    ATTR_AGENT_NAME,
    ATTR_SUB_AGENTS,
    get_tracer,
)

if TYPE_CHECKING:
    from agentloop.agents.base import Agent
    from agentloop.agents.invocation import InvocationContext
    from agentloop.core.interface.provider import ModelProvider

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SYNTHESIS_TEMPLATE = (
    "The following information was gathered concurrently:\n\n---\n{results}\n---\n\n"
    "Based on this information, provide a comprehensive summary to the user."
)


def build_synthesis_prompt(responses: Sequence[Message | None]) -> Message:
    """Join the text parts of every branch response into one user message."""
    texts = [text for response in responses if response is not None for text in response.texts]
    return Message.user(SYNTHESIS_TEMPLATE.format(results="\n---\n".join(texts)))


class ParallelAgent(WorkflowAgent):
    """Run sub-agents concurrently and synthesize their answers.

    Usage::

        planner = ParallelAgent(
            "trip",
            [flights, hotels, weather],
            synthesis_model="gemini/gemini-2.5-flash",
            synthesis_provider=provider,
        )

    Fail-fast: the first failing branch fails the whole call, the remaining
    branches are cancelled and any successful results are discarded.
    """

    kind = "parallel"

    def __init__(
        self,
        name: str,
        sub_agents: Sequence[Agent],
        *,
        synthesis_model: str,
        synthesis_provider: ModelProvider | None,
        synthesis_instruction: str | Message | None = None,
        description: str = "",
    ) -> None:
        super().__init__(name, sub_agents, description=description)
        self.synthesis_model = synthesis_model
        self.synthesis_provider = synthesis_provider
        if isinstance(synthesis_instruction, str):
            synthesis_instruction = Message.system(synthesis_instruction)
        self.synthesis_instruction = synthesis_instruction

    async def process(
        self,
        history: Sequence[Message],
        message: Message,
        *,
        ctx: InvocationContext | None = None,
    ) -> Message:
        if self.synthesis_provider is None:
            raise ConfigurationError(f"parallel agent '{self.name}' has no synthesis provider configured")
        if not self.sub_agents:
            raise ConfigurationError(f"parallel agent '{self.name}' has no sub-agents to run")

        inv = self._context(ctx, message)
        branch_history = list(history)

        with _tracer.start_as_current_span("workflow.parallel") as span:
            span.set_attribute(ATTR_AGENT_NAME, self.name)
            span.set_attribute(ATTR_AGENT_KIND, self.kind)
            span.set_attribute(ATTR_SUB_AGENTS, len(self.sub_agents))

            inv.check_cancelled("before fan-out")
            tasks: list[asyncio.Task[Message | None]] = []
            for sub_agent in self.sub_agents:
                inv.send_internal_log("--- Running sub-agent in parallel: %s ---", sub_agent.name)
                tasks.append(
                    asyncio.ensure_future(sub_agent.process(branch_history, message, ctx=inv))
                )

            try:
                await inv.wait_all(tasks, where="waiting for parallel branches", fail_fast=True)
            except BaseException:
                _cancel_pending(tasks)
                raise

            self._raise_first_failure(tasks)

            inv.send_internal_log("--- Synthesizing results from parallel sub-agents ---")
            prompt = build_synthesis_prompt([task.result() for task in tasks])
            inv.check_cancelled("before synthesis call")
            inv.emit("model_call", {"model": self.synthesis_model})
            try:
                synthesized = await self.synthesis_provider.generate_content(
                    self.synthesis_model, self.synthesis_instruction, [], [], prompt
                )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                raise ModelBackendError(str(exc)) from exc

        if synthesized is None or synthesized.is_empty:
            raise EmptyResponseError(self.name)
        return synthesized

    def _raise_first_failure(self, tasks: list[asyncio.Task[Message | None]]) -> None:
        """Raise the first branch error found; cancel whatever is still running."""
        failed = next(
            (
                (agent, task)
                for agent, task in zip(self.sub_agents, tasks, strict=True)
                if task.done() and not task.cancelled() and task.exception() is not None
            ),
            None,
        )
        if failed is None:
            return

        _cancel_pending(tasks)
        agent, task = failed
        exc = task.exception()
        assert exc is not None
        if isinstance(exc, AgentCancelledError):
            raise exc
        logger.debug("Parallel agent %s: branch %s failed", self.name, agent.name)
        raise SubAgentError(self.name, agent.name, "parallel branch", exc) from exc


def _cancel_pending(tasks: list[asyncio.Task[Message | None]]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
