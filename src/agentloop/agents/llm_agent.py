"""LlmAgent: the single-agent tool-calling loop.

One call to :meth:`LlmAgent.process` turns (history, message) into one
final message:

1. ask the model (unless a before-model callback answers instead);
2. collect every function call in the response, wherever it appears;
3. if there are none, the response is the answer;
4. otherwise run all calls concurrently, wrap their results into one
   function-role message and ask the model again.

The loop is bounded by ``max_tool_rounds``.  Tool problems (unknown tool,
exception, non-mapping result, timeout) become error-shaped function
responses the model can react to; backend problems abort the turn.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from agentloop.agents.base import AgentStructure
from agentloop.agents.callbacks import (
    CallbackContext,
    Callbacks,
    LlmRequest,
    LlmResponse,
    invoke,
)
from agentloop.agents.invocation import InvocationContext
from agentloop.core.interface.models import (
    FunctionCallPart,
    FunctionResponsePart,
    Message,
)
from agentloop.errors import (
    ConfigurationError,
    EmptyResponseError,
    MaxToolRoundsExceededError,
    ModelBackendError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolResultSchemaError,
    ToolTimeoutError,
)
from agentloop.utils.telemetry import (
    ATTR_AGENT_KIND,
    ATTR_AGENT_NAME,
    ATTR_INVOCATION_ID,
    ATTR_MAX_ROUNDS,
    ATTR_ROUND,
    ATTR_TOOL_CALLS,
    ATTR_TOOL_ERROR,
    ATTR_TOOL_NAME,
    get_tracer,
    record_error,
)

if TYPE_CHECKING:
    from agentloop.core.interface.provider import ModelProvider
    from agentloop.tools.base import Tool

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 10


class LlmAgent:
    """A leaf agent: talks to a model backend and runs its own tools.

    Usage::

        agent = LlmAgent(
            "weather",
            model_identifier="gemini/gemini-2.5-flash",
            system_instruction="You answer weather questions.",
            provider=LiteLLMProvider(config),
            tools=[FunctionTool.from_callable(get_weather)],
        )
        reply = await agent.process([], Message.user("Weather in Oslo?"))

    The tool table is fixed at construction; duplicate tool names are
    rejected.  ``tool_timeout`` bounds each tool execution; ``None`` waits
    for slow tools indefinitely.
    """

    def __init__(
        self,
        name: str,
        *,
        model_identifier: str,
        provider: ModelProvider | None,
        description: str = "",
        system_instruction: str | Message | None = None,
        tools: Sequence[Tool] = (),
        callbacks: Callbacks | None = None,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        tool_timeout: float | None = None,
    ) -> None:
        if max_tool_rounds < 1:
            raise ConfigurationError(f"agent '{name}': max_tool_rounds must be at least 1")
        if tool_timeout is not None and tool_timeout <= 0:
            raise ConfigurationError(f"agent '{name}': tool_timeout must be positive")

        self._name = name
        self._description = description
        self._model_identifier = model_identifier
        self._provider = provider
        if isinstance(system_instruction, str):
            system_instruction = Message.system(system_instruction)
        self._system_instruction = system_instruction
        self.callbacks = callbacks or Callbacks()
        self.max_tool_rounds = max_tool_rounds
        self.tool_timeout = tool_timeout

        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ConfigurationError(f"agent '{name}': duplicate tool name '{tool.name}'")
            self._tools[tool.name] = tool

    # -- descriptive accessors ------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def model_identifier(self) -> str:
        return self._model_identifier

    @property
    def system_instruction(self) -> Message | None:
        return self._system_instruction

    @property
    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    @property
    def provider(self) -> ModelProvider | None:
        return self._provider

    def describe(self) -> AgentStructure:
        return AgentStructure(
            name=self._name,
            kind="llm",
            description=self._description,
            tools=list(self._tools),
        )

    # -- the loop -------------------------------------------------------------

    async def process(
        self,
        history: Sequence[Message],
        message: Message,
        *,
        ctx: InvocationContext | None = None,
    ) -> Message:
        """Run the tool-calling loop for one turn and return the final message."""
        if self._provider is None:
            raise ConfigurationError(f"agent '{self._name}' has no LLM provider configured")

        inv = (
            InvocationContext(agent_name=self._name, user_content=message)
            if ctx is None
            else ctx.child(self._name)
        )
        cb_ctx = CallbackContext(
            agent_name=self._name,
            invocation_id=inv.invocation_id,
            session_state=inv.session_state,
            user_content=message,
        )

        with _tracer.start_as_current_span("agent.process") as span:
            span.set_attribute(ATTR_AGENT_NAME, self._name)
            span.set_attribute(ATTR_AGENT_KIND, "llm")
            span.set_attribute(ATTR_INVOCATION_ID, inv.invocation_id)
            span.set_attribute(ATTR_MAX_ROUNDS, self.max_tool_rounds)

            override = await invoke(self.callbacks.before_agent, cb_ctx, hook="before_agent")
            if override is not None:
                inv.send_internal_log("Agent '%s' turn was answered by a callback.", self._name)
                return override

            return await self._run_rounds(inv, cb_ctx, self._provider, history, message)

    async def _run_rounds(
        self,
        inv: InvocationContext,
        cb_ctx: CallbackContext,
        provider: ModelProvider,
        history: Sequence[Message],
        message: Message,
    ) -> Message:
        turn_history = list(history)
        current = message

        for round_no in range(1, self.max_tool_rounds + 1):
            inv.check_cancelled(f"start of round {round_no}")

            with _tracer.start_as_current_span("agent.round") as span:
                span.set_attribute(ATTR_AGENT_NAME, self._name)
                span.set_attribute(ATTR_ROUND, round_no)

                response = await self._call_model(inv, cb_ctx, provider, turn_history, current)

                turn_history.append(current)
                turn_history.append(response)

                calls = response.function_calls
                span.set_attribute(ATTR_TOOL_CALLS, len(calls))
                if not calls:
                    final = await invoke(self.callbacks.after_agent, cb_ctx, response, hook="after_agent")
                    return final if final is not None else response

                current = await self._dispatch(inv, cb_ctx, calls)

        final = await invoke(self.callbacks.after_agent, cb_ctx, None, hook="after_agent")
        if final is not None:
            return final
        raise MaxToolRoundsExceededError(self._name, self.max_tool_rounds)

    async def _call_model(
        self,
        inv: InvocationContext,
        cb_ctx: CallbackContext,
        provider: ModelProvider,
        turn_history: list[Message],
        current: Message,
    ) -> Message:
        request = LlmRequest(
            model_identifier=self._model_identifier,
            system_instruction=self._system_instruction,
            tools=self.tools,
            history=list(turn_history),
            latest_message=current,
        )

        llm_response: LlmResponse | None = await invoke(
            self.callbacks.before_model, cb_ctx, request, hook="before_model"
        )
        if llm_response is not None:
            inv.send_internal_log("Agent '%s' model call was overridden by a callback.", self._name)
        else:
            inv.check_cancelled("before model call")
            inv.emit("model_call", {"model": self._model_identifier})
            try:
                content = await provider.generate_content(
                    request.model_identifier,
                    request.system_instruction,
                    request.tools,
                    request.history,
                    request.latest_message,
                )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                raise ModelBackendError(str(exc)) from exc
            llm_response = LlmResponse(content=content)

        modified = await invoke(self.callbacks.after_model, cb_ctx, llm_response, hook="after_model")
        if modified is not None:
            llm_response = modified

        if llm_response.content is None or llm_response.content.is_empty:
            raise EmptyResponseError(self._name)
        return llm_response.content

    # -- tool dispatch --------------------------------------------------------

    async def _dispatch(
        self,
        inv: InvocationContext,
        cb_ctx: CallbackContext,
        calls: list[FunctionCallPart],
    ) -> Message:
        """Execute one round's calls concurrently and wrap the results."""
        inv.send_internal_log("Agent '%s' is calling %d tools in parallel...", self._name, len(calls))
        tasks = [asyncio.ensure_future(self._run_tool(inv, cb_ctx, call)) for call in calls]
        await inv.wait_all(tasks, where="waiting for tool results")
        return Message.function([task.result() for task in tasks])

    async def _run_tool(
        self,
        inv: InvocationContext,
        cb_ctx: CallbackContext,
        call: FunctionCallPart,
    ) -> FunctionResponsePart:
        inv.send_internal_log("  - Calling tool '%s'%s", call.name, _format_args(call.args))
        inv.emit("tool_call", {"tool": call.name, "args": call.args})

        with _tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, call.name)
            try:
                result = await self._execute(cb_ctx, call)
            except ToolError as exc:
                span.set_attribute(ATTR_TOOL_ERROR, str(exc))
                record_error(span, exc)
                inv.send_internal_log("  - Error: %s", exc)
                inv.emit("tool_result", {"tool": call.name, "error": str(exc)})
                return FunctionResponsePart(name=call.name, id=call.id, response={"error": str(exc)})

        inv.send_internal_log("  - Tool '%s' executed successfully", call.name)
        inv.emit("tool_result", {"tool": call.name, "result": result})
        return FunctionResponsePart(name=call.name, id=call.id, response=result)

    async def _execute(self, cb_ctx: CallbackContext, call: FunctionCallPart) -> dict[str, Any]:
        """Look up, run and validate one call; every failure is a :class:`ToolError`."""
        tool = self._tools.get(call.name)
        if tool is None:
            raise ToolNotFoundError(call.name)

        args = dict(call.args)
        modified_args = await invoke(self.callbacks.before_tool, cb_ctx, tool, args, hook="before_tool")
        if modified_args is not None:
            args = modified_args

        try:
            if self.tool_timeout is None:
                raw = await tool.execute(args)
            else:
                raw = await asyncio.wait_for(tool.execute(args), timeout=self.tool_timeout)
        except TimeoutError as exc:
            if self.tool_timeout is None:
                raise ToolExecutionError(tool.name, str(exc) or "TimeoutError") from exc
            raise ToolTimeoutError(tool.name, self.tool_timeout) from exc
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.debug("Tool %s raised", tool.name, exc_info=True)
            raise ToolExecutionError(tool.name, str(exc) or type(exc).__name__) from exc

        if not isinstance(raw, Mapping) or not all(isinstance(key, str) for key in raw):
            raise ToolResultSchemaError(tool.name, type(raw).__name__)
        result: dict[str, Any] = dict(raw)  # pyright: ignore[reportUnknownArgumentType]

        modified = await invoke(self.callbacks.after_tool, cb_ctx, tool, args, result, hook="after_tool")
        if modified is not None:
            result = modified
        return result

    def __repr__(self) -> str:
        return f"LlmAgent(name={self._name!r}, model={self._model_identifier!r})"


def _format_args(args: dict[str, Any]) -> str:
    if not args:
        return ""
    try:
        return f" with args: {json.dumps(args, default=str)}"
    except (TypeError, ValueError):
        return f" with args: {args!r}"
