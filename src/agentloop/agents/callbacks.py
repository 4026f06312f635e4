"""Callbacks: optional interception points around agent, model and tool stages.

Each callback may be a plain function or a coroutine function.  Returning
``None`` means "no override"; returning a value replaces the data in
flight.  Callbacks observe and rewrite, they never own control flow beyond
the overrides documented on :class:`Callbacks`.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ConfigDict

from agentloop.core.interface.models import Message
from agentloop.errors import AgentError, CallbackError

if TYPE_CHECKING:
    from agentloop.tools.base import Tool

T = TypeVar("T")


@dataclass
class CallbackContext:
    """What a callback gets to see about the current invocation.

    ``session_state`` is the live session state mapping (not a copy), so a
    callback may record values in it for the caller to persist.
    """

    agent_name: str
    invocation_id: str
    session_state: dict[str, Any] | None = None
    user_content: Message | None = None


class LlmRequest(BaseModel):
    """One backend request as the before-model callback sees it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    model_identifier: str
    system_instruction: Message | None = None
    tools: list[Any] = []
    history: list[Message] = []
    latest_message: Message


class LlmResponse(BaseModel):
    """One backend response; ``None`` or zero-part ``content`` is a fatal empty reply."""

    content: Message | None = None


BeforeAgentCallback = Callable[[CallbackContext], "Message | None | Awaitable[Message | None]"]
AfterAgentCallback = Callable[
    [CallbackContext, "Message | None"], "Message | None | Awaitable[Message | None]"
]
BeforeModelCallback = Callable[
    [CallbackContext, LlmRequest], "LlmResponse | None | Awaitable[LlmResponse | None]"
]
AfterModelCallback = Callable[
    [CallbackContext, LlmResponse], "LlmResponse | None | Awaitable[LlmResponse | None]"
]
BeforeToolCallback = Callable[
    [CallbackContext, "Tool", dict[str, Any]],
    "dict[str, Any] | None | Awaitable[dict[str, Any] | None]",
]
AfterToolCallback = Callable[
    [CallbackContext, "Tool", dict[str, Any], dict[str, Any]],
    "dict[str, Any] | None | Awaitable[dict[str, Any] | None]",
]


@dataclass
class Callbacks:
    """The six optional hooks of an :class:`~agentloop.agents.llm_agent.LlmAgent`.

    - ``before_agent``: a returned message short-circuits the whole turn.
    - ``after_agent``: may replace the final answer; also called with
      ``None`` when the tool-round cap is hit, as a last chance to answer.
    - ``before_model``: a returned response skips the backend call.
    - ``after_model``: may rewrite the backend response.
    - ``before_tool``: may rewrite a call's arguments.
    - ``after_tool``: may rewrite a successful tool result.
    """

    before_agent: BeforeAgentCallback | None = None
    after_agent: AfterAgentCallback | None = None
    before_model: BeforeModelCallback | None = None
    after_model: AfterModelCallback | None = None
    before_tool: BeforeToolCallback | None = None
    after_tool: AfterToolCallback | None = None


async def invoke(callback: Callable[..., Any] | None, *args: Any, hook: str = "callback") -> Any:
    """Call *callback* if set, awaiting its result when it is awaitable.

    Anything the callback raises other than an :class:`AgentError` is
    wrapped in :class:`CallbackError` naming *hook*.
    """
    if callback is None:
        return None
    try:
        result = callback(*args)
        if inspect.isawaitable(result):
            result = await result
    except AgentError:
        raise
    except Exception as exc:
        raise CallbackError(hook, exc) from exc
    return result
