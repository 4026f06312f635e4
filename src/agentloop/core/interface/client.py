"""LiteLLMProvider: a :class:`ModelProvider` backed by LiteLLM.

Wraps ``litellm.acompletion`` behind the normalized message contract so the
engine only ever works with :class:`Message`.  No retries happen here;
failures propagate to the engine, which treats them as fatal for the turn.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import litellm

from agentloop.core.interface.transpiler import (
    parse_completion,
    to_openai_messages,
    to_openai_tools,
)
from agentloop.utils.telemetry import (
    ATTR_FINISH_REASON,
    ATTR_MODEL,
    ATTR_TOKENS_COMPLETION,
    ATTR_TOKENS_PROMPT,
    ATTR_TOKENS_TOTAL,
    get_tracer,
)

if TYPE_CHECKING:
    from agentloop.core.interface.config import ModelConfig
    from agentloop.core.interface.models import Message
    from agentloop.tools.base import Tool

_tracer = get_tracer(__name__)


class LiteLLMProvider:
    """Async model backend using LiteLLM.

    Usage::

        provider = LiteLLMProvider(ModelConfig(model="gemini/gemini-2.5-flash"))
        reply = await provider.generate_content(
            "gemini/gemini-2.5-flash", None, [], [], Message.user("hi")
        )

    The *model_id* passed per call wins over ``config.model`` so one
    provider can serve agents configured with different models.
    """

    def __init__(self, config: ModelConfig) -> None:
        self.config = config

    async def generate_content(
        self,
        model_id: str,
        system_instruction: Message | None,
        tools: Sequence[Tool],
        history: Sequence[Message],
        message: Message,
    ) -> Message:
        model = model_id or self.config.model
        with _tracer.start_as_current_span("model.generate") as span:
            span.set_attribute(ATTR_MODEL, model)

            call_kwargs = self.config.completion_kwargs(model)
            call_kwargs["messages"] = to_openai_messages(system_instruction, history, message)
            if tools:
                call_kwargs["tools"] = to_openai_tools(tools)

            response = await litellm.acompletion(**call_kwargs)  # pyright: ignore[reportUnknownMemberType]

            usage = getattr(response, "usage", None)
            if usage:
                span.set_attribute(ATTR_TOKENS_PROMPT, int(usage.prompt_tokens or 0))
                span.set_attribute(ATTR_TOKENS_COMPLETION, int(usage.completion_tokens or 0))
                span.set_attribute(ATTR_TOKENS_TOTAL, int(usage.total_tokens or 0))
            finish_reason = response.choices[0].finish_reason
            if finish_reason is not None:
                span.set_attribute(ATTR_FINISH_REASON, str(finish_reason))

            return parse_completion(response)
