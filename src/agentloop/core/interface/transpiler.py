"""OpenAI-style transpiler: LiteLLM speaks ChatML for every provider.

Converts agentloop messages into OpenAI chat-completion messages and
tool schemas, and converts a completion back into a :class:`Message`.
LiteLLM handles the remaining provider adaptation internally.
"""

from __future__ import annotations

import json
from collections import defaultdict, deque
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from agentloop.core.interface.models import FunctionCallPart, Message, Part, TextPart

if TYPE_CHECKING:
    from agentloop.tools.base import Tool


def to_openai_messages(
    system_instruction: Message | None,
    history: Sequence[Message],
    message: Message,
) -> list[dict[str, Any]]:
    """Flatten instruction, history and the new message into ChatML.

    Function calls without an id get a synthetic one; the following
    function responses are matched to those ids by tool name, in order.
    """
    result: list[dict[str, Any]] = []
    if system_instruction is not None and system_instruction.text:
        result.append({"role": "system", "content": system_instruction.text})

    pending: defaultdict[str, deque[str]] = defaultdict(deque)
    counter = 0

    for msg in [*history, message]:
        if msg.role == "function":
            for resp in msg.function_responses:
                call_id = resp.id
                if call_id is None:
                    queue = pending[resp.name]
                    call_id = queue.popleft() if queue else f"call_{resp.name}"
                result.append(
                    {
                        "role": "tool",
                        "tool_call_id": call_id,
                        "content": json.dumps(resp.response, default=str),
                    }
                )
            continue

        if msg.role == "model":
            entry: dict[str, Any] = {"role": "assistant", "content": msg.text or None}
            calls = msg.function_calls
            if calls:
                tool_calls: list[dict[str, Any]] = []
                for call in calls:
                    call_id = call.id
                    if call_id is None:
                        counter += 1
                        call_id = f"call_{counter}"
                    pending[call.name].append(call_id)
                    tool_calls.append(
                        {
                            "id": call_id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": json.dumps(call.args, default=str),
                            },
                        }
                    )
                entry["tool_calls"] = tool_calls
            result.append(entry)
            continue

        if msg.is_empty:
            continue
        result.append({"role": msg.role, "content": msg.text})

    return result


def to_openai_tools(tools: Sequence[Tool]) -> list[dict[str, Any]]:
    """Render tools as OpenAI function schemas."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters or {"type": "object", "properties": {}},
            },
        }
        for tool in tools
    ]


def parse_completion(response: Any) -> Message:
    """Convert a LiteLLM completion response into a model :class:`Message`."""
    message = response.choices[0].message

    parts: list[Part] = []
    if message.content:
        parts.append(TextPart(text=message.content))

    for tc in message.tool_calls or []:
        parts.append(
            FunctionCallPart(
                id=tc.id,
                name=tc.function.name,
                args=_parse_arguments(tc.function.arguments),
            )
        )

    return Message(role="model", parts=parts)


def _parse_arguments(raw: Any) -> dict[str, Any]:
    """Parse JSON string arguments from a tool call."""
    if isinstance(raw, dict):
        return dict(raw)  # pyright: ignore[reportUnknownArgumentType]
    try:
        result = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {"raw": raw}
    if not isinstance(result, dict):
        return {"raw": result}
    return result  # pyright: ignore[reportUnknownVariableType]
