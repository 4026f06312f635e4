"""Message model: the normalized conversation unit for agentloop.

A :class:`Message` is exchanged between the caller, the engine, the model
backend and tools, and is what history stores.  Provider-specific formats
never leak past the backend; see :mod:`agentloop.core.interface.transpiler`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

Role = Literal["user", "model", "function", "system"]

# ---------------------------------------------------------------------------
# Parts: exactly one of text, function call, function response
# ---------------------------------------------------------------------------


class TextPart(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


class FunctionCallPart(BaseModel):
    """A model's request to invoke a named tool.

    ``id`` is an optional correlation id some providers emit; the engine
    copies it onto the matching :class:`FunctionResponsePart`.
    """

    type: Literal["function_call"] = "function_call"
    name: str
    args: dict[str, Any] = {}
    id: str | None = None


class FunctionResponsePart(BaseModel):
    """The result of a tool invocation fed back to the model.

    ``response`` is the tool's result mapping, or ``{"error": ...}`` when
    the tool could not be found, failed, or returned a non-mapping.
    """

    type: Literal["function_response"] = "function_response"
    name: str
    response: dict[str, Any] = {}
    id: str | None = None

    @property
    def is_error(self) -> bool:
        return set(self.response) == {"error"}


Part = Annotated[TextPart | FunctionCallPart | FunctionResponsePart, Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Message
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single message in a conversation.

    Roles:
    - user: caller input (also used for synthesized prompts)
    - model: backend responses (may mix text and function calls)
    - function: tool results, one response part per call
    - system: instructions
    """

    role: Role
    parts: list[Part] = []

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(part.text for part in self.parts if isinstance(part, TextPart))

    @property
    def texts(self) -> list[str]:
        """Each text part on its own, in order."""
        return [part.text for part in self.parts if isinstance(part, TextPart)]

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        """All function calls in encounter order, wherever they appear."""
        return [part for part in self.parts if isinstance(part, FunctionCallPart)]

    @property
    def function_responses(self) -> list[FunctionResponsePart]:
        return [part for part in self.parts if isinstance(part, FunctionResponsePart)]

    @property
    def is_empty(self) -> bool:
        """A message with zero parts carries no content."""
        return not self.parts

    @classmethod
    def user(cls, text: str) -> Message:
        parts: list[Part] = [TextPart(text=text)]
        return cls(role="user", parts=parts)

    @classmethod
    def system(cls, text: str) -> Message:
        parts: list[Part] = [TextPart(text=text)]
        return cls(role="system", parts=parts)

    @classmethod
    def model(
        cls,
        text: str = "",
        calls: Sequence[FunctionCallPart] | None = None,
    ) -> Message:
        """Create a model message; text (if any) precedes the calls."""
        parts: list[Part] = [TextPart(text=text)] if text else []
        parts.extend(calls or [])
        return cls(role="model", parts=parts)

    @classmethod
    def function(cls, responses: Sequence[FunctionResponsePart]) -> Message:
        """Wrap tool results into one function-role message."""
        return cls(role="function", parts=list(responses))

    @classmethod
    def empty(cls, role: Role = "user") -> Message:
        return cls(role=role, parts=[])


# ---------------------------------------------------------------------------
# History helpers
# ---------------------------------------------------------------------------


def truncate_history(messages: Sequence[Message], max_turns: int) -> list[Message]:
    """Keep the last *max_turns* turns (two messages each).

    Leading function-role messages left behind by the cut are dropped too,
    so a function response never survives without the call that caused it.
    The input sequence is never mutated.
    """
    if max_turns <= 0:
        return []
    limit = max_turns * 2
    kept = list(messages[-limit:]) if len(messages) > limit else list(messages)
    if len(kept) == len(messages):
        return kept

    start = 0
    while start < len(kept) and kept[start].function_responses:
        start += 1
    return kept[start:]
