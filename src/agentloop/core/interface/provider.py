"""ModelProvider protocol: the one contract the engine needs from a backend.

The backend receives a normalized conversation and returns one normalized
response.  Authentication, transport, retries and wire formats are the
backend's business.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from agentloop.core.interface.models import Message
    from agentloop.tools.base import Tool


@runtime_checkable
class ModelProvider(Protocol):
    """Generates one model response for a conversation."""

    async def generate_content(
        self,
        model_id: str,
        system_instruction: Message | None,
        tools: Sequence[Tool],
        history: Sequence[Message],
        message: Message,
    ) -> Message:
        """Return the model's response to *message* given *history*.

        *tools* may be empty and *system_instruction* may be ``None``.  The
        returned message may mix text parts with any number of function
        calls.
        """
        ...
