"""Shared fixtures: scripted model providers, tool-call messages and stub agents."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from agentloop.agents.base import AgentStructure
from agentloop.core.interface.models import FunctionCallPart, Message


@pytest.fixture
def scripted_provider() -> Callable[..., MagicMock]:
    """Build a provider whose ``generate_content`` returns the given replies in order.

    Each reply may be a :class:`Message`, ``None`` or an exception instance.
    """

    def make(*replies: Any) -> MagicMock:
        provider = MagicMock()
        provider.generate_content = AsyncMock(side_effect=list(replies))
        return provider

    return make


@pytest.fixture
def call_message() -> Callable[..., Message]:
    """Model message requesting tool calls: ``call_message(("add", {"a": 1}), ...)``."""

    def make(*calls: tuple[str, dict[str, Any]], text: str = "") -> Message:
        return Message.model(text, [FunctionCallPart(name=name, args=args) for name, args in calls])

    return make


class StubAgent:
    """A leaf agent that answers from a script and records what it was given."""

    def __init__(self, name: str, *replies: Any, delay: float = 0.0) -> None:
        self._name = name
        self._replies = list(replies)
        self.delay = delay
        self.calls: list[tuple[list[Message], Message]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return f"stub {self._name}"

    @property
    def model_identifier(self) -> str:
        return "stub-model"

    @property
    def system_instruction(self) -> Message | None:
        return None

    @property
    def tools(self) -> list[Any]:
        return []

    @property
    def provider(self) -> Any:
        return None

    async def process(self, history: Any, message: Message, *, ctx: Any = None) -> Message | None:
        self.calls.append((list(history), message))
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(message)
        return reply

    def describe(self) -> AgentStructure:
        return AgentStructure(name=self._name, kind="llm")


@pytest.fixture
def stub_agent() -> type[StubAgent]:
    """``stub_agent(name, *replies)``; the last reply repeats once the script runs out."""
    return StubAgent
