"""Session model: one resumable conversation owned by one agent."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from agentloop.core.interface.models import Message, truncate_history


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Session(BaseModel):
    """An ordered conversation log plus a free-form state bag.

    The engine never persists sessions; the runner appends each finished
    turn and hands the session to a :class:`~agentloop.sessions.store.SessionStore`.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    agent_name: str
    history: list[Message] = []
    state: dict[str, Any] = {}
    last_update_time: datetime = Field(default_factory=_utcnow)

    def append_turn(self, user_message: Message, response: Message | None) -> None:
        """Record one turn; a missing response records the user message only."""
        self.history.append(user_message)
        if response is not None:
            self.history.append(response)
        self.touch()

    def prune(self, max_turns: int) -> None:
        """Drop old turns, keeping at most *max_turns* (user, response) pairs."""
        self.history = truncate_history(self.history, max_turns)

    def touch(self) -> None:
        self.last_update_time = _utcnow()

    @property
    def turn_count(self) -> int:
        return sum(1 for message in self.history if message.role == "user")
