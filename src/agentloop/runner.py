"""Runner: drives one agent turn by turn against a session store.

The runner owns the parts of a conversation the engine deliberately does
not: resuming or creating sessions, appending finished turns, pruning old
turns and saving.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from agentloop.agents.invocation import InvocationContext, Observer
from agentloop.core.interface.models import Message
from agentloop.sessions.models import Session

if TYPE_CHECKING:
    from agentloop.agents.base import Agent
    from agentloop.sessions.store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_TURNS = 10


class Runner:
    """Run turns of *agent*, persisting history through *store*.

    Usage::

        runner = Runner(agent, FileSessionStore(".sessions"))
        session = await runner.get_or_create_session(session_id)
        reply = await runner.run_turn(session, "What's the weather?")
    """

    def __init__(
        self,
        agent: Agent,
        store: SessionStore,
        *,
        max_history_turns: int = DEFAULT_MAX_HISTORY_TURNS,
        observer: Observer | None = None,
    ) -> None:
        self.agent = agent
        self.store = store
        self.max_history_turns = max_history_turns
        self.observer = observer

    async def get_or_create_session(self, session_id: str | None = None) -> Session:
        """Resume *session_id* if it exists and belongs to this agent, else start fresh."""
        if session_id:
            existing = await self.store.get(session_id)
            if existing is not None and existing.agent_name == self.agent.name:
                return existing
            if existing is not None:
                logger.warning(
                    "Session %s belongs to agent '%s', not '%s'; starting a new one",
                    session_id,
                    existing.agent_name,
                    self.agent.name,
                )

        session = Session(agent_name=self.agent.name)
        await self.store.save(session)
        return session

    async def run_turn(
        self,
        session: Session,
        message: Message | str,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Message | None:
        """Run one turn and persist it.

        On failure only the user message is recorded, the session is saved and
        the error propagates to the caller.
        """
        user_message = Message.user(message) if isinstance(message, str) else message
        ctx = InvocationContext(
            agent_name=self.agent.name,
            session=session,
            user_content=user_message,
            observer=self.observer,
            cancel_event=cancel_event,
        )

        try:
            response = await self.agent.process(list(session.history), user_message, ctx=ctx)
        except Exception:
            session.append_turn(user_message, None)
            await self._persist(session)
            raise

        session.append_turn(user_message, response)
        await self._persist(session)
        return response

    async def _persist(self, session: Session) -> None:
        session.prune(self.max_history_turns)
        await self.store.save(session)
