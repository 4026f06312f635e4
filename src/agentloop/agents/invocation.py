"""Invocation context: per-call identifiers, observer channel and cancellation.

One :class:`InvocationContext` is created per turn and handed down the
agent tree; each agent works on a :meth:`~InvocationContext.child` view
carrying its own name.  Nothing here is process-global.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from agentloop.errors import AgentCancelledError

if TYPE_CHECKING:
    from agentloop.core.interface.models import Message
    from agentloop.sessions.models import Session

logger = logging.getLogger(__name__)

Observer = Callable[[str, dict[str, Any]], None]


@dataclass
class InvocationContext:
    """Contextual information for one agent invocation.

    ``observer`` is a fire-and-forget diagnostic sink (progress messages,
    internal logs).  It is never consulted for control flow.

    ``cancel_event``, when set, cancels the whole call tree cooperatively:
    agents check it at the start of each round, before each backend call,
    and while waiting for concurrent tools or sub-agents.
    """

    invocation_id: str = field(default_factory=lambda: uuid4().hex)
    agent_name: str = ""
    session: Session | None = None
    user_content: Message | None = None
    observer: Observer | None = None
    cancel_event: asyncio.Event | None = None

    def child(self, agent_name: str) -> InvocationContext:
        """Return a view for *agent_name* sharing id, session, observer and cancel signal."""
        return dataclasses.replace(self, agent_name=agent_name)

    @property
    def session_state(self) -> dict[str, Any] | None:
        return self.session.state if self.session is not None else None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def check_cancelled(self, where: str = "") -> None:
        if self.cancelled:
            raise AgentCancelledError(self.agent_name, where)

    def emit(self, event_type: str, payload: dict[str, Any]) -> None:
        """Send an event to the observer; observer failures are logged only."""
        if self.observer is None:
            return
        event = {"invocation_id": self.invocation_id, "agent": self.agent_name, **payload}
        try:
            self.observer(event_type, event)
        except Exception:
            logger.warning("Observer failed on %s event", event_type, exc_info=True)

    def send_internal_log(self, fmt: str, *args: Any) -> None:
        message = fmt % args if args else fmt
        logger.debug("[%s] %s", self.agent_name, message)
        self.emit("internal_log", {"message": message})

    async def wait_all(
        self,
        tasks: Iterable[asyncio.Future[Any]],
        *,
        where: str,
        fail_fast: bool = False,
    ) -> None:
        """Block until every task has finished.

        With *fail_fast*, return as soon as one task raised.  If the
        cancellation signal fires first, raise :class:`AgentCancelledError`
        without killing the tasks; their results are simply never read.
        """
        pending: set[asyncio.Future[Any]] = set(tasks)
        waiter = (
            asyncio.ensure_future(self.cancel_event.wait())
            if self.cancel_event is not None
            else None
        )
        try:
            while pending:
                watched = set(pending)
                if waiter is not None:
                    watched.add(waiter)
                done, _ = await asyncio.wait(watched, return_when=asyncio.FIRST_COMPLETED)
                if waiter is not None and waiter in done:
                    for task in pending:
                        task.add_done_callback(_discard_result)
                    raise AgentCancelledError(self.agent_name, where)
                pending -= done
                if fail_fast and any(_failed(task) for task in done):
                    return
        finally:
            if waiter is not None:
                waiter.cancel()


def _failed(task: asyncio.Future[Any]) -> bool:
    return not task.cancelled() and task.exception() is not None


def _discard_result(task: asyncio.Future[Any]) -> None:
    if not task.cancelled():
        task.exception()
