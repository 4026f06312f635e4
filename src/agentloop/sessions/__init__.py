"""Sessions: conversation history plus state, and the stores that keep them."""

from agentloop.sessions.models import Session
from agentloop.sessions.store import FileSessionStore, InMemorySessionStore, SessionStore

__all__ = [
    "FileSessionStore",
    "InMemorySessionStore",
    "Session",
    "SessionStore",
]
