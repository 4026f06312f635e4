"""Session persistence backends.

:class:`SessionStore` defines the async storage protocol.
:class:`InMemorySessionStore` keeps serialized sessions in a dict;
:class:`FileSessionStore` writes one JSON file per session.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from agentloop.errors import ConfigurationError, SessionNotFoundError
from agentloop.sessions.models import Session

logger = logging.getLogger(__name__)

_SESSION_ID = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")


class SessionStore(Protocol):
    """Async persistence protocol for :class:`Session` instances."""

    async def get(self, session_id: str) -> Session | None:
        """Load a session by ID, or return ``None`` if it does not exist."""
        ...

    async def save(self, session: Session) -> None:
        """Persist the session under its ID (upsert semantics)."""
        ...

    async def list_by_agent(self, agent_name: str) -> list[str]:
        """Return IDs of sessions owned by *agent_name*, most recently updated first."""
        ...

    async def delete(self, session_id: str) -> None:
        """Remove a session; raise :class:`SessionNotFoundError` if absent."""
        ...


class InMemorySessionStore:
    """Dict-backed :class:`SessionStore` implementation.

    Stores sessions as serialized JSON so that each :meth:`get` returns a
    fresh, independent copy (mimicking a real persistence layer).
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, session_id: str) -> Session | None:
        data = self._store.get(session_id)
        if data is None:
            return None
        return Session.model_validate_json(data)

    async def save(self, session: Session) -> None:
        self._store[session.id] = session.model_dump_json()

    async def list_by_agent(self, agent_name: str) -> list[str]:
        sessions = [Session.model_validate_json(data) for data in self._store.values()]
        owned = [s for s in sessions if s.agent_name == agent_name]
        owned.sort(key=lambda s: s.last_update_time, reverse=True)
        return [s.id for s in owned]

    async def delete(self, session_id: str) -> None:
        if self._store.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)


class FileSessionStore:
    """File-backed :class:`SessionStore`: ``<directory>/<id>.json`` per session.

    File I/O runs in worker threads; writes and deletes are serialized with an
    :class:`asyncio.Lock`, so one store instance belongs to one event loop.
    Unreadable or invalid files are logged and treated as missing.  Session
    IDs must be plain file stems; anything that could name a path outside
    *directory* is rejected with :class:`ConfigurationError`.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._lock = asyncio.Lock()

    def _path(self, session_id: str) -> Path:
        if not _SESSION_ID.fullmatch(session_id):
            raise ConfigurationError(f"invalid session ID {session_id!r}")
        return self.directory / f"{session_id}.json"

    async def get(self, session_id: str) -> Session | None:
        return await asyncio.to_thread(self._read, self._path(session_id))

    async def save(self, session: Session) -> None:
        path = self._path(session.id)
        data = session.model_dump_json(indent=2)
        async with self._lock:
            await asyncio.to_thread(self._write, path, data)

    async def list_by_agent(self, agent_name: str) -> list[str]:
        sessions = await asyncio.to_thread(self._read_all)
        owned = [s for s in sessions if s.agent_name == agent_name]
        owned.sort(key=lambda s: s.last_update_time, reverse=True)
        return [s.id for s in owned]

    async def delete(self, session_id: str) -> None:
        path = self._path(session_id)
        async with self._lock:
            try:
                await asyncio.to_thread(path.unlink)
            except FileNotFoundError as exc:
                raise SessionNotFoundError(session_id) from exc

    def _write(self, path: Path, data: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")

    def _read_all(self) -> list[Session]:
        if not self.directory.is_dir():
            return []
        found = (self._read(path) for path in sorted(self.directory.glob("*.json")))
        return [session for session in found if session is not None]

    def _read(self, path: Path) -> Session | None:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("Error reading session file %s", path, exc_info=True)
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError:
            logger.warning("Error parsing session file %s", path, exc_info=True)
            return None
