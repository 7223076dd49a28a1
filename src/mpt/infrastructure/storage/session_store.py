"""
Session Store

Keyed storage for Session aggregates (session, state and failover
record travel together). The orchestrator only talks to the abstract
interface, so the in-memory store can be replaced by a persistent or
distributed one.

PRIVACY: Sessions hold full transcripts; never log their content.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Callable, Optional

from mpt.config.logging_config import get_logger
from mpt.domain.models import Session
from mpt.infrastructure.metrics import ACTIVE_SESSIONS

logger = get_logger(__name__)


class SessionStore(ABC):
    """
    Abstract session storage.

    ``lock`` returns the per-session mutex that serializes chat turns
    for one id; it is valid whether or not the session exists yet.
    """

    @abstractmethod
    async def get(self, session_id: str) -> Optional[Session]:
        """
        Get session by id.

        Returns:
            Session if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def put(self, session: Session) -> None:
        """Insert or replace a session."""
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """
        Remove a session.

        Returns:
            True if the session existed
        """
        pass

    @abstractmethod
    def lock(self, session_id: str) -> asyncio.Lock:
        """Mutex for turns of one session."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class InMemorySessionStore(SessionStore):
    """
    Process-local store with idle TTL and LRU capacity eviction.

    Expired sessions are dropped lazily on access and on insert.
    Locks of evicted sessions are dropped once they are no longer held.
    """

    def __init__(
        self,
        ttl_seconds: float = 86400,
        max_sessions: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[str, tuple[Session, float]]" = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}

    async def get(self, session_id: str) -> Optional[Session]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        session, last_access = entry
        now = self._clock()
        if now - last_access > self.ttl_seconds:
            self._evict(session_id, reason="expired")
            return None

        self._sessions[session_id] = (session, now)
        self._sessions.move_to_end(session_id)
        return session

    async def put(self, session: Session) -> None:
        self._sessions[session.id] = (session, self._clock())
        self._sessions.move_to_end(session.id)
        self._purge()
        ACTIVE_SESSIONS.set(len(self._sessions))

    async def delete(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            return False
        self._evict(session_id, reason="deleted")
        return True

    def lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge(self) -> None:
        """Drop expired sessions, then least recently used ones over capacity."""
        # Entries are ordered by last access, oldest first
        now = self._clock()
        while self._sessions:
            oldest, (_, last_access) = next(iter(self._sessions.items()))
            if now - last_access <= self.ttl_seconds:
                break
            self._evict(oldest, reason="expired")

        while len(self._sessions) > self.max_sessions:
            oldest = next(iter(self._sessions))
            self._evict(oldest, reason="capacity")

        orphaned = [sid for sid, lock in self._locks.items() if sid not in self._sessions and not lock.locked()]
        for session_id in orphaned:
            del self._locks[session_id]

    def _evict(self, session_id: str, reason: str) -> None:
        self._sessions.pop(session_id, None)
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked():
            del self._locks[session_id]
        ACTIVE_SESSIONS.set(len(self._sessions))
        logger.debug("Session evicted", session_id=session_id, reason=reason)
