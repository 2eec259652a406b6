"""
In-memory session store with per-session locking.

Each session key maps to a ``SessionState`` and its own ``asyncio.Lock``.
The dialogue engine holds the lock for a whole turn, so two messages for
the same session never interleave their read-modify-write, while messages
for different sessions proceed concurrently.

State lives for the process lifetime only. Sessions idle for longer than
``idle_ttl_sec`` are evicted on access; a TTL of 0 keeps them forever.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from src.schemas.conversation_schema import SessionState

logger = logging.getLogger(__name__)


class SessionStore:
    """Keyed map of session state owned by a single dialogue engine."""

    def __init__(
        self,
        idle_ttl_sec: float = 0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._sessions: dict[str, SessionState] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._idle_ttl_sec = idle_ttl_sec
        self._clock = clock or time.monotonic

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_key: str) -> bool:
        return session_key in self._sessions

    def get_or_create(self, session_key: str) -> SessionState:
        """Return the session for ``session_key``, creating a fresh one if unseen."""
        self.evict_idle()
        session = self._sessions.get(session_key)
        if session is not None and self._is_idle(session):
            # the caller may hold this key's lock, which evict_idle skips
            logger.info("Session expired: %s", session_key)
            session = None
        if session is None:
            session = SessionState(last_active=self._clock())
            self._sessions[session_key] = session
            logger.debug("Session created: %s", session_key)
        else:
            session.last_active = self._clock()
        return session

    def _is_idle(self, session: SessionState) -> bool:
        if not self._idle_ttl_sec:
            return False
        return session.last_active < self._clock() - self._idle_ttl_sec

    def _lock_for(self, session_key: str) -> asyncio.Lock:
        lock = self._locks.get(session_key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_key] = lock
        return lock

    @asynccontextmanager
    async def lock(self, session_key: str) -> AsyncIterator[None]:
        """Serialize turns for one session key."""
        async with self._lock_for(session_key):
            yield

    def evict_idle(self) -> int:
        """Drop sessions idle longer than the TTL. Returns the number evicted."""
        if not self._idle_ttl_sec:
            return 0
        expired = [
            key
            for key, session in self._sessions.items()
            if self._is_idle(session) and not self._is_locked(key)
        ]
        for key in expired:
            del self._sessions[key]
            self._locks.pop(key, None)
        if expired:
            logger.info("Evicted %d idle session(s)", len(expired))
        return len(expired)

    def _is_locked(self, session_key: str) -> bool:
        lock = self._locks.get(session_key)
        return lock is not None and lock.locked()

    def reset(self) -> None:
        """Clear all sessions. Used by test fixtures for isolation."""
        self._sessions.clear()
        self._locks.clear()
