"""
In-memory session store.

One SessionStore is built at application startup and shared by every request
(see planner.main lifespan). Nothing here is persisted; a restart forgets all
sessions. Eviction is never automatic: `evict_older_than` is called by
whatever schedules pruning (the /sessions/prune endpoint).
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from planner.errors import SessionNotFoundError
from planner.schemas.project import Session, utcnow

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def now(self) -> datetime:
        return self._clock()

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get_or_create(self, session_id: str) -> Session:
        existing = self._sessions.get(session_id)
        if existing is not None:
            return existing
        now = self.now()
        session = Session(session_id=session_id, created_at=now, updated_at=now)
        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session

    def touch(self, session: Session) -> None:
        session.updated_at = self.now()

    def remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        # A held lock stays so the next request on this key waits for the running turn
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked():
            del self._locks[session_id]

    def clear_all(self) -> None:
        self._sessions.clear()
        self._locks = {sid: lock for sid, lock in self._locks.items() if lock.locked()}

    def list_active_keys(self) -> list[str]:
        return list(self._sessions.keys())

    def evict_older_than(self, max_age_hours: float) -> int:
        """Remove every session not updated within `max_age_hours`. Returns the count removed."""
        cutoff = self.now() - timedelta(hours=max_age_hours)
        stale = [sid for sid, s in self._sessions.items() if s.updated_at < cutoff]
        for sid in stale:
            self.remove(sid)
        if stale:
            logger.info("Evicted %d session(s) older than %sh", len(stale), max_age_hours)
        return len(stale)

    def lock(self, session_id: str) -> asyncio.Lock:
        """Per-session lock; hold it for the whole of a turn so two requests can't interleave."""
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    # ---------------------------------------------------------------------
    # Export / import
    # ---------------------------------------------------------------------

    def export_session(self, session_id: str) -> dict | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        return session.model_dump(mode="json")

    def import_session(self, data: dict) -> Session:
        """Restore a session from `export_session` output, replacing any record with the same key."""
        session = Session.model_validate(data)
        self._sessions[session.session_id] = session
        return session
