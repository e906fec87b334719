# backend/quizapp/core/store.py

import asyncio
import logging
import time
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from .models import LeaderboardEntry, Session

logger = logging.getLogger("quiz.store")


def new_session_id() -> str:
    """Millisecond timestamp plus 128 random bits."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex}"


# ------------------------------------------------------------
# Sessions
# ------------------------------------------------------------
class SessionStore:
    """
    In-memory registry of active sessions.

    Each session id gets its own asyncio.Lock so that read-modify-write
    sequences on one session are serialized while different sessions never
    contend.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def allocate_id(self) -> str:
        session_id = new_session_id()
        if session_id in self._sessions:
            raise RuntimeError(f"Session id collision: {session_id}")
        return session_id

    def put(self, session: Session) -> None:
        if session.session_id in self._sessions:
            raise RuntimeError(f"Session id collision: {session.session_id}")
        self._sessions[session.session_id] = session
        logger.debug(f"Stored session={session.session_id}, total={len(self._sessions)}")

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[Session]:
        self._locks.pop(session_id, None)
        return self._sessions.pop(session_id, None)

    def lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    def purge_idle(self, ttl_seconds: float, now: Optional[float] = None) -> List[str]:
        """Drop sessions with no activity for ``ttl_seconds``; return their ids."""
        now = time.time() if now is None else now
        stale = [
            sid for sid, s in self._sessions.items()
            if now - s.last_active_at >= ttl_seconds
        ]
        for sid in stale:
            self.remove(sid)
        if stale:
            logger.info(f"Expired {len(stale)} idle session(s)")
        return stale

    def clear(self) -> None:
        self._sessions.clear()
        self._locks.clear()


# ------------------------------------------------------------
# Leaderboard
# ------------------------------------------------------------
class Leaderboard:
    """Top-N results, highest score first; ties keep insertion order."""

    def __init__(self, size: int = 5, seed: Iterable[LeaderboardEntry] = ()):
        if size < 1:
            raise ValueError("Leaderboard size must be at least 1")
        self.size = size
        self._entries: List[LeaderboardEntry] = []
        for entry in seed:
            self.insert(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def insert(self, entry: LeaderboardEntry) -> None:
        self._entries.append(entry)
        # sorted() is stable, so equal scores stay in arrival order
        self._entries = sorted(self._entries, key=lambda e: e.score, reverse=True)[: self.size]

    def entries(self) -> Tuple[LeaderboardEntry, ...]:
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries = []
