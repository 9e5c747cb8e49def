"""
In-memory registry of planning sessions.

Each session carries its own lock. Callers mutate a session only inside
``store.locked(session_id)`` so that a placement check and its commit, or
the steps of an auto-assignment, never interleave with another request.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Lock
from typing import Dict, Generator, List, Optional, Tuple
from uuid import uuid4

from models import CameraDefinition, Calculations, GatewayConfiguration, Stream
from errors import SessionLimitError, SessionNotFoundError
from services.assignment import AssignmentSession
from services.planning_logger import PlanningLogger

logger = logging.getLogger(__name__)


@dataclass
class PlanningSession:
    """State of one planning session (one camera list, one assignment)"""
    cameras: Tuple[CameraDefinition, ...]
    streams: Tuple[Stream, ...]
    calculations: Calculations
    recommendation: GatewayConfiguration
    assignment: AssignmentSession
    session_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_accessed: datetime = field(default_factory=datetime.utcnow)
    lock: Lock = field(default_factory=Lock, repr=False, compare=False)
    plog: Optional[PlanningLogger] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self.plog is None:
            self.plog = PlanningLogger(self.session_id)

    @property
    def configuration(self) -> GatewayConfiguration:
        return self.assignment.configuration

    def touch(self) -> None:
        self.last_accessed = datetime.utcnow()


class SessionStore:
    """
    Thread-safe registry of planning sessions.

    Features:
    - Per-session locking for read-modify-swap updates
    - Idle expiry after ``ttl_minutes``
    - Optional cap on live sessions
    """

    def __init__(self, ttl_minutes: int = 120, max_sessions: Optional[int] = None):
        self.ttl = timedelta(minutes=ttl_minutes)
        self.max_sessions = max_sessions
        self._sessions: Dict[str, PlanningSession] = {}
        self._lock = Lock()

    def add(self, session: PlanningSession) -> PlanningSession:
        """
        Register a new session.

        Raises:
            SessionLimitError: If the live session cap is reached
        """
        with self._lock:
            self._purge_expired(datetime.utcnow())
            if self.max_sessions is not None and len(self._sessions) >= self.max_sessions:
                logger.warning(f"Planning session limit reached ({self.max_sessions})")
                raise SessionLimitError(self.max_sessions)
            self._sessions[session.session_id] = session
        logger.debug(f"Registered planning session {session.session_id}")
        return session

    def get(self, session_id: str) -> PlanningSession:
        """
        Look up a live session.

        Raises:
            SessionNotFoundError: If missing or expired
        """
        now = datetime.utcnow()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if now - session.last_accessed > self.ttl:
                del self._sessions[session_id]
                logger.info(f"Planning session {session_id} expired")
                raise SessionNotFoundError(session_id)
            session.touch()
            return session

    @contextmanager
    def locked(self, session_id: str) -> Generator[PlanningSession, None, None]:
        """Hold the session's own lock for the duration of the block"""
        session = self.get(session_id)
        with session.lock:
            yield session

    def remove(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.debug(f"Removed planning session {session_id}")

    def session_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self, now: datetime) -> None:
        expired = [
            sid for sid, s in self._sessions.items()
            if now - s.last_accessed > self.ttl
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired planning session(s)")
