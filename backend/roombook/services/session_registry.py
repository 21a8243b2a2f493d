# backend/roombook/services/session_registry.py
"""
Session Registry for RoomBook

Keyed, inspectable home of live booking sessions with explicit creation
and explicit expiry. Sessions idle for longer than the timeout are
expired lazily on access and by a periodic sweep. A session whose commit
is in flight is never expired mid-write; the sweep skips it and picks it
up on a later pass.

The registry is per-process memory. It never decides reservation
uniqueness; that belongs to the store.
"""

from collections import OrderedDict
from contextlib import contextmanager
import logging
import threading
import time
from typing import Callable, Dict, Iterator, List, Optional

import pytz

from ..core.config import settings
from ..core.exceptions import NotFoundException, SessionExpiredException
from .booking_session import BookingSession, SessionState
from .schedule import RoomInfo, SectionInfo

logger = logging.getLogger(__name__)

# Remember recently expired ids so late events get 410 instead of 404
_EXPIRED_MEMORY = 1024


class SessionRegistry:
    """Thread-safe registry of booking sessions keyed by session id."""

    def __init__(
        self,
        timeout_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        date_window_days: Optional[int] = None,
    ):
        self.timeout_seconds = timeout_seconds or settings.session_timeout_seconds
        self.date_window_days = date_window_days or settings.date_window_days
        self._clock = clock
        self._sessions: Dict[str, BookingSession] = {}
        self._expired: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def active_sessions(self) -> List[BookingSession]:
        """Snapshot of registered sessions."""
        with self._lock:
            return list(self._sessions.values())

    def create(
        self,
        user_id: str,
        room: RoomInfo,
        section: SectionInfo,
        tz: Optional[pytz.BaseTzInfo] = None,
    ) -> BookingSession:
        """Register a new session in AWAITING_DATE."""
        kwargs = {"tz": tz} if tz is not None else {}
        session = BookingSession(
            user_id=user_id,
            room=room,
            section=section,
            date_window_days=self.date_window_days,
            last_activity=self._clock(),
            **kwargs,
        )
        with self._lock:
            self._sessions[session.id] = session
        logger.info(
            "Booking session %s started by %s for %s - %s",
            session.id,
            user_id,
            room.name,
            section.name,
        )
        return session

    def _discard(self, session_id: str, *, expired: bool) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
            if expired:
                self._expired[session_id] = None
                while len(self._expired) > _EXPIRED_MEMORY:
                    self._expired.popitem(last=False)

    def _is_idle(self, session: BookingSession) -> bool:
        return self._clock() - session.last_activity >= self.timeout_seconds

    def _try_expire(self, session: BookingSession) -> bool:
        """Expire ``session`` unless an event (possibly a commit) is being processed."""
        if not session.lock.acquire(blocking=False):
            return False
        try:
            if session.state is SessionState.COMMITTING:
                return False
            session.expire()
        finally:
            session.lock.release()
        self._discard(session.id, expired=True)
        return True

    def get(self, session_id: str) -> BookingSession:
        """
        Look up a live session.

        Raises:
            NotFoundException: Unknown id
            SessionExpiredException: The session expired (now or earlier)
        """
        with self._lock:
            session = self._sessions.get(session_id)
            recently_expired = session_id in self._expired
        if session is None:
            if recently_expired:
                raise SessionExpiredException(session_id)
            raise NotFoundException(
                "Booking session not found", code="SESSION_NOT_FOUND", details={"session_id": session_id}
            )
        if self._is_idle(session) and self._try_expire(session):
            logger.info("Booking session %s expired after inactivity", session_id)
            raise SessionExpiredException(session_id)
        return session

    @contextmanager
    def acquire(self, session_id: str, user_id: str) -> Iterator[BookingSession]:
        """
        Process one event on a session owned by ``user_id``.

        Events on the same session are serialised; activity is refreshed
        afterwards, and sessions that reached CONFIRMED or EXPIRED leave
        the registry.
        """
        session = self.get(session_id)
        session.ensure_owner(user_id)
        with session.lock:
            if session.state is SessionState.EXPIRED:
                raise SessionExpiredException(session_id)
            try:
                yield session
            finally:
                session.last_activity = self._clock()
        if session.state is SessionState.CONFIRMED:
            self._discard(session.id, expired=False)
        elif session.state is SessionState.EXPIRED:
            self._discard(session.id, expired=True)

    def expire(self, session_id: str, user_id: str) -> BookingSession:
        """Explicitly end a session on behalf of its owner. Confirmed sessions stay confirmed."""
        with self.acquire(session_id, user_id) as session:
            if session.state is not SessionState.CONFIRMED:
                session.expire()
        logger.info("Booking session %s cancelled by %s", session_id, user_id)
        return session

    def sweep_expired(self) -> int:
        """Expire every idle session that is not mid-commit. Returns how many were expired."""
        expired = 0
        for session in self.active_sessions():
            if self._is_idle(session) and self._try_expire(session):
                expired += 1
        if expired:
            logger.info("Expired %d idle booking sessions", expired)
        return expired

    def clear(self) -> None:
        """Expire and forget every session."""
        for session in self.active_sessions():
            session.expire()
        with self._lock:
            self._sessions.clear()
            self._expired.clear()
