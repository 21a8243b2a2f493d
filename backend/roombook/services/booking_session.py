# backend/roombook/services/booking_session.py
"""
Booking Session state machine for RoomBook.

One session walks one user through date -> slot -> commit:

    AWAITING_DATE --choose_date--> AWAITING_SLOT --choose_slot--> COMMITTING
    COMMITTING --> CONFIRMED (terminal) | CONFLICT (retry via choose_date)
    any state --expire--> EXPIRED (terminal)

The session knows nothing about how it is rendered. It holds catalog
snapshots, the selected date and the slots offered for it; collaborators
(slot finder, reservation committer) are passed in per event so a session
can outlive the database session that served any single event.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
import logging
import threading
from typing import List, Optional, Protocol

import pytz

from ..core.constants import DEFAULT_DATE_WINDOW_DAYS
from ..core.exceptions import (
    InvalidSelectionException,
    RepositoryException,
    SessionExpiredException,
    SessionOwnershipException,
    StoreUnavailableException,
)
from ..core.timezone_utils import get_operating_timezone, localize_hour, operating_now, to_operating
from ..core.ulid_helper import generate_ulid
from .availability_service import TimeSlot
from .reservation_service import CommitOutcome
from .schedule import RoomInfo, SectionInfo

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Booking session lifecycle states."""

    AWAITING_DATE = "awaiting_date"
    AWAITING_SLOT = "awaiting_slot"
    COMMITTING = "committing"
    CONFIRMED = "confirmed"
    CONFLICT = "conflict"
    EXPIRED = "expired"


TERMINAL_STATES = frozenset({SessionState.CONFIRMED, SessionState.EXPIRED})
DATE_CHOICE_STATES = frozenset(
    {SessionState.AWAITING_DATE, SessionState.AWAITING_SLOT, SessionState.CONFLICT}
)


class SlotFinder(Protocol):
    def compute_available_slots(
        self, room: RoomInfo, section: SectionInfo, target_date: date, now: Optional[datetime] = None
    ) -> List[TimeSlot]: ...


class ReservationCommitter(Protocol):
    def commit(self, section_id: str, starts_at: datetime, user_id: str) -> CommitOutcome: ...


@dataclass
class BookingSession:
    """Per-user, short-lived booking state."""

    user_id: str
    room: RoomInfo
    section: SectionInfo
    tz: pytz.BaseTzInfo = field(default_factory=get_operating_timezone)
    date_window_days: int = DEFAULT_DATE_WINDOW_DAYS
    id: str = field(default_factory=generate_ulid)
    state: SessionState = SessionState.AWAITING_DATE
    selected_date: Optional[date] = None
    slots: List[TimeSlot] = field(default_factory=list)
    reservation_id: Optional[str] = None
    last_activity: float = 0.0
    # Serialises events: a session never processes two at once
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def offered_hours(self) -> List[int]:
        return [slot.start_hour for slot in self.slots]

    def ensure_owner(self, user_id: str) -> None:
        if user_id != self.user_id:
            raise SessionOwnershipException(self.id)

    def _ensure_active(self) -> None:
        if self.state is SessionState.EXPIRED:
            raise SessionExpiredException(self.id)
        if self.state is SessionState.CONFIRMED:
            raise InvalidSelectionException(
                "This booking is already confirmed.", details={"session_id": self.id}
            )

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_operating(now, self.tz) if now is not None else operating_now(self.tz)

    def selectable_dates(self, now: Optional[datetime] = None) -> List[date]:
        """The rolling window of dates a user may pick, starting today."""
        today = self._now(now).date()
        return [today + timedelta(days=offset) for offset in range(self.date_window_days)]

    def choose_date(
        self, target_date: date, finder: SlotFinder, now: Optional[datetime] = None
    ) -> List[TimeSlot]:
        """
        Select ``target_date`` and render its slots.

        Re-entrant: choosing again while awaiting a slot, or after a
        conflict, replaces the date and drops the previous offer.

        Raises:
            InvalidSelectionException: Date outside the selectable window
            StoreUnavailableException: The reservation read failed
        """
        self._ensure_active()
        if self.state not in DATE_CHOICE_STATES:
            raise InvalidSelectionException(
                f"Cannot choose a date while {self.state.value}.",
                details={"session_id": self.id, "state": self.state.value},
            )

        now_local = self._now(now)
        if not isinstance(target_date, date) or target_date not in self.selectable_dates(now_local):
            raise InvalidSelectionException(
                "That date is no longer available to book. Please choose another date.",
                details={"session_id": self.id, "date": str(target_date)},
            )

        try:
            slots = finder.compute_available_slots(self.room, self.section, target_date, now=now_local)
        except RepositoryException as exc:
            logger.error("Availability read failed for session %s: %s", self.id, exc)
            raise StoreUnavailableException(details={"session_id": self.id}) from exc

        self.selected_date = target_date
        self.slots = list(slots)
        self.reservation_id = None
        self.state = SessionState.AWAITING_SLOT
        logger.debug(
            "Session %s offered %d slots on %s", self.id, len(self.slots), target_date.isoformat()
        )
        return self.slots

    def choose_slot(self, start_hour: int, committer: ReservationCommitter) -> CommitOutcome:
        """
        Commit the slot starting at ``start_hour`` on the selected date.

        The instant is re-derived from session state; only hours offered in
        the current render are accepted.

        Raises:
            InvalidSelectionException: No date chosen yet, or a stale/tampered hour
            StoreUnavailableException: Outcome unknown; the session returns to
                AWAITING_SLOT so the user can retry
        """
        self._ensure_active()
        if self.state is not SessionState.AWAITING_SLOT or self.selected_date is None:
            raise InvalidSelectionException(
                "Choose a date before choosing a time.",
                details={"session_id": self.id, "state": self.state.value},
            )

        if isinstance(start_hour, bool) or start_hour not in self.offered_hours:
            raise InvalidSelectionException(
                "That time is not on offer for the selected date. Please choose again.",
                details={"session_id": self.id, "start_hour": start_hour},
            )

        starts_at = localize_hour(self.selected_date, start_hour, self.tz)
        if starts_at is None:
            raise InvalidSelectionException(
                "That time does not exist on the selected date.",
                details={"session_id": self.id, "start_hour": start_hour},
            )

        self.state = SessionState.COMMITTING
        try:
            outcome = committer.commit(self.section.id, starts_at, self.user_id)
        except Exception:
            self.state = SessionState.AWAITING_SLOT
            raise

        if outcome.confirmed:
            self.state = SessionState.CONFIRMED
            self.reservation_id = outcome.reservation_id
            logger.info(
                "%s created booking with id %s.", self.user_id, self.reservation_id
            )
        else:
            self.state = SessionState.CONFLICT
            self.slots = []
        return outcome

    def expire(self) -> None:
        """Terminate the session; no further transitions are accepted."""
        if self.state is not SessionState.EXPIRED:
            logger.debug("Session %s expired from %s", self.id, self.state.value)
        self.state = SessionState.EXPIRED
        self.slots = []
