# backend/roombook/services/availability_service.py
"""
Availability Service for RoomBook

Computes the bookable hour slots of a section on a civil date:

    weekly open hours
      - hours already reserved (one batched store read for the whole day)
      - hours already past when the date is today

Slots are never persisted. They are regenerated on every query and
discarded once rendered or chosen, so availability can never go stale
across queries.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
import logging
from typing import Any, List, Optional, Tuple

import pytz
from sqlalchemy.orm import Session

from ..core.constants import HOURS_PER_DAY, SLOT_DURATION_HOURS
from ..core.timezone_utils import (
    ensure_utc,
    get_operating_timezone,
    localize_hour,
    operating_now,
    to_operating,
)
from ..repositories.factory import RepositoryFactory
from ..repositories.reservation_repository import ReservationRepository
from .base import BaseService
from .schedule import is_open_at

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSlot:
    """One bookable hour window in the operating time zone."""

    starts_at: datetime
    ends_at: datetime
    available_capacity: int

    @property
    def start_hour(self) -> int:
        """Civil start hour; the identifier presenters echo back when a slot is chosen."""
        return self.starts_at.hour


class AvailabilityService(BaseService):
    """
    Service for computing offerable slots.

    Pure apart from the single reservation read; never raises for
    malformed input (it yields no slots instead). Store failures
    propagate as RepositoryException for the caller to map.
    """

    def __init__(
        self,
        db: Optional[Session],
        repository: Optional[ReservationRepository] = None,
        tz: Optional[pytz.BaseTzInfo] = None,
    ):
        """
        Initialize availability service.

        Args:
            db: Database session
            repository: Optional ReservationRepository instance
            tz: Optional operating timezone override
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_reservation_repository(db)
        self.tz = tz or get_operating_timezone()

    def _candidate_windows(
        self, room: Any, target_date: date, start_hour: int
    ) -> List[Tuple[datetime, datetime]]:
        """Schedule-open hour windows of ``target_date`` from ``start_hour`` on."""
        weekday = target_date.weekday()
        windows = []
        for hour in range(start_hour, HOURS_PER_DAY):
            if not is_open_at(room, weekday, hour):
                continue

            starts_at = localize_hour(target_date, hour, self.tz)
            if starts_at is None:
                # Hour skipped by a DST transition
                continue

            ends_at = self.tz.normalize(starts_at + timedelta(hours=SLOT_DURATION_HOURS))
            if ends_at.weekday() != starts_at.weekday():
                # A slot may not spill into the next day's schedule
                continue

            windows.append((starts_at, ends_at))
        return windows

    def _day_end(self, target_date: date, fallback: datetime) -> datetime:
        next_midnight = localize_hour(target_date + timedelta(days=1), 0, self.tz)
        return next_midnight or fallback

    @BaseService.measure_operation("compute_available_slots")
    def compute_available_slots(
        self,
        room: Any,
        section: Any,
        target_date: date,
        now: Optional[datetime] = None,
    ) -> List[TimeSlot]:
        """
        Ordered bookable slots for ``section`` of ``room`` on ``target_date``.

        Args:
            room: Room model or RoomInfo snapshot (closed flag + schedule)
            section: Section model or SectionInfo snapshot
            target_date: Civil date in the operating time zone
            now: Current instant; defaults to now in the operating time zone

        Returns:
            Slots in ascending order; empty when nothing is bookable
        """
        if room is None or section is None or not isinstance(target_date, date):
            return []
        if isinstance(target_date, datetime):
            target_date = target_date.date()

        now_local = to_operating(now, self.tz) if now is not None else operating_now(self.tz)
        today = now_local.date()
        if target_date < today or room.closed:
            return []

        # The current hour is still offerable, nothing earlier today is
        start_hour = now_local.hour if target_date == today else 0
        windows = self._candidate_windows(room, target_date, start_hour)
        if not windows:
            return []

        window_start = windows[0][0]
        window_end = self._day_end(target_date, windows[-1][1])
        reservations = self.repository.find_reservations(section.id, window_start, window_end)
        reserved = {ensure_utc(reservation.starts_at) for reservation in reservations}

        slots = [
            TimeSlot(starts_at=starts_at, ends_at=ends_at, available_capacity=section.capacity)
            for starts_at, ends_at in windows
            if ensure_utc(starts_at) not in reserved
        ]

        self.logger.debug(
            "Computed %d slots for section %s on %s (%d reserved)",
            len(slots),
            section.id,
            target_date.isoformat(),
            len(reserved),
        )
        return slots
