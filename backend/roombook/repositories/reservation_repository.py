# backend/roombook/repositories/reservation_repository.py
"""
Reservation Repository for RoomBook

The durable side of the booking protocol. Exposes the three store
operations the core consumes:

- find_reservations: one batched read covering a window of a day
- find_reservation: point lookup used by the commit pre-check
- create_reservation: insert guarded by the (section_id, starts_at)
  unique constraint; a rejected insert surfaces as
  ReservationUniquenessViolation so callers can tell contention apart
  from genuine store failures
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException, ReservationUniquenessViolation
from ..core.timezone_utils import ensure_utc
from ..models.reservation import RESERVATION_UNIQUE_CONSTRAINT, Reservation, ReservationUser
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# SQLite reports the column list rather than the constraint name
_SQLITE_UNIQUE_TEXT = "unique constraint failed: reservations.section_id, reservations.starts_at"


def is_reservation_uniqueness_violation(exc: IntegrityError) -> bool:
    """Return True when ``exc`` was raised by the (section_id, starts_at) unique constraint."""
    constraint_name: str = ""
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)

    if diag is not None:
        constraint_name = getattr(diag, "constraint_name", "") or ""

    if constraint_name:
        return constraint_name == RESERVATION_UNIQUE_CONSTRAINT

    text = str(orig if orig is not None else exc).lower()
    return RESERVATION_UNIQUE_CONSTRAINT in text or _SQLITE_UNIQUE_TEXT in text


class ReservationRepository(BaseRepository[Reservation]):
    """Repository for reservation reads and the conflict-guarded create."""

    def __init__(self, db: Session):
        """Initialize with Reservation model."""
        super().__init__(db, Reservation)
        self.logger = logging.getLogger(__name__)

    def find_reservations(
        self, section_id: str, starts_from: datetime, starts_before: datetime
    ) -> List[Reservation]:
        """
        Get all reservations of a section starting in [starts_from, starts_before).

        Args:
            section_id: The section to read
            starts_from: Inclusive lower bound (aware or UTC-naive)
            starts_before: Exclusive upper bound (aware or UTC-naive)

        Returns:
            Reservations ordered by start instant
        """
        query = (
            self._build_query()
            .filter(
                Reservation.section_id == section_id,
                Reservation.starts_at >= ensure_utc(starts_from),
                Reservation.starts_at < ensure_utc(starts_before),
            )
            .order_by(Reservation.starts_at)
        )
        return self._execute_query(query)

    def find_reservation(self, section_id: str, starts_at: datetime) -> Optional[Reservation]:
        """
        Get the reservation holding ``section_id`` at ``starts_at``, if any.

        Args:
            section_id: The section to check
            starts_at: The exact hour instant

        Returns:
            The reservation or None
        """
        query = self._build_query().filter(
            Reservation.section_id == section_id,
            Reservation.starts_at == ensure_utc(starts_at),
        )
        return self._execute_first(query)

    def create_reservation(self, section_id: str, starts_at: datetime, booker: str) -> Reservation:
        """
        Insert a reservation with the booker as its only occupant.

        Note: Does NOT commit - the calling service owns the transaction.

        Raises:
            ReservationUniquenessViolation: The slot is already taken
            RepositoryException: Any other store failure
        """
        utc_start = ensure_utc(starts_at)
        try:
            reservation = Reservation(section_id=section_id, starts_at=utc_start, booker=booker)
            reservation.occupants.append(ReservationUser(user_id=booker))
            self.db.add(reservation)
            self.db.flush()
            return reservation
        except IntegrityError as exc:
            self.db.rollback()
            if is_reservation_uniqueness_violation(exc):
                self.logger.info(
                    "Reservation rejected by unique constraint: section=%s starts_at=%s",
                    section_id,
                    utc_start.isoformat(),
                )
                raise ReservationUniquenessViolation(section_id, utc_start) from exc
            self.logger.error("Integrity error creating reservation: %s", exc, exc_info=True)
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as exc:
            self.logger.error(f"Error creating reservation: {str(exc)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create reservation: {str(exc)}") from exc
