# backend/roombook/services/reservation_service.py
"""
Reservation Service for RoomBook

Owns the conflict-checked commit protocol that turns a chosen slot into a
durable reservation:

1. Optimistic pre-check: an existing reservation at (section, hour) means
   the slot was taken while the user was browsing.
2. Guarded create: the store's unique constraint is the real safety net.
   A rejected insert is reported exactly like a pre-check hit.
3. Ambiguous failures (the write may or may not have landed) are resolved
   by re-reading before telling the user anything.

Conflicts are an expected outcome under contention, not errors: they are
returned as CommitOutcome values. Only unresolved store failures raise.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    RepositoryException,
    ReservationUniquenessViolation,
    StoreUnavailableException,
)
from ..core.timezone_utils import ensure_utc
from ..repositories.factory import RepositoryFactory
from ..repositories.reservation_repository import (
    ReservationRepository,
    is_reservation_uniqueness_violation,
)
from .base import BaseService

logger = logging.getLogger(__name__)


class CommitStatus(str, Enum):
    """Resolved outcome of a commit attempt."""

    CONFIRMED = "confirmed"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class CommitOutcome:
    status: CommitStatus
    starts_at: datetime
    reservation_id: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.status is CommitStatus.CONFIRMED


class ReservationService(BaseService):
    """
    Service layer for reservation creation.

    Never relies on in-process locking: two processes racing for the same
    slot are separated by the database constraint alone.
    """

    def __init__(self, db: Session, repository: Optional[ReservationRepository] = None):
        """
        Initialize reservation service.

        Args:
            db: Database session
            repository: Optional ReservationRepository instance
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_reservation_repository(db)

    def _conflict(self, section_id: str, starts_at: datetime, reason: str) -> CommitOutcome:
        self.logger.info(
            "Reservation conflict (%s): section=%s starts_at=%s",
            reason,
            section_id,
            starts_at.isoformat(),
        )
        return CommitOutcome(status=CommitStatus.CONFLICT, starts_at=starts_at)

    @BaseService.measure_operation("commit_reservation")
    def commit(self, section_id: str, starts_at: datetime, user_id: str) -> CommitOutcome:
        """
        Reserve ``section_id`` at ``starts_at`` for ``user_id``.

        Args:
            section_id: Target section
            starts_at: Aware instant of the hour, re-derived by the caller
            user_id: Initiating user; becomes booker and first occupant

        Returns:
            CONFIRMED with the new reservation id, or CONFLICT

        Raises:
            StoreUnavailableException: The store failed and the outcome could
                not be determined (retryable, nothing assumed created)
        """
        self.log_operation(
            "commit_reservation",
            section_id=section_id,
            starts_at=starts_at.isoformat(),
            user_id=user_id,
        )

        try:
            existing = self.repository.find_reservation(section_id, starts_at)
        except RepositoryException as exc:
            self.logger.error("Reservation pre-check failed: %s", exc)
            raise StoreUnavailableException(
                details={"section_id": section_id, "stage": "pre_check"}
            ) from exc
        if existing is not None:
            return self._conflict(section_id, starts_at, "pre-check")

        try:
            with self.repository.transaction():
                reservation = self.repository.create_reservation(section_id, starts_at, user_id)
                reservation_id = reservation.id
        except ReservationUniquenessViolation:
            return self._conflict(section_id, starts_at, "unique constraint")
        except IntegrityError as exc:
            if is_reservation_uniqueness_violation(exc):
                return self._conflict(section_id, starts_at, "unique constraint on commit")
            self.logger.error("Reservation commit failed with integrity error: %s", exc)
            return self._resolve_ambiguous(section_id, starts_at, user_id, exc)
        except (RepositoryException, SQLAlchemyError) as exc:
            self.logger.error("Reservation write failed, re-checking store: %s", exc)
            return self._resolve_ambiguous(section_id, starts_at, user_id, exc)

        self.logger.info(
            "Reservation %s created: section=%s starts_at=%s booker=%s",
            reservation_id,
            section_id,
            ensure_utc(starts_at).isoformat(),
            user_id,
        )
        return CommitOutcome(
            status=CommitStatus.CONFIRMED, starts_at=starts_at, reservation_id=reservation_id
        )

    def _resolve_ambiguous(
        self, section_id: str, starts_at: datetime, user_id: str, cause: Exception
    ) -> CommitOutcome:
        """
        Decide between confirmed, conflict and failure after a failed write.

        A failed write must not be reported as "taken" unless the re-read
        shows someone else holds the slot.
        """
        try:
            existing = self.repository.find_reservation(section_id, starts_at)
        except RepositoryException as exc:
            self.logger.error("Reservation re-check failed: %s", exc)
            raise StoreUnavailableException(
                details={"section_id": section_id, "stage": "re_check"}
            ) from cause

        if existing is None:
            raise StoreUnavailableException(
                details={"section_id": section_id, "stage": "create"}
            ) from cause

        if existing.booker == user_id:
            self.logger.warning(
                "Reservation %s landed despite a reported store failure", existing.id
            )
            return CommitOutcome(
                status=CommitStatus.CONFIRMED, starts_at=starts_at, reservation_id=existing.id
            )
        return self._conflict(section_id, starts_at, "re-check")
