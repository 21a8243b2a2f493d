# backend/roombook/services/booking_session_service.py
"""
Booking Session Service for RoomBook

Entry point the API layer talks to. Resolves the catalog, drives booking
sessions held by the registry, and turns session state into views.
Per-request collaborators (availability, reservations) are handed to the
session for each event so sessions never hold a database session.
"""

from datetime import date, datetime
import logging
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from ..core.constants import (
    CONFLICT_MESSAGE,
    INVALID_ROOM_MESSAGE,
    INVALID_SECTION_MESSAGE,
    NO_SLOTS_PLACEHOLDER,
)
from ..core.exceptions import NotFoundException, RepositoryException, StoreUnavailableException
from ..core.timezone_utils import get_operating_timezone
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.booking_session import BookingSessionView, SlotOption
from .availability_service import AvailabilityService
from .base import BaseService
from .booking_session import BookingSession, SessionState
from .presentation import build_date_options, build_slot_options
from .reservation_service import ReservationService
from .schedule import RoomInfo, SectionInfo
from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class BookingSessionService(BaseService):
    """Service layer for interactive booking sessions."""

    def __init__(
        self,
        db: Session,
        registry: SessionRegistry,
        catalog_repository: Optional[CatalogRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
        reservation_service: Optional[ReservationService] = None,
        tz: Optional[pytz.BaseTzInfo] = None,
    ):
        super().__init__(db)
        self.registry = registry
        self.tz = tz or get_operating_timezone()
        self.catalog_repository = (
            catalog_repository or RepositoryFactory.create_catalog_repository(db)
        )
        self.availability_service = availability_service or AvailabilityService(db, tz=self.tz)
        self.reservation_service = reservation_service or ReservationService(db)

    # Catalog resolution

    def _resolve_target(
        self,
        *,
        room_id: Optional[str] = None,
        section_id: Optional[str] = None,
        room_name: Optional[str] = None,
        section_name: Optional[str] = None,
    ) -> tuple[RoomInfo, SectionInfo]:
        try:
            if room_id is not None:
                room = self.catalog_repository.get_room(room_id)
            else:
                room = self.catalog_repository.find_room_by_name(room_name or "")
            if room is None:
                raise NotFoundException(INVALID_ROOM_MESSAGE, code="INVALID_ROOM")

            if section_id is not None:
                section = self.catalog_repository.get_section(section_id)
            else:
                section = self.catalog_repository.find_section_by_name(room.id, section_name or "")
            if section is None or section.room_id != room.id:
                raise NotFoundException(INVALID_SECTION_MESSAGE, code="INVALID_SECTION")

            return RoomInfo.from_model(room), SectionInfo.from_model(section)
        except RepositoryException as exc:
            self.logger.error("Catalog lookup failed: %s", exc)
            raise StoreUnavailableException(details={"stage": "catalog"}) from exc

    # Sessions

    @BaseService.measure_operation("start_booking_session")
    def start_session(
        self,
        user_id: str,
        *,
        room_id: Optional[str] = None,
        section_id: Optional[str] = None,
        room_name: Optional[str] = None,
        section_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BookingSessionView:
        """
        Open a booking session for ``user_id`` on a section.

        Raises:
            NotFoundException: Unknown room, or a section not in that room
        """
        room, section = self._resolve_target(
            room_id=room_id, section_id=section_id, room_name=room_name, section_name=section_name
        )
        session = self.registry.create(user_id, room, section, tz=self.tz)
        return self.build_view(session, now=now)

    def get_session_view(
        self, session_id: str, user_id: str, now: Optional[datetime] = None
    ) -> BookingSessionView:
        session = self.registry.get(session_id)
        session.ensure_owner(user_id)
        return self.build_view(session, now=now)

    @BaseService.measure_operation("choose_booking_date")
    def choose_date(
        self, session_id: str, user_id: str, target_date: date, now: Optional[datetime] = None
    ) -> BookingSessionView:
        with self.registry.acquire(session_id, user_id) as session:
            session.choose_date(target_date, self.availability_service, now=now)
            return self.build_view(session, now=now)

    @BaseService.measure_operation("choose_booking_slot")
    def choose_slot(
        self, session_id: str, user_id: str, start_hour: int, now: Optional[datetime] = None
    ) -> BookingSessionView:
        """
        Commit the slot starting at ``start_hour``.

        A conflict is not an error: the returned view is in CONFLICT and
        the user may pick another date or time.
        """
        with self.registry.acquire(session_id, user_id) as session:
            session.choose_slot(start_hour, self.reservation_service)
            return self.build_view(session, now=now)

    def cancel_session(self, session_id: str, user_id: str) -> None:
        self.registry.expire(session_id, user_id)

    # Standalone availability

    def get_availability(
        self, room_id: str, section_id: str, target_date: date, now: Optional[datetime] = None
    ) -> List[SlotOption]:
        """Slots of a section on a date, outside any booking session."""
        room, section = self._resolve_target(room_id=room_id, section_id=section_id)
        try:
            slots = self.availability_service.compute_available_slots(
                room, section, target_date, now=now
            )
        except RepositoryException as exc:
            self.logger.error("Availability read failed: %s", exc)
            raise StoreUnavailableException(details={"section_id": section_id}) from exc
        return build_slot_options(slots)

    # Views

    def build_view(self, session: BookingSession, now: Optional[datetime] = None) -> BookingSessionView:
        state = session.state
        view = BookingSessionView(
            session_id=session.id,
            state=state,
            room_id=session.room.id,
            room_name=session.room.name,
            section_id=session.section.id,
            section_name=session.section.name,
            selected_date=session.selected_date,
            reservation_id=session.reservation_id,
        )

        if state in (SessionState.AWAITING_DATE, SessionState.AWAITING_SLOT, SessionState.CONFLICT):
            view.date_options = build_date_options(
                session.selectable_dates(now), selected=session.selected_date
            )
        if state is SessionState.AWAITING_SLOT:
            view.slots = build_slot_options(session.slots)
            if not session.slots:
                view.no_slots_placeholder = NO_SLOTS_PLACEHOLDER
        elif state is SessionState.CONFLICT:
            view.message = CONFLICT_MESSAGE
        elif state is SessionState.CONFIRMED:
            view.message = f"Booked {session.room.name} - {session.section.name}."
        return view
