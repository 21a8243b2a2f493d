# backend/roombook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.booking_session_service import BookingSessionService
from ...services.reservation_service import ReservationService
from ...services.session_registry import SessionRegistry
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_session_registry() -> SessionRegistry:
    """Get the process-wide booking session registry."""
    return SessionRegistry()


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Get AvailabilityService instance with proper dependencies."""
    return AvailabilityService(db)


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    """Get ReservationService instance with proper dependencies."""
    return ReservationService(db)


def get_booking_session_service(
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
    availability_service: AvailabilityService = Depends(get_availability_service),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> BookingSessionService:
    """
    Get booking session service instance.

    Args:
        db: Database session
        registry: Shared session registry
        availability_service: Slot computation for this request
        reservation_service: Commit protocol for this request

    Returns:
        BookingSessionService instance
    """
    return BookingSessionService(
        db,
        registry,
        availability_service=availability_service,
        reservation_service=reservation_service,
    )
