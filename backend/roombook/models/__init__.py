"""
Database models for RoomBook.

- Catalog: Room, RoomSchedule, Section (read-only for the booking core)
- Reservations: Reservation and its occupant memberships
"""

from .reservation import RESERVATION_UNIQUE_CONSTRAINT, Reservation, ReservationUser
from .room import Room, RoomSchedule, Section

__all__ = [
    "RESERVATION_UNIQUE_CONSTRAINT",
    "Reservation",
    "ReservationUser",
    "Room",
    "RoomSchedule",
    "Section",
]
