"""Pydantic schemas for the RoomBook API."""

from .booking_session import (
    BookingSessionView,
    ChooseDateRequest,
    ChooseSlotRequest,
    DateOption,
    SlotOption,
    StartSessionRequest,
)

__all__ = [
    "BookingSessionView",
    "ChooseDateRequest",
    "ChooseSlotRequest",
    "DateOption",
    "SlotOption",
    "StartSessionRequest",
]
