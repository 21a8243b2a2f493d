# backend/roombook/schemas/booking_session.py
"""
Request and response DTOs for booking sessions.

Views carry only what a presenter needs to render a session state.
A chosen slot is echoed back as its start hour alone; everything else
is re-derived server side.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.constants import DATE_PLACEHOLDER, SLOT_PLACEHOLDER
from ..services.booking_session import SessionState
from .base import StrictModel, StrictRequestModel


class DateOption(StrictModel):
    value: date
    label: str
    selected: bool = False


class SlotOption(StrictModel):
    start_hour: int = Field(..., ge=0, le=23, description="Slot identifier to send back")
    starts_at: datetime
    ends_at: datetime
    label: str
    description: str
    available_capacity: int


class BookingSessionView(StrictModel):
    """Render data for the current session state."""

    session_id: str
    state: SessionState
    room_id: str
    room_name: str
    section_id: str
    section_name: str
    selected_date: Optional[date] = None
    date_placeholder: str = DATE_PLACEHOLDER
    date_options: List[DateOption] = Field(default_factory=list)
    slot_placeholder: str = SLOT_PLACEHOLDER
    slots: List[SlotOption] = Field(default_factory=list)
    no_slots_placeholder: Optional[str] = Field(
        default=None, description="Set when the selected date has nothing bookable"
    )
    reservation_id: Optional[str] = None
    message: Optional[str] = None


class StartSessionRequest(StrictRequestModel):
    """Start booking a section, identified either by names or by ids."""

    room_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    section_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    room_id: Optional[str] = Field(default=None, min_length=1, max_length=26)
    section_id: Optional[str] = Field(default=None, min_length=1, max_length=26)

    @model_validator(mode="after")
    def _require_one_target(self) -> "StartSessionRequest":
        by_name = self.room_name is not None and self.section_name is not None
        by_id = self.room_id is not None and self.section_id is not None
        if not (by_name or by_id):
            raise ValueError("Provide room_name and section_name, or room_id and section_id")
        return self


class ChooseDateRequest(StrictRequestModel):
    date: date


class ChooseSlotRequest(StrictRequestModel):
    start_hour: int = Field(..., ge=0, le=23)
