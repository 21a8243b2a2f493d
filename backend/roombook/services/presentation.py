# backend/roombook/services/presentation.py
"""
Presentation helpers for RoomBook.

Display-friendly labels for what booking sessions expose to a presenter:
the rolling date window and 12-hour slot ranges. Kept apart from the
session state machine so the core never depends on how it is rendered.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional

from ..core.constants import DAYS_OF_WEEK
from ..schemas.booking_session import DateOption, SlotOption
from .availability_service import TimeSlot

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def ordinal_suffix(day: int) -> str:
    """English ordinal suffix: 1st, 2nd, 3rd, 4th ... 11th, 12th, 13th ... 21st."""
    if 10 < day % 100 < 14:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_date_label(value: date) -> str:
    """e.g. ``Wednesday - October 21st``"""
    weekday = DAYS_OF_WEEK[value.weekday()]
    month = MONTHS[value.month - 1]
    return f"{weekday} - {month} {value.day}{ordinal_suffix(value.day)}"


def build_date_options(dates: Iterable[date], selected: Optional[date] = None) -> List[DateOption]:
    """Selectable dates with the current choice flagged."""
    return [
        DateOption(value=value, label=format_date_label(value), selected=value == selected)
        for value in dates
    ]


def format_clock(value: datetime) -> str:
    """12-hour clock, midnight as 12:00 AM."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {meridiem}"


def format_slot_label(slot: TimeSlot) -> str:
    """e.g. ``2:00 PM – 3:00 PM``"""
    return f"{format_clock(slot.starts_at)} – {format_clock(slot.ends_at)}"


def build_slot_options(slots: Iterable[TimeSlot]) -> List[SlotOption]:
    return [
        SlotOption(
            start_hour=slot.start_hour,
            starts_at=slot.starts_at,
            ends_at=slot.ends_at,
            label=format_slot_label(slot),
            description=f"Section Capacity: {slot.available_capacity}",
            available_capacity=slot.available_capacity,
        )
        for slot in slots
    ]
