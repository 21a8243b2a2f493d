# backend/roombook/services/schedule.py
"""
Schedule model for RoomBook.

Frozen snapshots of catalog rows plus the single lookup the rest of the
core needs: whether a room accepts bookings at a given weekday/hour.
Booking sessions outlive the database session that loaded the catalog,
so they hold these snapshots instead of ORM instances.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from ..core.constants import HOURS_PER_DAY


@dataclass(frozen=True)
class DaySchedule:
    """Open hours for one weekday: bookable hours are [open_hour, close_hour)."""

    day_of_week: int
    open_hour: int
    close_hour: int


@dataclass(frozen=True)
class RoomInfo:
    id: str
    name: str
    closed: bool
    schedule: Tuple[DaySchedule, ...] = ()

    @classmethod
    def from_model(cls, room: Any) -> "RoomInfo":
        return cls(
            id=room.id,
            name=room.name,
            closed=bool(room.closed),
            schedule=tuple(
                DaySchedule(day.day_of_week, day.open_hour, day.close_hour)
                for day in sorted(room.schedule, key=lambda d: d.day_of_week)
            ),
        )


@dataclass(frozen=True)
class SectionInfo:
    id: str
    room_id: str
    name: str
    capacity: int

    @classmethod
    def from_model(cls, section: Any) -> "SectionInfo":
        return cls(
            id=section.id,
            room_id=section.room_id,
            name=section.name,
            capacity=int(section.capacity or 0),
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def find_day_schedule(schedule: Iterable[Any], weekday: int) -> Optional[Any]:
    """Return the entry of ``schedule`` for ``weekday``, if any."""
    for day in schedule or ():
        if day.day_of_week == weekday:
            return day
    return None


def is_open_at(room: Any, weekday: int, hour: int) -> bool:
    """
    Whether ``room`` accepts a booking starting at ``hour`` on ``weekday``.

    Works with Room models and RoomInfo snapshots alike. Malformed input
    (non-integer or out-of-range weekday/hour, missing room) is treated as
    closed rather than raising.
    """
    if room is None or getattr(room, "closed", True):
        return False
    if not _is_int(weekday) or not _is_int(hour):
        return False
    if not 0 <= weekday <= 6 or not 0 <= hour < HOURS_PER_DAY:
        return False

    day = find_day_schedule(getattr(room, "schedule", ()), weekday)
    if day is None:
        return False
    return day.open_hour <= hour < day.close_hour
