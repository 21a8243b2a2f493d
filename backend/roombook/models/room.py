# backend/roombook/models/room.py
"""
Catalog models for RoomBook: rooms, their weekly open hours, and sections.

The catalog is pre-populated and read-only for the booking core. A Room
owns a weekly schedule (one row per open weekday) and is split into
Sections, which are the actual reservation targets.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class Room(Base):
    """
    A bookable resource with a weekly open-hours schedule.

    When ``closed`` is set no hour of any day is bookable, regardless of schedule.
    """

    __tablename__ = "rooms"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False, unique=True)
    closed = Column(Boolean, nullable=False, default=False)

    schedule = relationship(
        "RoomSchedule",
        back_populates="room",
        order_by="RoomSchedule.day_of_week",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    sections = relationship("Section", back_populates="room", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Room {self.name} closed={self.closed}>"


class RoomSchedule(Base):
    """
    Open hours for one weekday: bookings are accepted for hours in [open_hour, close_hour).

    ``day_of_week`` follows ``date.weekday()``: 0 is Monday, 6 is Sunday.
    """

    __tablename__ = "room_schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(String(26), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    open_hour = Column(Integer, nullable=False)
    close_hour = Column(Integer, nullable=False)

    room = relationship("Room", back_populates="schedule")

    __table_args__ = (
        UniqueConstraint("room_id", "day_of_week", name="uq_room_schedules_room_day"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_room_schedules_day"),
        CheckConstraint("open_hour >= 0 AND open_hour <= 23", name="ck_room_schedules_open"),
        CheckConstraint("close_hour >= 0 AND close_hour <= 23", name="ck_room_schedules_close"),
        CheckConstraint("open_hour <= close_hour", name="ck_room_schedules_order"),
    )

    def __repr__(self) -> str:
        return f"<RoomSchedule day={self.day_of_week} {self.open_hour}-{self.close_hour}>"


class Section(Base):
    """A sub-unit of a Room with its own capacity; the target of reservations."""

    __tablename__ = "sections"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    room_id = Column(String(26), ForeignKey("rooms.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    # Seats per hour slot. Advisory only: a slot is either reserved or not.
    capacity = Column(Integer, nullable=False, default=0)

    room = relationship("Room", back_populates="sections")

    __table_args__ = (
        UniqueConstraint("room_id", "name", name="uq_sections_room_name"),
        CheckConstraint("capacity >= 0", name="ck_sections_capacity"),
    )

    def __repr__(self) -> str:
        return f"<Section {self.name} capacity={self.capacity}>"
