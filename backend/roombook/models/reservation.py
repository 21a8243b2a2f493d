# backend/roombook/models/reservation.py
"""
Reservation model for RoomBook.

A Reservation is the durable record that one section-hour is taken.
The (section_id, starts_at) uniqueness constraint is the safety net that
prevents double-booking when concurrent sessions commit the same slot;
every write path relies on it rather than on in-process locking.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

RESERVATION_UNIQUE_CONSTRAINT = "uq_reservations_section_starts_at"


class Reservation(Base):
    """
    One reserved hour for one section.

    ``starts_at`` is an absolute instant stored in UTC; the reservation
    implicitly ends one hour later.
    """

    __tablename__ = "reservations"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    section_id = Column(String(26), ForeignKey("sections.id"), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    booker = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    occupants = relationship(
        "ReservationUser",
        back_populates="reservation",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    section = relationship("Section")

    __table_args__ = (
        UniqueConstraint("section_id", "starts_at", name=RESERVATION_UNIQUE_CONSTRAINT),
    )

    @property
    def users(self) -> set[str]:
        """User ids currently attached to the reservation (the booker is always one)."""
        return {occupant.user_id for occupant in self.occupants}

    def __repr__(self) -> str:
        return f"<Reservation {self.id} section={self.section_id} starts_at={self.starts_at}>"


class ReservationUser(Base):
    """Membership of a user in a reservation."""

    __tablename__ = "reservation_users"

    reservation_id = Column(
        String(26), ForeignKey("reservations.id", ondelete="CASCADE"), primary_key=True
    )
    user_id = Column(String(64), primary_key=True)

    reservation = relationship("Reservation", back_populates="occupants")
