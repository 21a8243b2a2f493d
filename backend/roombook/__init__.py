"""RoomBook: hourly section reservations with conflict-safe booking sessions."""

__version__ = "0.1.0"
