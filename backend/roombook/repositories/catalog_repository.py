# backend/roombook/repositories/catalog_repository.py
"""
Catalog Repository for RoomBook

Read-only access to rooms, their schedules, and sections. Catalog
management (create/edit/delete) happens elsewhere; the booking core only
resolves what the presenter asks for.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.room import Room, Section
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CatalogRepository(BaseRepository[Room]):
    """Repository for room and section lookups."""

    def __init__(self, db: Session):
        """Initialize with Room model as primary."""
        super().__init__(db, Room)
        self.logger = logging.getLogger(__name__)

    def get_room(self, room_id: str) -> Optional[Room]:
        """Get a room (schedule eagerly loaded) by id."""
        return self.get_by_id(room_id)

    def get_section(self, section_id: str) -> Optional[Section]:
        """Get a section by id."""
        query = self.db.query(Section).filter(Section.id == section_id)
        return self._execute_first(query)

    def find_room_by_name(self, name: str) -> Optional[Room]:
        """Find a room by its exact name."""
        return self._execute_first(self._build_query().filter(Room.name == name))

    def find_section_by_name(self, room_id: str, name: str) -> Optional[Section]:
        """Find a section of ``room_id`` by its exact name."""
        query = self.db.query(Section).filter(Section.room_id == room_id, Section.name == name)
        return self._execute_first(query)

    def list_sections(self, room_id: str) -> List[Section]:
        """All sections of a room ordered by name."""
        query = self.db.query(Section).filter(Section.room_id == room_id).order_by(Section.name)
        return self._execute_query(query)
