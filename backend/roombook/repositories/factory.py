# backend/roombook/repositories/factory.py
"""
Repository Factory for RoomBook

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .catalog_repository import CatalogRepository
    from .reservation_repository import ReservationRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_reservation_repository(db: Session) -> "ReservationRepository":
        """Create repository for reservation reads and guarded creates."""
        from .reservation_repository import ReservationRepository

        return ReservationRepository(db)

    @staticmethod
    def create_catalog_repository(db: Session) -> "CatalogRepository":
        """Create repository for read-only catalog lookups."""
        from .catalog_repository import CatalogRepository

        return CatalogRepository(db)
