"""
Repository layer for RoomBook.

Repositories own all SQLAlchemy queries; services own transactions.
"""

from .base_repository import BaseRepository, IRepository
from .catalog_repository import CatalogRepository
from .factory import RepositoryFactory
from .reservation_repository import ReservationRepository

__all__ = [
    "BaseRepository",
    "CatalogRepository",
    "IRepository",
    "RepositoryFactory",
    "ReservationRepository",
]
