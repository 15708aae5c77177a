# backend/helpdesk/repositories/__init__.py
"""
Repository layer for the presence backend.

Key Components:
- BaseRepository: generic CRUD foundation
- RepositoryFactory: central construction point used by services
- PresenceSegmentRepository: window queries and day replacement
- PresenceStatusTypeRepository / PresenceOfficeLocationRepository: catalogs

Usage:
    from helpdesk.repositories import RepositoryFactory

    repository = RepositoryFactory.create_presence_segment_repository(db)
    segments = repository.get_segments_in_window(user_id, window.start, window.end)
"""

from .base_repository import BaseRepository, IRepository
from .factory import RepositoryFactory
from .presence_catalog_repository import (
    PresenceOfficeLocationRepository,
    PresenceStatusTypeRepository,
)
from .presence_repository import PresenceSegmentRepository

__all__ = [
    "BaseRepository",
    "IRepository",
    "PresenceOfficeLocationRepository",
    "PresenceSegmentRepository",
    "PresenceStatusTypeRepository",
    "RepositoryFactory",
]
