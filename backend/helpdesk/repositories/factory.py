# backend/helpdesk/repositories/factory.py
"""
Repository Factory for the presence backend.

Centralizes creation of repository instances so services can be handed
alternatives in tests.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session


# Avoid circular imports
if TYPE_CHECKING:
    from .presence_catalog_repository import (
        PresenceOfficeLocationRepository,
        PresenceStatusTypeRepository,
    )
    from .presence_repository import PresenceSegmentRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_presence_segment_repository(db: Session) -> "PresenceSegmentRepository":
        """Create repository for presence segment operations."""
        from .presence_repository import PresenceSegmentRepository

        return PresenceSegmentRepository(db)

    @staticmethod
    def create_status_type_repository(db: Session) -> "PresenceStatusTypeRepository":
        """Create repository for the status catalog."""
        from .presence_catalog_repository import PresenceStatusTypeRepository

        return PresenceStatusTypeRepository(db)

    @staticmethod
    def create_office_location_repository(db: Session) -> "PresenceOfficeLocationRepository":
        """Create repository for the office catalog."""
        from .presence_catalog_repository import PresenceOfficeLocationRepository

        return PresenceOfficeLocationRepository(db)
