# backend/helpdesk/services/presence_catalog_service.py
"""
Presence Catalog Service.

Administrative edits to the status and office catalogs. Every successful
mutation busts the registry so planners see the change on their next read.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException
from ..models.presence import PresenceOfficeLocation, PresenceStatusType
from ..repositories.factory import RepositoryFactory
from ..repositories.presence_catalog_repository import (
    PresenceOfficeLocationRepository,
    PresenceStatusTypeRepository,
)
from ..schemas.presence import (
    OfficeLocationCreate,
    OfficeLocationUpdate,
    StatusTypeCreate,
    StatusTypeUpdate,
)
from .base import BaseService
from .presence_registry import PresenceRegistry

logger = logging.getLogger(__name__)

DEFAULT_STATUSES: List[Dict[str, Any]] = [
    {
        "code": "AVAILABLE",
        "label": "Available",
        "category": "presence",
        "requires_office": True,
        "color": "#22c55e",
        "icon": "Check",
    },
    {
        "code": "WORKING_REMOTE",
        "label": "Working Remote",
        "category": "presence",
        "requires_office": False,
        "color": "#3b82f6",
        "icon": "Home",
    },
    {
        "code": "REMOTE",
        "label": "Remote",
        "category": "presence",
        "requires_office": False,
        "color": "#8b5cf6",
        "icon": "Laptop",
    },
    {
        "code": "VACATION",
        "label": "Vacation",
        "category": "time_off",
        "requires_office": False,
        "color": "#f59e0b",
        "icon": "Plane",
    },
    {
        "code": "SICK",
        "label": "Sick",
        "category": "time_off",
        "requires_office": False,
        "color": "#ef4444",
        "icon": "HeartPulse",
    },
]

DEFAULT_OFFICES: List[Dict[str, Any]] = [
    {"code": "NEWPORT_BEACH", "name": "Newport Beach"},
]


class PresenceCatalogService(BaseService):
    """Create and edit status types and office locations."""

    def __init__(
        self,
        db: Session,
        registry: PresenceRegistry,
        status_repository: Optional[PresenceStatusTypeRepository] = None,
        office_repository: Optional[PresenceOfficeLocationRepository] = None,
    ):
        super().__init__(db)
        self.registry = registry
        self.status_repository = (
            status_repository or RepositoryFactory.create_status_type_repository(db)
        )
        self.office_repository = (
            office_repository or RepositoryFactory.create_office_location_repository(db)
        )

    @BaseService.measure_operation("list_statuses")
    def list_statuses(self) -> List[PresenceStatusType]:
        """All status types, inactive included."""
        return self.status_repository.list_all()

    @BaseService.measure_operation("list_offices")
    def list_offices(self) -> List[PresenceOfficeLocation]:
        return self.office_repository.list_all()

    @BaseService.measure_operation("create_status")
    def create_status(self, data: StatusTypeCreate) -> PresenceStatusType:
        if self.status_repository.get_by_code(data.code) is not None:
            raise ConflictException(f'Status code "{data.code}" already exists')

        with self.transaction():
            status = self.status_repository.create(**data.model_dump())

        self.registry.bust()
        self.log_operation("create_status", code=status.code)
        return status

    @BaseService.measure_operation("update_status")
    def update_status(self, data: StatusTypeUpdate) -> PresenceStatusType:
        changes = data.model_dump(exclude_unset=True, exclude={"id"})

        with self.transaction():
            status = self.status_repository.update(data.id, **changes)
            if status is None:
                raise NotFoundException("Status not found", code="STATUS_NOT_FOUND")

        self.registry.bust()
        self.log_operation("update_status", status_id=data.id, fields=sorted(changes))
        return status

    @BaseService.measure_operation("create_office")
    def create_office(self, data: OfficeLocationCreate) -> PresenceOfficeLocation:
        if self.office_repository.get_by_code(data.code) is not None:
            raise ConflictException(f'Office code "{data.code}" already exists')

        with self.transaction():
            office = self.office_repository.create(**data.model_dump())

        self.registry.bust()
        self.log_operation("create_office", code=office.code)
        return office

    @BaseService.measure_operation("update_office")
    def update_office(self, data: OfficeLocationUpdate) -> PresenceOfficeLocation:
        changes = data.model_dump(exclude_unset=True, exclude={"id"})

        with self.transaction():
            office = self.office_repository.update(data.id, **changes)
            if office is None:
                raise NotFoundException("Office not found", code="OFFICE_NOT_FOUND")

        self.registry.bust()
        self.log_operation("update_office", office_id=data.id, fields=sorted(changes))
        return office

    @BaseService.measure_operation("seed_defaults")
    def seed_defaults(self) -> Dict[str, int]:
        """
        Insert the baseline catalog entries that are missing.

        Existing rows are left untouched, so running this repeatedly is safe.

        Returns:
            Number of statuses and offices created
        """
        created = {"statuses": 0, "offices": 0}
        with self.transaction():
            for status in DEFAULT_STATUSES:
                if self.status_repository.get_by_code(status["code"]) is None:
                    self.status_repository.create(**status)
                    created["statuses"] += 1
            for office in DEFAULT_OFFICES:
                if self.office_repository.get_by_code(office["code"]) is None:
                    self.office_repository.create(**office)
                    created["offices"] += 1

        if created["statuses"] or created["offices"]:
            self.registry.bust()
        logger.info(
            "Seeded %d status type(s) and %d office location(s)",
            created["statuses"],
            created["offices"],
        )
        return created


__all__ = ["DEFAULT_OFFICES", "DEFAULT_STATUSES", "PresenceCatalogService"]
