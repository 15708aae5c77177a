# backend/helpdesk/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.day_planning_service import DayPlanningService
from ...services.presence_catalog_service import PresenceCatalogService
from ...services.presence_query_service import PresenceQueryService
from ...services.presence_registry import PresenceRegistry, get_presence_registry
from .database import get_db

logger = logging.getLogger(__name__)


def get_registry() -> PresenceRegistry:
    """Process-wide presence catalog registry."""
    return get_presence_registry()


def get_day_planning_service(
    db: Session = Depends(get_db), registry: PresenceRegistry = Depends(get_registry)
) -> DayPlanningService:
    return DayPlanningService(db, registry)


def get_presence_query_service(db: Session = Depends(get_db)) -> PresenceQueryService:
    return PresenceQueryService(db)


def get_presence_catalog_service(
    db: Session = Depends(get_db), registry: PresenceRegistry = Depends(get_registry)
) -> PresenceCatalogService:
    return PresenceCatalogService(db, registry)
