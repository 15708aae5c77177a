# backend/helpdesk/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import CurrentUser, get_current_user, require_admin
from .database import get_db
from .services import (
    get_day_planning_service,
    get_presence_catalog_service,
    get_presence_query_service,
    get_registry,
)

__all__ = [
    # Auth
    "CurrentUser",
    "get_current_user",
    "require_admin",
    # Database
    "get_db",
    # Services
    "get_day_planning_service",
    "get_presence_catalog_service",
    "get_presence_query_service",
    "get_registry",
]
