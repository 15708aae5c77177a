"""
Presence catalog registry.

Short-lived in-memory cache of the active status types and office
locations. It is read-through only: the database stays the source of truth
and the registry is never written back to.

One instance is shared by the process (see ``get_presence_registry``);
tests build their own so they never see each other's catalogs. Refreshes
are idempotent, so concurrent callers racing past an expired TTL may both
hit the database without harming anything; no lock is taken.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, cast

from sqlalchemy.orm import Session

from ..core.config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusSnapshot:
    id: str
    code: str
    label: str
    category: str
    requires_office: bool
    color: Optional[str]
    icon: Optional[str]


@dataclass(frozen=True)
class OfficeSnapshot:
    id: str
    code: str
    name: str


@dataclass(frozen=True)
class RegistryPayload:
    statuses: Tuple[StatusSnapshot, ...]
    offices: Tuple[OfficeSnapshot, ...]
    fetched_at: float


class CatalogLookup(Protocol):
    """What the validation engine needs from the catalogs."""

    def resolve_status(self, code: str) -> Optional[StatusSnapshot]:
        ...

    def resolve_office(self, code: str) -> Optional[OfficeSnapshot]:
        ...


class PresenceRegistry:
    """TTL cache of active presence catalogs."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = (
            settings.presence_registry_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock
        self._payload: Optional[RegistryPayload] = None

    @property
    def is_fresh(self) -> bool:
        payload = self._payload
        return payload is not None and (self._clock() - payload.fetched_at) < self.ttl_seconds

    def refresh(self, db: Session) -> RegistryPayload:
        """Reload both catalogs from the database unconditionally."""
        status_repo = RepositoryFactory.create_status_type_repository(db)
        office_repo = RepositoryFactory.create_office_location_repository(db)

        statuses = tuple(
            StatusSnapshot(
                id=row.id,
                code=row.code,
                label=row.label,
                category=row.category,
                requires_office=bool(row.requires_office),
                color=row.color,
                icon=row.icon,
            )
            for row in status_repo.list_active()
        )
        offices = tuple(
            OfficeSnapshot(id=row.id, code=row.code, name=row.name)
            for row in office_repo.list_active()
        )

        payload = RegistryPayload(statuses=statuses, offices=offices, fetched_at=self._clock())
        self._payload = payload
        logger.debug(
            "[PRESENCE-REGISTRY] Refreshed %d statuses, %d offices", len(statuses), len(offices)
        )
        return payload

    def bust(self) -> None:
        """Force the next read to refetch (call after catalog edits)."""
        self._payload = None
        logger.info("[PRESENCE-REGISTRY] Cache busted")

    def _current(self, db: Session) -> RegistryPayload:
        if self.is_fresh:
            prometheus_metrics.record_registry_lookup(hit=True)
            return cast(RegistryPayload, self._payload)
        prometheus_metrics.record_registry_lookup(hit=False)
        return self.refresh(db)

    def get_active_statuses(self, db: Session) -> List[StatusSnapshot]:
        return list(self._current(db).statuses)

    def get_active_offices(self, db: Session) -> List[OfficeSnapshot]:
        return list(self._current(db).offices)

    def resolve_status(self, db: Session, code: str) -> Optional[StatusSnapshot]:
        """Active status by code; deactivated statuses do not resolve."""
        return next((s for s in self._current(db).statuses if s.code == code), None)

    def resolve_office(self, db: Session, code: str) -> Optional[OfficeSnapshot]:
        """Active office by code; deactivated offices do not resolve."""
        return next((o for o in self._current(db).offices if o.code == code), None)

    def get_presence_options(self, db: Session) -> Dict[str, List[Dict[str, Any]]]:
        """Catalog options in the shape the planner UI consumes."""
        payload = self._current(db)
        return {
            "statuses": [
                {
                    "code": s.code,
                    "label": s.label,
                    "color": s.color,
                    "icon": s.icon,
                    "requires_office": s.requires_office,
                }
                for s in payload.statuses
            ],
            "offices": [{"code": o.code, "name": o.name} for o in payload.offices],
        }

    def lookup(self, db: Session) -> "RegistryLookup":
        return RegistryLookup(self, db)


class RegistryLookup:
    """A registry bound to one session, satisfying CatalogLookup."""

    def __init__(self, registry: PresenceRegistry, db: Session) -> None:
        self.registry = registry
        self.db = db

    def resolve_status(self, code: str) -> Optional[StatusSnapshot]:
        return self.registry.resolve_status(self.db, code)

    def resolve_office(self, code: str) -> Optional[OfficeSnapshot]:
        return self.registry.resolve_office(self.db, code)


_default_registry: Optional[PresenceRegistry] = None


def get_presence_registry() -> PresenceRegistry:
    """Process-wide registry used by the HTTP wiring."""
    global _default_registry
    if _default_registry is None:
        _default_registry = PresenceRegistry()
    return _default_registry


__all__ = [
    "CatalogLookup",
    "OfficeSnapshot",
    "PresenceRegistry",
    "RegistryLookup",
    "RegistryPayload",
    "StatusSnapshot",
    "get_presence_registry",
]
