# backend/helpdesk/repositories/presence_catalog_repository.py
"""Repositories for the status and office catalogs."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.presence import PresenceOfficeLocation, PresenceStatusType
from .base_repository import BaseRepository


class PresenceStatusTypeRepository(BaseRepository[PresenceStatusType]):
    def __init__(self, db: Session):
        super().__init__(db, PresenceStatusType)

    def list_active(self) -> List[PresenceStatusType]:
        query = (
            self._build_query()
            .filter(PresenceStatusType.is_active.is_(True))
            .order_by(PresenceStatusType.label.asc())
        )
        return self._execute_query(query)

    def list_all(self) -> List[PresenceStatusType]:
        return self._execute_query(self._build_query().order_by(PresenceStatusType.label.asc()))

    def get_by_code(self, code: str) -> Optional[PresenceStatusType]:
        return self.find_one_by(code=code)


class PresenceOfficeLocationRepository(BaseRepository[PresenceOfficeLocation]):
    def __init__(self, db: Session):
        super().__init__(db, PresenceOfficeLocation)

    def list_active(self) -> List[PresenceOfficeLocation]:
        query = (
            self._build_query()
            .filter(PresenceOfficeLocation.is_active.is_(True))
            .order_by(PresenceOfficeLocation.name.asc())
        )
        return self._execute_query(query)

    def list_all(self) -> List[PresenceOfficeLocation]:
        return self._execute_query(
            self._build_query().order_by(PresenceOfficeLocation.name.asc())
        )

    def get_by_code(self, code: str) -> Optional[PresenceOfficeLocation]:
        return self.find_one_by(code=code)
