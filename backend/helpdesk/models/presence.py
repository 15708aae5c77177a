# backend/helpdesk/models/presence.py
"""
Staff presence models.

Classes:
    PresenceStatusType: Catalog of availability kinds (Remote, Available, ...)
    PresenceOfficeLocation: Catalog of physical sites a status can point at
    StaffPresence: One contiguous block of a user's declared availability
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..core.constants import (
    CODE_MAX_LENGTH,
    DEFAULT_STATUS_CATEGORY,
    LABEL_MAX_LENGTH,
    NOTES_MAX_LENGTH,
)
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class PresenceStatusType(Base):
    """Status catalog entry. Deactivated rather than deleted while referenced."""

    __tablename__ = "presence_status_types"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    code = Column(String(CODE_MAX_LENGTH), nullable=False, unique=True)
    label = Column(String(LABEL_MAX_LENGTH), nullable=False)
    category = Column(String(50), nullable=False, default=DEFAULT_STATUS_CATEGORY)
    requires_office = Column(Boolean, nullable=False, default=False)
    color = Column(String(7), nullable=True)
    icon = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, onupdate=_now_utc)

    segments = relationship("StaffPresence", back_populates="status")

    def __repr__(self) -> str:
        return f"<PresenceStatusType {self.code} active={self.is_active}>"


class PresenceOfficeLocation(Base):
    """Office catalog entry."""

    __tablename__ = "presence_office_locations"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    code = Column(String(CODE_MAX_LENGTH), nullable=False, unique=True)
    name = Column(String(LABEL_MAX_LENGTH), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, onupdate=_now_utc)

    segments = relationship("StaffPresence", back_populates="office_location")

    def __repr__(self) -> str:
        return f"<PresenceOfficeLocation {self.code} active={self.is_active}>"


class StaffPresence(Base):
    """
    A presence segment: one status over [start_at, end_at) in UTC.

    Segments never cross a local midnight, so every segment belongs to
    exactly one local calendar day.
    """

    __tablename__ = "staff_presence_segments"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(64), nullable=False)
    status_id = Column(
        String(26), ForeignKey("presence_status_types.id", ondelete="RESTRICT"), nullable=False
    )
    office_location_id = Column(
        String(26),
        ForeignKey("presence_office_locations.id", ondelete="RESTRICT"),
        nullable=True,
    )
    notes = Column(String(NOTES_MAX_LENGTH), nullable=True)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc)

    # Relationships
    status = relationship("PresenceStatusType", back_populates="segments")
    office_location = relationship(
        "PresenceOfficeLocation", back_populates="segments"
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_staff_presence_end_after_start"),
        UniqueConstraint(
            "user_id",
            "start_at",
            "end_at",
            "status_id",
            "office_location_id",
            name="uq_staff_presence_identical_segment",
        ),
        Index("ix_staff_presence_user_start", "user_id", "start_at"),
        Index("ix_staff_presence_window", "start_at", "end_at"),
    )

    def __repr__(self) -> str:
        return f"<StaffPresence {self.user_id} {self.start_at}–{self.end_at}>"
