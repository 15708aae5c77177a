"""
Database models for the presence module.

- Status catalog (PresenceStatusType)
- Office catalog (PresenceOfficeLocation)
- Presence segments (StaffPresence)
"""

from .presence import PresenceOfficeLocation, PresenceStatusType, StaffPresence

__all__ = [
    "PresenceOfficeLocation",
    "PresenceStatusType",
    "StaffPresence",
]
