# backend/helpdesk/api/dependencies/auth.py
"""
Authentication dependencies.

Authentication happens upstream (gateway or session middleware) and leaves
the caller on ``request.state.user``. This module only reads it back and
checks the admin flag; it never verifies credentials itself.
"""

from dataclasses import dataclass
import logging
from typing import Any, Mapping

from fastapi import Depends, HTTPException, Request, status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    is_admin: bool = False


def _coerce_user(raw: Any) -> CurrentUser:
    if isinstance(raw, CurrentUser):
        return raw
    if isinstance(raw, Mapping):
        return CurrentUser(id=str(raw["id"]), is_admin=bool(raw.get("is_admin", False)))
    return CurrentUser(id=str(raw.id), is_admin=bool(getattr(raw, "is_admin", False)))


def get_current_user(request: Request) -> CurrentUser:
    """
    Get the authenticated caller.

    Raises:
        HTTPException: 401 if no user is attached to the request
    """
    raw = getattr(request.state, "user", None)
    if raw is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return _coerce_user(raw)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only administrators through."""
    if not current_user.is_admin:
        logger.warning("Non-admin user %s attempted an admin presence action", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return current_user
