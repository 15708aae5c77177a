# backend/helpdesk/routes/v1/presence.py
"""
Presence routes - API v1

Versioned staff presence endpoints under /api/v1/presence.
All business logic delegated to the presence services.

Endpoints:
    GET /options                      → Active statuses and offices for the planner
    GET /day                          → One local day of segments
    GET /week-view                    → Seven local days, grouped for display
    GET /current                      → Who is in right now
    POST /plan-day                    → Replace a day (or a repeated range of days)
    DELETE /segment/{segment_id}      → Delete one of the caller's segments
    GET|POST|PATCH /admin/status      → Status catalog administration
    GET|POST|PATCH /admin/office      → Office catalog administration
"""

import asyncio
import logging
from typing import Any, Dict, List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from ...api.dependencies import (
    CurrentUser,
    get_current_user,
    get_day_planning_service,
    get_db,
    get_presence_catalog_service,
    get_presence_query_service,
    get_registry,
    require_admin,
)
from ...core.constants import DATE_PATTERN
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...core.timezone_utils import is_known_timezone
from ...schemas.presence import (
    CurrentPresenceResponse,
    CurrentPresencesResponse,
    DaySegmentResponse,
    DaySegmentsResponse,
    DeleteSegmentResponse,
    OfficeLocationCreate,
    OfficeLocationResponse,
    OfficeLocationUpdate,
    PlanDayResponse,
    PlannedSegmentResponse,
    PresenceOptionsResponse,
    StatusTypeCreate,
    StatusTypeResponse,
    StatusTypeUpdate,
    WeekDayResponse,
    WeekViewResponse,
)
from ...services.day_planning_service import DayPlanningService
from ...services.presence_catalog_service import PresenceCatalogService
from ...services.presence_query_service import PresenceQueryService
from ...services.presence_registry import PresenceRegistry

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["presence-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception() from exc


def _resolve_target_user(current_user: CurrentUser, user_id: Optional[str]) -> str:
    """Only administrators may act on another user's presence."""
    if not user_id or user_id == current_user.id:
        return current_user.id
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can manage another user's presence",
        )
    return user_id


def _check_timezone(tz: Optional[str]) -> Optional[str]:
    if tz and not is_known_timezone(tz):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown timezone: {tz}"
        )
    return tz


def _unexpected(exc: Exception, action: str) -> NoReturn:
    raise_503_if_pool_exhaustion(exc)
    logger.error(f"Error {action}: {str(exc)}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}"
    )


@router.get("/options", response_model=PresenceOptionsResponse)
async def get_presence_options(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    registry: PresenceRegistry = Depends(get_registry),
) -> PresenceOptionsResponse:
    """Active statuses and offices, as offered by the day planner."""
    try:
        options = await asyncio.to_thread(registry.get_presence_options, db)
        return PresenceOptionsResponse(**options)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "load presence options")


@router.get("/day", response_model=DaySegmentsResponse, response_model_by_alias=True)
async def get_day(
    date: str = Query(..., pattern=DATE_PATTERN, description="Local date YYYY-MM-DD"),
    tz: Optional[str] = Query(None, description="IANA timezone of the date"),
    user_id: Optional[str] = Query(None, description="Another user's id (admins only)"),
    current_user: CurrentUser = Depends(get_current_user),
    query_service: PresenceQueryService = Depends(get_presence_query_service),
) -> DaySegmentsResponse:
    """
    Get one local day of segments, earliest first.

    Returns:
        DaySegmentsResponse with local "HH:mm" times and catalog labels
    """
    target = _resolve_target_user(current_user, user_id)
    tz = _check_timezone(tz)
    try:
        segments = await asyncio.to_thread(query_service.get_day, target, date, tz_name=tz)
        return DaySegmentsResponse(
            date=date,
            segments=[DaySegmentResponse.model_validate(s) for s in segments],
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "load presence day")


@router.get("/week-view", response_model=WeekViewResponse)
async def get_week_view(
    start_date: Optional[str] = Query(
        None, pattern=DATE_PATTERN, description="First local date (defaults to today)"
    ),
    tz: Optional[str] = Query(None, description="IANA timezone of the dates"),
    user_id: Optional[str] = Query(None, description="Another user's id (admins only)"),
    current_user: CurrentUser = Depends(get_current_user),
    query_service: PresenceQueryService = Depends(get_presence_query_service),
) -> WeekViewResponse:
    """Seven consecutive local days of the user's schedule."""
    target = _resolve_target_user(current_user, user_id)
    tz = _check_timezone(tz)
    try:
        days = await asyncio.to_thread(
            query_service.get_week_view, target, start_date, tz_name=tz
        )
        return WeekViewResponse(days=[WeekDayResponse.model_validate(d) for d in days])
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "load week view")


@router.get("/current", response_model=CurrentPresencesResponse)
async def get_current_presences(
    user_ids: Optional[List[str]] = Query(None, description="Restrict to these users"),
    current_user: CurrentUser = Depends(get_current_user),
    query_service: PresenceQueryService = Depends(get_presence_query_service),
) -> CurrentPresencesResponse:
    """Current presence for every user with a segment covering now."""
    try:
        presences = await asyncio.to_thread(query_service.get_current_presences, user_ids)
        return CurrentPresencesResponse(
            presences=[CurrentPresenceResponse.model_validate(p) for p in presences]
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "load current presences")


@router.post("/plan-day", response_model=PlanDayResponse)
async def plan_day(
    payload: Dict[str, Any] = Body(..., description="PlanDayRequest body"),
    tz: Optional[str] = Query(None, description="IANA timezone of the plan"),
    all_days: bool = Query(False, description="Return segments for every planned day"),
    current_user: CurrentUser = Depends(get_current_user),
    planning_service: DayPlanningService = Depends(get_day_planning_service),
) -> PlanDayResponse:
    """
    Replace the caller's presence for a day, optionally repeated until a date.

    The body is parsed by the service so that shape errors come back in the
    same ``details.errors`` list as business rule errors.

    Raises:
        HTTPException: 422 with every validation error, 403 for another user
    """
    requested_user = payload.get("user_id")
    target = _resolve_target_user(
        current_user, requested_user if isinstance(requested_user, str) else None
    )
    tz = _check_timezone(tz)
    try:
        segments = await asyncio.to_thread(
            planning_service.plan_day, target, payload, tz_name=tz, all_days=all_days
        )
        return PlanDayResponse(
            date=segments[0].date if segments else str(payload.get("date")),
            segments=[PlannedSegmentResponse.model_validate(s) for s in segments],
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "plan day")


@router.delete("/segment/{segment_id}", response_model=DeleteSegmentResponse)
async def delete_segment(
    segment_id: str = Path(..., description="Segment ULID"),
    current_user: CurrentUser = Depends(get_current_user),
    query_service: PresenceQueryService = Depends(get_presence_query_service),
) -> DeleteSegmentResponse:
    """Delete one of the caller's own segments."""
    try:
        await asyncio.to_thread(query_service.delete_segment, current_user.id, segment_id)
        return DeleteSegmentResponse(id=segment_id)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "delete segment")


# =============================================================================
# Catalog administration
# =============================================================================


@router.get("/admin/status", response_model=List[StatusTypeResponse])
async def list_statuses(
    _: CurrentUser = Depends(require_admin),
    catalog_service: PresenceCatalogService = Depends(get_presence_catalog_service),
) -> List[StatusTypeResponse]:
    statuses = await asyncio.to_thread(catalog_service.list_statuses)
    return [StatusTypeResponse.model_validate(s) for s in statuses]


@router.post(
    "/admin/status", response_model=StatusTypeResponse, status_code=status.HTTP_201_CREATED
)
async def create_status(
    data: StatusTypeCreate,
    _: CurrentUser = Depends(require_admin),
    catalog_service: PresenceCatalogService = Depends(get_presence_catalog_service),
) -> StatusTypeResponse:
    try:
        created = await asyncio.to_thread(catalog_service.create_status, data)
        return StatusTypeResponse.model_validate(created)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "create status")


@router.patch("/admin/status", response_model=StatusTypeResponse)
async def update_status(
    data: StatusTypeUpdate,
    _: CurrentUser = Depends(require_admin),
    catalog_service: PresenceCatalogService = Depends(get_presence_catalog_service),
) -> StatusTypeResponse:
    try:
        updated = await asyncio.to_thread(catalog_service.update_status, data)
        return StatusTypeResponse.model_validate(updated)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "update status")


@router.get("/admin/office", response_model=List[OfficeLocationResponse])
async def list_offices(
    _: CurrentUser = Depends(require_admin),
    catalog_service: PresenceCatalogService = Depends(get_presence_catalog_service),
) -> List[OfficeLocationResponse]:
    offices = await asyncio.to_thread(catalog_service.list_offices)
    return [OfficeLocationResponse.model_validate(o) for o in offices]


@router.post(
    "/admin/office", response_model=OfficeLocationResponse, status_code=status.HTTP_201_CREATED
)
async def create_office(
    data: OfficeLocationCreate,
    _: CurrentUser = Depends(require_admin),
    catalog_service: PresenceCatalogService = Depends(get_presence_catalog_service),
) -> OfficeLocationResponse:
    try:
        created = await asyncio.to_thread(catalog_service.create_office, data)
        return OfficeLocationResponse.model_validate(created)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "create office")


@router.patch("/admin/office", response_model=OfficeLocationResponse)
async def update_office(
    data: OfficeLocationUpdate,
    _: CurrentUser = Depends(require_admin),
    catalog_service: PresenceCatalogService = Depends(get_presence_catalog_service),
) -> OfficeLocationResponse:
    try:
        updated = await asyncio.to_thread(catalog_service.update_office, data)
        return OfficeLocationResponse.model_validate(updated)
    except DomainException as exc:
        handle_domain_exception(exc)
    except HTTPException:
        raise
    except Exception as exc:
        _unexpected(exc, "update office")
