"""Incident endpoints: creation, listing, workflow status and dashboard."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.auth import get_current_user, require_permission
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import AppError
from supportsignal.core.permissions import Permissions
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.common import ApiResponse
from supportsignal.schemas.incidents import IncidentCreate, IncidentStatusUpdate
from supportsignal.services.incident_service import IncidentService
from supportsignal.utils.logging import get_logger
from supportsignal.utils.responses import app_error_to_http, create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_incident_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> IncidentService:
    return IncidentService(db_session)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report an incident",
    operation_id="create_incident",
)
async def create_incident(
    request: Request,
    payload: IncidentCreate,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.CREATE_INCIDENT))],
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> ApiResponse:
    try:
        incident = await incident_service.create_incident(payload, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=incident, message="Incident created", request=request)


@router.get("/", response_model=ApiResponse, summary="List incidents", operation_id="list_incidents")
async def list_incidents(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
    overall_status: Optional[str] = Query(None, description="capture_pending | analysis_pending | completed"),
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    try:
        incidents = await incident_service.list_incidents(current_user, overall_status=overall_status, limit=limit)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=incidents, message=f"Found {len(incidents)} incidents", request=request)


@router.get(
    "/dashboard",
    response_model=ApiResponse,
    summary="Incident workflow counters",
    operation_id="get_incident_dashboard",
)
async def get_dashboard(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> ApiResponse:
    """Company-wide counts by workflow status, plus incidents from the last 30 days."""
    try:
        stats = await incident_service.get_dashboard(current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=stats, message="Dashboard retrieved", request=request)


@router.get("/{incident_id}", response_model=ApiResponse, summary="Get an incident", operation_id="get_incident")
async def get_incident(
    request: Request,
    incident_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> ApiResponse:
    try:
        incident = await incident_service.get_incident(incident_id, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=incident, message="Incident retrieved", request=request)


@router.patch(
    "/{incident_id}/status",
    response_model=ApiResponse,
    summary="Update capture and analysis status",
    operation_id="update_incident_status",
)
async def update_incident_status(
    request: Request,
    incident_id: UUID,
    payload: IncidentStatusUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> ApiResponse:
    try:
        incident = await incident_service.update_status(
            incident_id,
            current_user,
            capture_status=payload.capture_status,
            analysis_status=payload.analysis_status,
        )
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=incident, message="Incident status updated", request=request)
