"""Participant endpoints, scoped to the caller's company."""

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
from supportsignal.schemas.participants import ParticipantCreate, ParticipantStatusUpdate, ParticipantUpdate
from supportsignal.services.participant_service import ParticipantService
from supportsignal.utils.responses import app_error_to_http, create_api_response

router = APIRouter()

manage_participants = require_permission(Permissions.CREATE_INCIDENT)


async def get_participant_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ParticipantService:
    return ParticipantService(db_session)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a participant",
    operation_id="create_participant",
)
async def create_participant(
    request: Request,
    payload: ParticipantCreate,
    current_user: Annotated[CurrentUser, Depends(manage_participants)],
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse:
    """Create a participant in the caller's company.

    NDIS numbers are unique per company; a duplicate returns 409.
    """
    try:
        participant = await participant_service.create_participant(payload, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=participant, message="Participant created", request=request)


@router.get("/", response_model=ApiResponse, summary="List participants", operation_id="list_participants")
async def list_participants(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
    status_filter: Optional[str] = Query(None, alias="status", description="active | inactive | discharged | all"),
    support_level: Optional[str] = Query(None, description="high | medium | low | all"),
    search: Optional[str] = Query(None, description="Matches names, NDIS number or phone"),
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    try:
        participants = await participant_service.list_participants(
            current_user, status=status_filter, support_level=support_level, search=search, limit=limit
        )
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(
        data=participants, message=f"Found {len(participants)} participants", request=request
    )


@router.get("/{participant_id}", response_model=ApiResponse, summary="Get a participant", operation_id="get_participant")
async def get_participant(
    request: Request,
    participant_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse:
    try:
        participant = await participant_service.get_participant(participant_id, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=participant, message="Participant retrieved", request=request)


@router.put(
    "/{participant_id}",
    response_model=ApiResponse,
    summary="Update a participant",
    operation_id="update_participant",
)
async def update_participant(
    request: Request,
    participant_id: UUID,
    payload: ParticipantUpdate,
    current_user: Annotated[CurrentUser, Depends(manage_participants)],
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse:
    try:
        participant = await participant_service.update_participant(participant_id, payload, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=participant, message="Participant updated", request=request)


@router.patch(
    "/{participant_id}/status",
    response_model=ApiResponse,
    summary="Change participant status",
    operation_id="update_participant_status",
)
async def update_participant_status(
    request: Request,
    participant_id: UUID,
    payload: ParticipantStatusUpdate,
    current_user: Annotated[CurrentUser, Depends(manage_participants)],
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse:
    """Activate, deactivate or discharge a participant.

    Discharging requires a ``reason``. Re-applying the current status succeeds
    without changes.
    """
    try:
        participant, message = await participant_service.update_status(
            participant_id, payload.status, current_user, reason=payload.reason
        )
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=participant, message=message, request=request)
