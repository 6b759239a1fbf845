"""Incident narrative endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.auth import get_current_user
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import AppError
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.common import ApiResponse
from supportsignal.schemas.incidents import NarrativeCreate, NarrativeUpdate
from supportsignal.services.narrative_service import NarrativeService
from supportsignal.utils.responses import app_error_to_http, create_api_response

router = APIRouter()


async def get_narrative_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> NarrativeService:
    return NarrativeService(db_session)


@router.post(
    "/{incident_id}/narrative",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create the incident narrative",
    operation_id="create_narrative",
)
async def create_narrative(
    request: Request,
    incident_id: UUID,
    payload: NarrativeCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    narrative_service: Annotated[NarrativeService, Depends(get_narrative_service)],
) -> ApiResponse:
    """Create the narrative; repeating the call returns the existing one."""
    try:
        narrative = await narrative_service.create_narrative(incident_id, payload, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=narrative, message="Narrative ready", request=request)


@router.put(
    "/{incident_id}/narrative",
    response_model=ApiResponse,
    summary="Update narrative phases",
    operation_id="update_narrative",
)
async def update_narrative(
    request: Request,
    incident_id: UUID,
    payload: NarrativeUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    narrative_service: Annotated[NarrativeService, Depends(get_narrative_service)],
) -> ApiResponse:
    try:
        narrative = await narrative_service.update_narrative(incident_id, payload, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=narrative, message=f"Narrative updated to version {narrative.version}", request=request)


@router.get(
    "/{incident_id}/narrative",
    response_model=ApiResponse,
    summary="Get the narrative with consolidated text",
    operation_id="get_narrative",
)
async def get_narrative(
    request: Request,
    incident_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    narrative_service: Annotated[NarrativeService, Depends(get_narrative_service)],
) -> ApiResponse:
    try:
        narrative = await narrative_service.get_narrative(incident_id, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e

    message = "Narrative retrieved" if narrative else "No narrative recorded"
    return create_api_response(data=narrative, message=message, request=request)
