"""Prompt group endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.auth import get_current_user, require_permission
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import AppError
from supportsignal.core.permissions import Permissions
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.common import ApiResponse
from supportsignal.schemas.prompts import (
    MovePromptRequest,
    PromptGroupCreate,
    PromptGroupUpdate,
    ReorderPromptsRequest,
)
from supportsignal.services.prompt_group_service import PromptGroupService
from supportsignal.utils.responses import app_error_to_http, create_api_response

router = APIRouter()

configure_system = require_permission(Permissions.SYSTEM_CONFIGURATION)


async def get_prompt_group_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> PromptGroupService:
    return PromptGroupService(db_session)


@router.get("/", response_model=ApiResponse, summary="List prompt groups", operation_id="list_prompt_groups")
async def list_groups(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    group_service: Annotated[PromptGroupService, Depends(get_prompt_group_service)],
) -> ApiResponse:
    groups = await group_service.list_groups()
    return create_api_response(data=groups, message=f"Found {len(groups)} groups", request=request)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a prompt group",
    operation_id="create_prompt_group",
)
async def create_group(
    request: Request,
    payload: PromptGroupCreate,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    group_service: Annotated[PromptGroupService, Depends(get_prompt_group_service)],
) -> ApiResponse:
    try:
        group = await group_service.create_group(payload)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=group, message="Prompt group created", request=request)


@router.post(
    "/reorder",
    response_model=ApiResponse,
    summary="Bulk-update prompt display order",
    operation_id="reorder_prompts",
)
async def reorder_prompts(
    request: Request,
    payload: ReorderPromptsRequest,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    group_service: Annotated[PromptGroupService, Depends(get_prompt_group_service)],
) -> ApiResponse:
    try:
        count = await group_service.reorder_prompts(payload.prompt_ids, payload.new_orders)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data={"count": count}, message=f"Reordered {count} prompts", request=request)


@router.post(
    "/move/{prompt_id}",
    response_model=ApiResponse,
    summary="Move a prompt to another group",
    operation_id="move_prompt_to_group",
)
async def move_prompt(
    request: Request,
    prompt_id: UUID,
    payload: MovePromptRequest,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    group_service: Annotated[PromptGroupService, Depends(get_prompt_group_service)],
) -> ApiResponse:
    """Assign a prompt to ``new_group_id``; null removes it from any group."""
    try:
        prompt = await group_service.move_prompt(prompt_id, payload.new_group_id, payload.display_order)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=prompt, message="Prompt moved", request=request)


@router.get("/{group_id}", response_model=ApiResponse, summary="Get a prompt group", operation_id="get_prompt_group")
async def get_group(
    request: Request,
    group_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    group_service: Annotated[PromptGroupService, Depends(get_prompt_group_service)],
) -> ApiResponse:
    try:
        group = await group_service.get_group(group_id)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=group, message="Prompt group retrieved", request=request)


@router.patch(
    "/{group_id}",
    response_model=ApiResponse,
    summary="Update a prompt group",
    operation_id="update_prompt_group",
)
async def update_group(
    request: Request,
    group_id: UUID,
    payload: PromptGroupUpdate,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    group_service: Annotated[PromptGroupService, Depends(get_prompt_group_service)],
) -> ApiResponse:
    try:
        group = await group_service.update_group(group_id, payload)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=group, message="Prompt group updated", request=request)


@router.delete(
    "/{group_id}",
    response_model=ApiResponse,
    summary="Delete a prompt group",
    operation_id="delete_prompt_group",
)
async def delete_group(
    request: Request,
    group_id: UUID,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    group_service: Annotated[PromptGroupService, Depends(get_prompt_group_service)],
) -> ApiResponse:
    """Delete a group. Refused with 400 while active prompts are assigned to it."""
    try:
        await group_service.delete_group(group_id)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data={"deleted": True}, message="Prompt group deleted", request=request)
