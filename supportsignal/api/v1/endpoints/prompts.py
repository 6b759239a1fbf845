"""Prompt template administration endpoints."""

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
from supportsignal.schemas.prompts import PromptCreate, PromptUpdate, TemplateValidationRequest
from supportsignal.services.prompt_service import PromptService
from supportsignal.utils.responses import app_error_to_http, create_api_response

router = APIRouter()

configure_system = require_permission(Permissions.SYSTEM_CONFIGURATION)


async def get_prompt_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> PromptService:
    return PromptService(db_session)


@router.get("/", response_model=ApiResponse, summary="List prompts", operation_id="list_prompts")
async def list_prompts(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
    active_only: bool = Query(False),
    group_id: Optional[UUID] = Query(None),
) -> ApiResponse:
    prompts = await prompt_service.list_prompts(active_only=active_only, group_id=group_id)
    return create_api_response(data=prompts, message=f"Found {len(prompts)} prompts", request=request)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a prompt version",
    operation_id="create_prompt",
)
async def create_prompt(
    request: Request,
    payload: PromptCreate,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
    replaces_previous: bool = Query(True, description="Deactivate the current active version"),
) -> ApiResponse:
    try:
        prompt = await prompt_service.create_prompt(payload, current_user, replaces_previous=replaces_previous)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=prompt, message="Prompt created", request=request)


@router.post(
    "/seed",
    response_model=ApiResponse,
    summary="Seed default prompt templates",
    operation_id="seed_default_prompts",
)
async def seed_prompts(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ApiResponse:
    created = await prompt_service.seed_default_prompts(current_user)
    return create_api_response(
        data={"created": created}, message=f"Seeded {len(created)} prompts", request=request
    )


@router.post(
    "/validate",
    response_model=ApiResponse,
    summary="Analyze a template",
    operation_id="validate_prompt_template",
)
async def validate_template(
    request: Request,
    payload: TemplateValidationRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ApiResponse:
    """Report variables, syntax errors and estimated complexity for a template."""
    analysis = prompt_service.validate_template(payload.prompt_template)
    message = "Template is valid" if not analysis["syntax_errors"] else "Template has syntax errors"
    return create_api_response(data=analysis, message=message, request=request)


@router.get(
    "/by-name/{prompt_name}",
    response_model=ApiResponse,
    summary="Get the active version of a prompt",
    operation_id="get_active_prompt",
)
async def get_active_prompt(
    request: Request,
    prompt_name: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ApiResponse:
    try:
        prompt = await prompt_service.get_active_prompt(prompt_name)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=prompt, message="Prompt retrieved", request=request)


@router.get("/{prompt_id}", response_model=ApiResponse, summary="Get a prompt", operation_id="get_prompt")
async def get_prompt(
    request: Request,
    prompt_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ApiResponse:
    try:
        prompt = await prompt_service.get_prompt(prompt_id)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=prompt, message="Prompt retrieved", request=request)


@router.put("/{prompt_id}", response_model=ApiResponse, summary="Update a prompt", operation_id="update_prompt")
async def update_prompt(
    request: Request,
    prompt_id: UUID,
    payload: PromptUpdate,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ApiResponse:
    try:
        prompt = await prompt_service.update_prompt(prompt_id, payload)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=prompt, message="Prompt updated", request=request)


@router.post(
    "/{prompt_id}/activate",
    response_model=ApiResponse,
    summary="Activate a prompt version",
    operation_id="activate_prompt",
)
async def activate_prompt(
    request: Request,
    prompt_id: UUID,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    prompt_service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ApiResponse:
    try:
        prompt = await prompt_service.activate_prompt(prompt_id)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=prompt, message="Prompt activated", request=request)
