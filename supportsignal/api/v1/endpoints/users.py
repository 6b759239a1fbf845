"""User management endpoints.

Company admins manage users of their own company; system admins manage
every company.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.auth import require_permission
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import AppError
from supportsignal.core.permissions import Permissions
from supportsignal.schemas.auth import CurrentUser, UserCreate, UserRoleUpdate
from supportsignal.schemas.common import ApiResponse
from supportsignal.services.user_service import UserService
from supportsignal.utils.logging import get_logger
from supportsignal.utils.responses import app_error_to_http, create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()

manage_users = require_permission(Permissions.MANAGE_USERS)


async def get_user_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> UserService:
    return UserService(db_session)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    operation_id="create_user",
)
async def create_user(
    request: Request,
    payload: UserCreate,
    current_user: Annotated[CurrentUser, Depends(manage_users)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    """Create a user.

    Args:
        request: Incoming request, used for the response envelope
        payload: New user details
        current_user: Caller with the manage-users permission
        user_service: User service for business logic

    Returns:
        ApiResponse wrapping the created user

    Raises:
        HTTPException: 400/403/409 for invalid role, scope or duplicate email
    """
    try:
        user = await user_service.create_user(payload, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=user, message="User created", request=request)


@router.get("/", response_model=ApiResponse, summary="List company users", operation_id="list_company_users")
async def list_users(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(manage_users)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    company_id: Optional[UUID] = Query(None, description="Company to list; defaults to the caller's"),
) -> ApiResponse:
    try:
        users = await user_service.list_company_users(current_user, company_id)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=users, message=f"Found {len(users)} users", request=request)


@router.patch(
    "/{user_id}/role",
    response_model=ApiResponse,
    summary="Change a user's role",
    operation_id="update_user_role",
)
async def update_user_role(
    request: Request,
    user_id: UUID,
    payload: UserRoleUpdate,
    current_user: Annotated[CurrentUser, Depends(manage_users)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    try:
        user = await user_service.update_role(user_id, payload.role, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=user, message="User role updated", request=request)
