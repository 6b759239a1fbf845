"""Authentication endpoints: login, logout and the current user."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.auth import get_current_user
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import AppError
from supportsignal.schemas.auth import CurrentUser, LoginRequest
from supportsignal.schemas.common import ApiResponse
from supportsignal.services.auth_service import AuthService
from supportsignal.utils.logging import get_logger
from supportsignal.utils.responses import app_error_to_http, create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_auth_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> AuthService:
    return AuthService(db_session)


@router.post(
    "/login",
    response_model=ApiResponse,
    summary="Log in with email and password",
    operation_id="login",
)
async def login(
    request: Request,
    payload: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    """Verify credentials and return a bearer token.

    The token stays valid for 24 hours, or 30 days with ``remember_me``.
    """
    try:
        result = await auth_service.login(str(payload.email), payload.password, payload.remember_me)
    except AppError as e:
        raise app_error_to_http(e, request) from e

    return create_api_response(data=result, message="Login successful", request=request)


@router.post(
    "/logout",
    response_model=ApiResponse,
    summary="Invalidate the current session",
    operation_id="logout",
)
async def logout(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    await auth_service.logout(current_user.session_token)
    LOGGER.info(f"User {current_user.id} logged out")
    return create_api_response(data={"logged_out": True}, message="Logged out", request=request)


@router.get(
    "/me",
    response_model=ApiResponse,
    status_code=status.HTTP_200_OK,
    summary="Get the authenticated user",
    operation_id="get_current_user_profile",
)
async def whoami(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    return create_api_response(
        data=current_user.model_dump(mode="json", exclude={"session_token"}),
        message="Current user retrieved",
        request=request,
    )
