"""Authentication dependencies for FastAPI routes.

Bearer tokens are signed JWTs that reference a row in ``sessions``; a token
is accepted only while that session exists and has not expired.
"""

from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import SessionExpiredError
from supportsignal.core.jwt import token_manager
from supportsignal.core.permissions import has_permission
from supportsignal.schemas.auth import CurrentUser
from supportsignal.services.auth_service import AuthService
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
) -> CurrentUser:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Authorization credentials (automatically injected)
        db_session: Database session used to check the backing session row

    Returns:
        CurrentUser: Authenticated user information

    Raises:
        HTTPException: If the token is missing, invalid or its session has expired
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise _unauthorized("Authorization header missing")

    try:
        claims = token_manager.verify_token(credentials.credentials)
        user = await AuthService(db_session).resolve_session(claims)
        LOGGER.debug(f"Authenticated user: {user.id} ({user.email})")
        return user
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise _unauthorized("Invalid authentication token") from e
    except SessionExpiredError as e:
        LOGGER.warning(f"Rejected session: {e.message}")
        raise _unauthorized("Invalid or expired session") from e


def require_role(*roles: str):
    """Create a dependency that requires one of ``roles``.

    Example:
        admin_only = require_role(Roles.SYSTEM_ADMIN)

        @router.get("/admin")
        async def admin_route(user: CurrentUser = Depends(admin_only)):
            ...
    """
    async def role_checker(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
        if user.role not in roles:
            LOGGER.warning(f"User {user.id} with role {user.role} denied; requires one of {roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(roles)}",
            )
        return user

    return role_checker


def require_permission(permission: str):
    """Create a dependency that requires a permission from the role map."""
    async def permission_checker(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
        if not has_permission(user.role, permission):
            LOGGER.warning(f"User {user.id} with role {user.role} lacks permission {permission}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions: {permission} required",
            )
        return user

    return permission_checker
