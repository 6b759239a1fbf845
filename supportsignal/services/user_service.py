"""User service for business logic operations.

Company admins manage users inside their own company only; system
administrators manage every company and are the only role that can
create or promote other system administrators.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from supportsignal.core.permissions import Roles, can_assign_role
from supportsignal.core.security import hash_password
from supportsignal.repositories.user_repository import UserRepository
from supportsignal.schemas.auth import CurrentUser, UserCreate, UserResponse
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


class UserService:
    """Service for user business logic operations."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.repository = UserRepository(db_session)

    async def get_user_by_id(self, user_id: UUID) -> Optional[UserResponse]:
        user = await self.repository.get_by_id(user_id)
        return UserResponse.model_validate(user) if user else None

    def _check_company_scope(self, actor: CurrentUser, company_id: Optional[UUID]) -> None:
        if actor.role == Roles.SYSTEM_ADMIN:
            return
        if company_id != actor.company_id:
            raise PermissionDeniedError("Cannot manage users from different companies")

    async def create_user(self, data: UserCreate, actor: CurrentUser) -> UserResponse:
        """Create a user in the actor's company (or any company for system admins).

        Args:
            data: User creation data
            actor: The authenticated caller

        Returns:
            Created user response data

        Raises:
            ValidationError: If the role is unknown or a company admin has no company
            PermissionDeniedError: If the actor may not assign the role or company
            ConflictError: If a user with the same email already exists
        """
        if data.role not in Roles.ALL:
            raise ValidationError(f"Unknown role: {data.role}")

        if actor.role != Roles.SYSTEM_ADMIN and not actor.company_id:
            raise ValidationError("Company admin must be associated with a company")
        if not can_assign_role(actor.role, data.role):
            raise PermissionDeniedError("Company admins cannot create system administrators")

        company_id = data.company_id or actor.company_id
        self._check_company_scope(actor, company_id)

        email = str(data.email).lower()
        if await self.repository.get_by_email(email):
            raise ConflictError("User with this email already exists")

        user = await self.repository.create(
            name=data.name.strip(),
            email=email,
            password_hash=hash_password(data.password),
            role=data.role,
            company_id=company_id,
            has_llm_access=data.has_llm_access,
        )
        LOGGER.info(
            f"Created user {user.id}",
            extra={"role": user.role, "company_id": str(company_id) if company_id else None},
        )
        return UserResponse.model_validate(user)

    async def list_company_users(self, actor: CurrentUser, company_id: Optional[UUID] = None) -> List[UserResponse]:
        target = company_id or actor.company_id
        if not target:
            raise ValidationError("User must be associated with a company")
        self._check_company_scope(actor, target)

        users = await self.repository.list_by_company(target)
        return [UserResponse.model_validate(u) for u in users]

    async def update_role(self, user_id: UUID, role: str, actor: CurrentUser) -> UserResponse:
        if role not in Roles.ALL:
            raise ValidationError(f"Unknown role: {role}")

        user = await self.repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        self._check_company_scope(actor, user.company_id)
        if not can_assign_role(actor.role, role):
            raise PermissionDeniedError("Company admins cannot assign system administrator role")

        user = await self.repository.update_instance(user, role=role)
        LOGGER.info(f"User {user_id} role changed to {role}", extra={"actor_id": str(actor.id)})
        return UserResponse.model_validate(user)
