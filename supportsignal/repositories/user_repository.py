"""Repository for user and session data access operations.

This module provides data access for user management and login
sessions, following the repository pattern used across the project.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from supportsignal.database.models import Session, User
from supportsignal.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive).

        Args:
            email: User email address

        Returns:
            User instance or None if not found
        """
        try:
            stmt = select(User).where(User.email == email.strip().lower())
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("retrieving", e) from e

    async def list_by_company(self, company_id: UUID) -> List[User]:
        """Users belonging to a company, ordered by name."""
        try:
            stmt = select(User).where(User.company_id == company_id).order_by(User.name)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e


class SessionRepository(BaseRepository[Session]):
    """Repository for login sessions."""

    model = Session

    async def get_by_token(self, session_token: str) -> Optional[Session]:
        try:
            stmt = select(Session).where(Session.session_token == session_token)
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("retrieving", e) from e

    async def delete_by_token(self, session_token: str) -> bool:
        """Delete a session by token.

        Returns:
            True if a session was removed
        """
        try:
            result = await self.session.execute(
                delete(Session).where(Session.session_token == session_token)
            )
            await self.session.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._fail("deleting", e) from e

    async def delete_expired(self, now: datetime) -> int:
        """Remove sessions whose expiry has passed; returns the number removed."""
        try:
            result = await self.session.execute(delete(Session).where(Session.expires < now))
            await self.session.commit()
            return result.rowcount
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._fail("deleting", e) from e
