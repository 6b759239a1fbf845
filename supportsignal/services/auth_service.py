"""Authentication service: login, logout and session resolution."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.config import settings
from supportsignal.core.exceptions import InvalidCredentialsError, SessionExpiredError
from supportsignal.core.jwt import token_manager
from supportsignal.core.security import generate_session_token, verify_password
from supportsignal.database.models import User
from supportsignal.repositories.user_repository import SessionRepository, UserRepository
from supportsignal.schemas.auth import CurrentUser, LoginResponse, TokenClaims
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def to_current_user(user: User, session_token: Optional[str] = None) -> CurrentUser:
    return CurrentUser(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        company_id=user.company_id,
        has_llm_access=user.has_llm_access,
        session_token=session_token,
    )


class AuthService:
    """Service for password login and server-side sessions."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.user_repository = UserRepository(db_session)
        self.session_repository = SessionRepository(db_session)

    def session_duration(self, remember_me: bool) -> timedelta:
        if remember_me:
            return timedelta(days=settings.auth.remember_me_days)
        return timedelta(hours=settings.auth.session_hours)

    async def login(self, email: str, password: str, remember_me: bool = False) -> LoginResponse:
        """Verify credentials and open a session.

        Args:
            email: Account email (case-insensitive)
            password: Plain-text password
            remember_me: Extend the session lifetime

        Returns:
            Signed access token, expiry and the logged-in user

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        user = await self.user_repository.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            LOGGER.warning("Failed login attempt", extra={"email": email.lower()})
            raise InvalidCredentialsError("Invalid email or password")

        expires = datetime.now(timezone.utc) + self.session_duration(remember_me)
        session_token = generate_session_token()
        await self.session_repository.create(
            user_id=user.id,
            session_token=session_token,
            expires=expires,
            remember_me=remember_me,
        )

        access_token = token_manager.create_token(user.id, session_token, user.role, expires)
        LOGGER.info(
            f"User {user.id} logged in",
            extra={"user_id": str(user.id), "remember_me": remember_me},
        )
        return LoginResponse(
            access_token=access_token,
            expires=expires,
            user=to_current_user(user, session_token),
        )

    async def logout(self, session_token: str) -> bool:
        deleted = await self.session_repository.delete_by_token(session_token)
        LOGGER.info("Session invalidated" if deleted else "Logout for unknown session")
        return deleted

    async def resolve_session(self, claims: TokenClaims) -> CurrentUser:
        """Load the user behind a verified token.

        Raises:
            SessionExpiredError: If the session is missing, expired or its user is gone
        """
        session = await self.session_repository.get_by_token(claims.sid)
        if not session:
            raise SessionExpiredError("Session not found")
        if _as_utc(session.expires) <= datetime.now(timezone.utc):
            raise SessionExpiredError("Session expired")

        user = await self.user_repository.get_by_id(session.user_id)
        if not user:
            raise SessionExpiredError("User not found")

        return to_current_user(user, session.session_token)

    async def cleanup_expired_sessions(self) -> int:
        removed = await self.session_repository.delete_expired(datetime.now(timezone.utc))
        LOGGER.info(f"Removed {removed} expired sessions")
        return removed
