"""Signed access tokens wrapping a server-side session.

The token only proves which session the caller holds; whether that session
is still valid is always checked against the ``sessions`` table.
"""

from datetime import datetime, timezone

import jwt

from supportsignal.core.config import settings
from supportsignal.schemas.auth import TokenClaims
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


class TokenManager:
    """Issue and verify HS256 access tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", issuer: str = "supportsignal"):
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer

    def create_token(self, user_id: str, session_token: str, role: str, expires: datetime) -> str:
        """Create a signed token for a session.

        Args:
            user_id: Subject of the token
            session_token: Opaque token of the backing session row
            role: Role at login time
            expires: Session expiry; becomes the ``exp`` claim

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "sid": session_token,
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
            "iss": self.issuer,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> TokenClaims:
        """Verify signature, expiry and issuer of a token.

        Raises:
            jwt.InvalidTokenError: If the token is invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["sub", "sid", "exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError as e:
            LOGGER.warning(f"Token expired: {e}")
            raise jwt.InvalidTokenError("Token has expired") from e
        except jwt.InvalidIssuerError as e:
            LOGGER.warning(f"Invalid issuer: {e}")
            raise jwt.InvalidTokenError("Invalid token issuer") from e

        return TokenClaims(**payload)


token_manager = TokenManager(
    secret=settings.auth.jwt_secret,
    algorithm=settings.auth.jwt_algorithm,
    issuer=settings.auth.jwt_issuer,
)
