"""Tests for password hashing and signed access tokens."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from supportsignal.core.jwt import TokenManager
from supportsignal.core.security import generate_session_token, hash_password, verify_password


class TestPasswordHashing:
    """Tests for pbkdf2 password hashing."""

    def test_hash_round_trip(self):
        stored = hash_password("correct horse")

        assert stored.startswith("pbkdf2_sha256$")
        assert verify_password("correct horse", stored)
        assert not verify_password("wrong horse", stored)

    def test_hashes_are_salted(self):
        assert hash_password("same") != hash_password("same")

    @pytest.mark.parametrize("stored", ["", "plain-text", "md5$1$salt$abc", None])
    def test_malformed_hash_never_matches(self, stored):
        assert not verify_password("anything", stored)

    def test_session_tokens_are_unique(self):
        assert generate_session_token() != generate_session_token()


class TestTokenManager:
    """Tests for HS256 token issue and verification."""

    def _expires(self, **delta) -> datetime:
        return datetime.now(timezone.utc) + timedelta(**delta)

    def test_create_and_verify(self):
        manager = TokenManager("secret")
        token = manager.create_token("user-1", "sess-1", "team_lead", self._expires(hours=1))

        claims = manager.verify_token(token)

        assert claims.sub == "user-1"
        assert claims.sid == "sess-1"
        assert claims.role == "team_lead"
        assert claims.iss == "supportsignal"

    def test_expired_token_rejected(self):
        manager = TokenManager("secret")
        token = manager.create_token("user-1", "sess-1", "team_lead", self._expires(seconds=-10))

        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            manager.verify_token(token)

    def test_wrong_secret_rejected(self):
        token = TokenManager("secret").create_token("u", "s", "r", self._expires(hours=1))

        with pytest.raises(jwt.InvalidTokenError):
            TokenManager("other-secret").verify_token(token)

    def test_wrong_issuer_rejected(self):
        token = TokenManager("secret", issuer="elsewhere").create_token("u", "s", "r", self._expires(hours=1))

        with pytest.raises(jwt.InvalidTokenError, match="issuer"):
            TokenManager("secret").verify_token(token)
