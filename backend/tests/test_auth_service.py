"""
PlaceBook Backend: Auth Service Unit Tests
==========================================

What:  bcrypt hashing/verification and JWT issue/verify in AuthService.
How:   Real bcrypt (cost 4 from conftest) and real PyJWT; no HTTP.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from placebook.config import settings
from placebook.exceptions import AuthenticationError
from placebook.services.auth_service import JWT_ALGORITHM, AuthService


class TestPasswordHashing:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_hash_is_not_the_password(self):
        hashed = await self.service.hash_password("secret1")
        assert hashed != "secret1"
        assert hashed.startswith("$2")

    @pytest.mark.asyncio
    async def test_correct_password_verifies(self):
        hashed = await self.service.hash_password("secret1")
        assert await self.service.verify_password("secret1", hashed) is True

    @pytest.mark.asyncio
    async def test_wrong_password_fails(self):
        hashed = await self.service.hash_password("secret1")
        assert await self.service.verify_password("secret2", hashed) is False

    @pytest.mark.asyncio
    async def test_overlong_password_never_matches(self):
        hashed = await self.service.hash_password("x" * 72)
        assert await self.service.verify_password("x" * 73, hashed) is False


class TestAccessTokens:

    def setup_method(self):
        self.service = AuthService()

    def test_round_trip_returns_user_id(self):
        token = self.service.create_access_token("user-1", "a@x.com")
        assert self.service.decode_access_token(token) == "user-1"

    def test_token_claims(self):
        token = self.service.create_access_token("user-1", "a@x.com")
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])

        assert payload["userId"] == "user-1"
        assert payload["email"] == "a@x.com"
        expires = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        remaining = expires - datetime.now(tz=timezone.utc)
        assert timedelta(seconds=settings.jwt_expires_in - 60) < remaining
        assert remaining <= timedelta(seconds=settings.jwt_expires_in)

    def test_expired_token_rejected(self):
        token = jwt.encode(
            {
                "userId": "user-1",
                "email": "a@x.com",
                "exp": datetime.now(tz=timezone.utc) - timedelta(seconds=5),
            },
            settings.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(AuthenticationError) as exc_info:
            self.service.decode_access_token(token)
        assert exc_info.value.context["reason"] == "expired"

    def test_wrong_signature_rejected(self):
        token = jwt.encode(
            {"userId": "user-1", "exp": datetime.now(tz=timezone.utc) + timedelta(hours=1)},
            "some-other-secret-0123456789abcdefghij",
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(AuthenticationError):
            self.service.decode_access_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(AuthenticationError, match="Authentication failed."):
            self.service.decode_access_token("not-a-jwt")

    def test_missing_user_id_rejected(self):
        token = jwt.encode(
            {"email": "a@x.com", "exp": datetime.now(tz=timezone.utc) + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(AuthenticationError) as exc_info:
            self.service.decode_access_token(token)
        assert exc_info.value.context["reason"] == "missing_user_id"
