"""
PlaceBook Backend: Authentication Service
=========================================

What:  Password hashing and bearer-token issuing/verification.
How:   bcrypt (cost factor settings.bcrypt_rounds) for passwords, run in a
       worker thread so hashing does not block the event loop; PyJWT HS256
       tokens signed with settings.jwt_secret.
Who:   UserService (signup/login) and the require_auth dependency.

Token claims:
    {"userId": "<uuid>", "email": "a@x.com", "exp": <now + jwt_expires_in>}
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from placebook.config import settings
from placebook.exceptions import AuthenticationError, PlaceBookError, TokenError
from placebook.schemas.user import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


class AuthService:
    """Stateless helper; reads secrets and cost factors from settings."""

    async def hash_password(self, password: str) -> str:
        """Return the bcrypt hash of `password` as text."""
        try:
            hashed = await asyncio.to_thread(
                bcrypt.hashpw,
                password.encode("utf-8"),
                bcrypt.gensalt(rounds=settings.bcrypt_rounds),
            )
        except ValueError as e:
            logger.error("Password hashing failed: %s", str(e))
            raise PlaceBookError(
                message="Could not create user, please try again.",
                context={"error_type": type(e).__name__},
            )
        return hashed.decode("utf-8")

    async def verify_password(self, password: str, hashed: str) -> bool:
        """
        Check `password` against a stored bcrypt hash.

        Passwords longer than 72 bytes can never have been stored (signup
        rejects them), so they simply do not match.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return await asyncio.to_thread(bcrypt.checkpw, encoded, hashed.encode("utf-8"))
        except ValueError as e:
            # Stored value is not a bcrypt hash
            logger.error("Password verification failed: %s", str(e))
            raise PlaceBookError(
                message="Could not log you in, please check your credentials and try again.",
                context={"error_type": type(e).__name__},
            )

    def create_access_token(self, user_id: str, email: str) -> str:
        payload = {
            "userId": user_id,
            "email": email,
            "exp": datetime.now(tz=timezone.utc) + timedelta(seconds=settings.jwt_expires_in),
        }
        try:
            return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)
        except jwt.PyJWTError as e:
            logger.error("JWT encoding error: %s", str(e))
            raise TokenError(context={"error_type": type(e).__name__})

    def decode_access_token(self, token: str) -> str:
        """
        Verify signature and expiry, and return the ``userId`` claim.

        Raises:
            AuthenticationError: expired, malformed, wrongly signed, or
                missing the userId claim
        """
        try:
            payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            raise AuthenticationError(context={"reason": "expired"})
        except jwt.InvalidTokenError:
            logger.info("Rejected invalid token")
            raise AuthenticationError(context={"reason": "invalid"})

        user_id = payload.get("userId")
        if not user_id or not isinstance(user_id, str):
            raise AuthenticationError(context={"reason": "missing_user_id"})
        return user_id


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
