"""
PlaceBook Backend: User Service
===============================

What:  Listing users, signing up and logging in.
How:   Passwords go through AuthService (bcrypt); successful signup and
       login both end with a freshly issued bearer token.
Who:   User routes.

Signup Flow:
    email taken? → 422 → hash password → insert user (commit) → issue token
    A concurrent signup with the same email hits the unique index; the
    IntegrityError is reported as the same 422.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from placebook.exceptions import AuthenticationError, DatabaseError, InvalidInputError
from placebook.models.user import User
from placebook.schemas.user import AuthResponse, SignupRequest, UserResponse
from placebook.services.auth_service import auth_service

logger = logging.getLogger(__name__)

USER_EXISTS = "User exists already, please login instead."
INVALID_CREDENTIALS = "Invalid credentials, could not log you in."


class UserService:
    """Stateless; each method receives the request's AsyncSession."""

    async def get_users(self, db: AsyncSession) -> List[UserResponse]:
        """All users with the ids of their places, oldest account first."""
        try:
            result = await db.execute(
                select(User).options(selectinload(User.places)).order_by(User.created_at)
            )
            users = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Fetching users failed: %s", str(e))
            raise DatabaseError(
                message="Fetching users failed, please try again later.",
                context={"error_type": type(e).__name__},
            )

        return [UserResponse.from_model(user) for user in users]

    async def signup(
        self,
        db: AsyncSession,
        data: SignupRequest,
        image_path: str,
    ) -> AuthResponse:
        """
        Create an account and log it in.

        Args:
            db:          Request session
            data:        Validated name/email/password (email lower-cased)
            image_path:  Public path of the stored profile image

        Raises:
            InvalidInputError: email already registered (→ 422)
            DatabaseError:     insert failed (→ 500)
        """
        if await self._find_by_email(db, data.email) is not None:
            logger.info("Signup rejected, email already registered")
            raise InvalidInputError(message=USER_EXISTS, field="email")

        user = User(
            name=data.name,
            email=data.email,
            password=await auth_service.hash_password(data.password),
            image=image_path,
        )

        try:
            db.add(user)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info("Signup lost a race on a duplicate email")
            raise InvalidInputError(message=USER_EXISTS, field="email")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Signing up failed: %s", str(e))
            raise DatabaseError(
                message="Signing up failed, please try again later.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User %s signed up", user.id)
        token = auth_service.create_access_token(str(user.id), user.email)
        return AuthResponse(user_id=str(user.id), email=user.email, token=token)

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResponse:
        """
        Check credentials and issue a token.

        Unknown email and wrong password raise the same error so callers
        cannot probe which accounts exist.
        """
        user = await self._find_by_email(db, email.strip().lower())

        if user is None or not await auth_service.verify_password(password, user.password):
            logger.info("Login rejected")
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        logger.info("User %s logged in", user.id)
        token = auth_service.create_access_token(str(user.id), user.email)
        return AuthResponse(user_id=str(user.id), email=user.email, token=token)

    async def _find_by_email(self, db: AsyncSession, email: str):
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Looking up user by email failed: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
