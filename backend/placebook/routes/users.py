"""
PlaceBook Backend: User Route Handlers
======================================

What:  /api/users endpoints: list users, signup, login.
How:   Signup is a multipart form (profile image included); login takes a
       JSON body. Both are rate limited per client IP by RateLimitMiddleware.
"""

import logging

from fastapi import APIRouter, Depends, Form
from sqlalchemy.ext.asyncio import AsyncSession

from placebook.database import get_db_session
from placebook.middleware.upload import StoredImage, image_upload
from placebook.schemas.common import ErrorResponse, parse_input
from placebook.schemas.user import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserListResponse,
)
from placebook.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def signup_form(
    name: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
) -> SignupRequest:
    return parse_input(SignupRequest, name=name, email=email, password=password)


@router.get("", response_model=UserListResponse, summary="List all users")
async def get_users(db: AsyncSession = Depends(get_db_session)) -> UserListResponse:
    users = await user_service.get_users(db)
    return UserListResponse(users=users)


@router.post(
    "/signup",
    status_code=201,
    response_model=AuthResponse,
    responses={
        422: {"description": "Invalid fields, image or email taken", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def signup(
    data: SignupRequest = Depends(signup_form),
    image: StoredImage = Depends(image_upload),
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await user_service.signup(db, data, image.public_path)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        403: {"description": "Invalid credentials", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Log in and receive a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await user_service.login(db, body.email, body.password)
