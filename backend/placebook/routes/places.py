"""
PlaceBook Backend: Place Route Handlers
=======================================

What:  /api/places endpoints (read, create, update, delete).
How:   Thin handlers: dependencies authenticate, validate and store the
       upload; PlaceService does the rest.
Who:   The PlaceBook frontend (place lists, place detail, edit forms).

Dependency order on POST /api/places (matters):
    require_auth → place_create_form → image_upload → session → geocoder
    A missing token or an invalid field is rejected before the image is
    written to disk.
"""

import logging

from fastapi import APIRouter, Depends, Form
from sqlalchemy.ext.asyncio import AsyncSession

from placebook.database import get_db_session
from placebook.middleware.auth import AuthContext, require_auth
from placebook.middleware.upload import StoredImage, image_upload
from placebook.schemas.common import ErrorResponse, MessageResponse, parse_input
from placebook.schemas.place import (
    PlaceCreate,
    PlaceEnvelope,
    PlaceListResponse,
    PlaceUpdate,
)
from placebook.services.geocoding import Geocoder, get_geocoder
from placebook.services.place_service import place_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/places", tags=["Places"])


def place_create_form(
    title: str = Form(default=""),
    description: str = Form(default=""),
    address: str = Form(default=""),
) -> PlaceCreate:
    """Collect the multipart text fields and validate them (422 on failure)."""
    return parse_input(PlaceCreate, title=title, description=description, address=address)


@router.get(
    "/{place_id}",
    response_model=PlaceEnvelope,
    responses={404: {"description": "Place not found", "model": ErrorResponse}},
    summary="Get a single place",
)
async def get_place(
    place_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PlaceEnvelope:
    place = await place_service.get_place_by_id(db, place_id)
    return PlaceEnvelope(place=place)


@router.get(
    "/user/{user_id}",
    response_model=PlaceListResponse,
    responses={404: {"description": "User has no places", "model": ErrorResponse}},
    summary="List the places of a user",
)
async def get_places_by_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PlaceListResponse:
    places = await place_service.get_places_by_user_id(db, user_id)
    return PlaceListResponse(places=places)


@router.post(
    "",
    status_code=201,
    response_model=PlaceEnvelope,
    responses={
        403: {"description": "Missing or invalid token", "model": ErrorResponse},
        422: {"description": "Invalid fields, image or address", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a place",
    description=(
        "Multipart form with title, description, address and one image. "
        "The address is geocoded; the caller becomes the owner."
    ),
)
async def create_place(
    auth: AuthContext = Depends(require_auth),
    data: PlaceCreate = Depends(place_create_form),
    image: StoredImage = Depends(image_upload),
    db: AsyncSession = Depends(get_db_session),
    geocoder: Geocoder = Depends(get_geocoder),
) -> PlaceEnvelope:
    """
    Create a place owned by the caller.

    If geocoding or the database transaction fails, the exception passes
    back through `image_upload`, which deletes the stored image.
    """
    place = await place_service.create_place(
        db=db,
        owner_id=auth.user_id,
        data=data,
        image_path=image.public_path,
        geocoder=geocoder,
    )
    return PlaceEnvelope(place=place)


@router.patch(
    "/{place_id}",
    response_model=PlaceEnvelope,
    responses={
        401: {"description": "Caller is not the owner", "model": ErrorResponse},
        403: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Place not found", "model": ErrorResponse},
        422: {"description": "Invalid fields", "model": ErrorResponse},
    },
    summary="Update title and description of a place",
)
async def update_place(
    place_id: str,
    data: PlaceUpdate,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> PlaceEnvelope:
    place = await place_service.update_place(db, place_id, auth.user_id, data)
    return PlaceEnvelope(place=place)


@router.delete(
    "/{place_id}",
    response_model=MessageResponse,
    responses={
        401: {"description": "Caller is not the owner", "model": ErrorResponse},
        403: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Place not found", "model": ErrorResponse},
    },
    summary="Delete a place",
)
async def delete_place(
    place_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await place_service.delete_place(db, place_id, auth.user_id)
    return MessageResponse(message=message)
