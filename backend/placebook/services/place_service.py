"""
PlaceBook Backend: Place Service
================================

What:  Business logic for reading, creating, updating and deleting places.
How:   Every method receives the request's AsyncSession; writes that touch
       both a place and its owner run in one transaction (one commit, one
       rollback on any SQLAlchemy error).
Who:   Place routes.

Create Flow (POST /api/places):
    ┌──────────┐   ┌──────────┐   ┌────────────┐   ┌──────────────────────┐
    │ Validate │──▶│ Geocode  │──▶│ Load owner │──▶│ insert place +       │
    │ (route)  │   │ address  │   │ + places   │   │ append to owner      │
    └──────────┘   └──────────┘   └────────────┘   │ (single transaction) │
                                                   └──────────────────────┘
    On failure at the transaction step both writes are rolled back and the
    request ends with a 500; the upload dependency removes the image.

Delete Flow (DELETE /api/places/{placeId}):
    load place + owner + owner's places → ownership check →
    remove from owner's collection + delete place (single transaction) →
    delete image file (best effort)
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from placebook.exceptions import DatabaseError, NotAuthorizedError, NotFoundError
from placebook.models.place import Place
from placebook.models.user import User
from placebook.schemas.place import PlaceCreate, PlaceResponse, PlaceUpdate
from placebook.services.file_service import file_service
from placebook.services.geocoding import Geocoder

logger = logging.getLogger(__name__)

PLACE_NOT_FOUND = "Could not find a place for the provided id."


def parse_id(value: str) -> Optional[uuid.UUID]:
    """Return `value` as a UUID, or None when it is not one."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class PlaceService:
    """
    Stateless; the session, the caller's id and the geocoder are passed in.

    Error Handling Strategy:
        Missing rows become NotFoundError, ownership violations become
        NotAuthorizedError, and SQLAlchemy errors are wrapped in
        DatabaseError with a generic message (the SQLAlchemy error type is
        kept in the context for the log).
    """

    # ══════════════════════════════════════════════════════════════════════
    # Reads
    # ══════════════════════════════════════════════════════════════════════

    async def get_place_by_id(self, db: AsyncSession, place_id: str) -> PlaceResponse:
        place = await self._get_place(db, place_id)
        return PlaceResponse.from_model(place)

    async def get_places_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> List[PlaceResponse]:
        """
        Places owned by `user_id`, oldest first.

        Raises:
            NotFoundError: unknown user, or a user without places (→ 404)
        """
        user = await self._get_user(db, user_id)

        if user is None or not user.places:
            raise NotFoundError(
                message="Could not find places for the provided user id.",
                resource="user_places",
                resource_id=user_id,
            )

        return [PlaceResponse.from_model(place) for place in user.places]

    # ══════════════════════════════════════════════════════════════════════
    # Writes
    # ══════════════════════════════════════════════════════════════════════

    async def create_place(
        self,
        db: AsyncSession,
        owner_id: str,
        data: PlaceCreate,
        image_path: str,
        geocoder: Geocoder,
    ) -> PlaceResponse:
        """
        Geocode the address and create a place owned by `owner_id`.

        Args:
            db:          Request session
            owner_id:    Authenticated caller (becomes the owner)
            data:        Validated title/description/address
            image_path:  Public path of the already stored image
            geocoder:    Address lookup

        Raises:
            GeocodingError:  address could not be resolved (→ 422)
            NotFoundError:   the token's user no longer exists (→ 404)
            DatabaseError:   transaction failed, nothing persisted (→ 500)
        """
        # Before any database work: an unresolvable address is a 422
        coordinates = await geocoder.get_coordinates(data.address)

        owner = await self._get_user(db, owner_id)
        if owner is None:
            raise NotFoundError(
                message="Could not find user for provided id.",
                resource="user",
                resource_id=owner_id,
            )

        place = Place(
            title=data.title,
            description=data.description,
            address=data.address,
            lat=coordinates.lat,
            lng=coordinates.lng,
            image=image_path,
            creator_id=owner.id,
        )

        try:
            await self._insert_place(db, place)
            await self._attach_to_owner(db, owner, place)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Creating place failed, rolled back: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Creating place failed, please try again.",
                context={"error_type": type(e).__name__, "owner_id": owner_id},
            )

        logger.info("Place %s created by user %s", place.id, owner.id)
        return PlaceResponse.from_model(place)

    async def update_place(
        self,
        db: AsyncSession,
        place_id: str,
        user_id: str,
        data: PlaceUpdate,
    ) -> PlaceResponse:
        """
        Change title and description. Only the owner may do this.

        Raises:
            NotFoundError (404), NotAuthorizedError (401), DatabaseError (500)
        """
        place = await self._get_place(db, place_id)

        if place.creator_id != parse_id(user_id):
            logger.warning("User %s tried to edit place %s", user_id, place.id)
            raise NotAuthorizedError(message="You are not allowed to edit this place.")

        place.title = data.title
        place.description = data.description

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Updating place %s failed: %s", place.id, str(e))
            raise DatabaseError(
                message="Something went wrong, could not update place.",
                context={"error_type": type(e).__name__, "place_id": place_id},
            )

        logger.info("Place %s updated", place.id)
        return PlaceResponse.from_model(place)

    async def delete_place(self, db: AsyncSession, place_id: str, user_id: str) -> str:
        """
        Delete a place owned by `user_id`, then its image file.

        Returns: Confirmation message.
        Raises:  NotFoundError (404), NotAuthorizedError (401), DatabaseError (500)
        """
        pid = parse_id(place_id)
        place = None
        if pid is not None:
            try:
                result = await db.execute(
                    select(Place)
                    .where(Place.id == pid)
                    .options(selectinload(Place.creator).selectinload(User.places))
                )
                place = result.scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.error("Database error loading place %s: %s", place_id, str(e))
                raise DatabaseError(
                    message="Something went wrong, could not delete place.",
                    context={"error_type": type(e).__name__, "place_id": place_id},
                )

        if place is None:
            raise NotFoundError(message=PLACE_NOT_FOUND, resource="place", resource_id=place_id)

        if place.creator_id != parse_id(user_id):
            logger.warning("User %s tried to delete place %s", user_id, place.id)
            raise NotAuthorizedError(message="You are not allowed to delete this place.")

        image_path = place.image

        try:
            place.creator.places.remove(place)
            await db.delete(place)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Deleting place %s failed, rolled back: %s", place.id, str(e))
            raise DatabaseError(
                message="Something went wrong, could not delete place.",
                context={"error_type": type(e).__name__, "place_id": place_id},
            )

        logger.info("Place %s deleted", pid)

        # The row is gone; a leftover file is only logged
        await file_service.cleanup_file(file_service.resolve_public_path(image_path))

        return "Deleted place."

    # ══════════════════════════════════════════════════════════════════════
    # Helpers
    # ══════════════════════════════════════════════════════════════════════

    async def _get_place(self, db: AsyncSession, place_id: str) -> Place:
        pid = parse_id(place_id)
        if pid is None:
            raise NotFoundError(message=PLACE_NOT_FOUND, resource="place", resource_id=place_id)

        try:
            result = await db.execute(select(Place).where(Place.id == pid))
            place = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching place %s: %s", place_id, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__, "place_id": place_id})

        if place is None:
            raise NotFoundError(message=PLACE_NOT_FOUND, resource="place", resource_id=place_id)
        return place

    async def _get_user(self, db: AsyncSession, user_id: str) -> Optional[User]:
        """Load a user together with its places, or None."""
        uid = parse_id(user_id)
        if uid is None:
            return None

        try:
            result = await db.execute(
                select(User).where(User.id == uid).options(selectinload(User.places))
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__, "user_id": user_id})

    async def _insert_place(self, db: AsyncSession, place: Place) -> None:
        db.add(place)
        await db.flush()

    async def _attach_to_owner(self, db: AsyncSession, owner: User, place: Place) -> None:
        owner.places.append(place)
        await db.flush()


# ── Singleton Instance ────────────────────────────────────────────────────
place_service = PlaceService()
