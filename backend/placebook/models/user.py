"""
PlaceBook Backend: User SQLAlchemy Model
========================================

What:  ORM model for the `users` table.
Who:   UserService (signup, login, listing) and PlaceService (owner lookups).

Table Design:
    - UUID primary key, generated in Python
    - email: unique, stored lower-cased so lookups are case-insensitive
    - password: bcrypt hash, never serialized by any response schema
    - image: public relative path of the profile image
      (e.g. ``uploads/images/<uuid>.png``)
    - places: owned places, ordered by creation time; the collection and
      ``Place.creator_id`` are the same relation
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from placebook.database import Base

if TYPE_CHECKING:
    from placebook.models.place import Place


class User(Base):
    """
    Represents a registered account.

    Lifecycle:
        1. Created on signup
        2. Read on login and listing
        3. Its places collection changes when a place is added or removed
        4. Never deleted by the API
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the user's password",
    )

    image: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Public relative path of the profile image",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # lazy="raise": callers load the collection explicitly with selectinload()
    places: Mapped[List["Place"]] = relationship(
        back_populates="creator",
        cascade="all, delete-orphan",
        order_by="Place.created_at",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
