"""
PlaceBook Backend: Place SQLAlchemy Model
=========================================

What:  ORM model for the `places` table.
Who:   PlaceService for every place operation.

Table Design:
    - lat/lng: resolved from the free-text address at creation time and
      exposed together as ``location: {lat, lng}``
    - image: public relative path of the uploaded image
    - creator_id: exactly one owner; indexed for "places of user X" lookups
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float, ForeignKey, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from placebook.database import Base

if TYPE_CHECKING:
    from placebook.models.user import User


class Place(Base):
    """
    A user-submitted location record.

    Lifecycle:
        1. Created by an authenticated user, who becomes the owner
        2. Title and description may be changed by the owner only
        3. Deleted by the owner only; the stored image is removed afterwards
    """

    __tablename__ = "places"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)

    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)

    image: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Public relative path of the uploaded image",
    )

    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    creator: Mapped["User"] = relationship(
        back_populates="places",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, title='{self.title}', creator_id={self.creator_id})>"
