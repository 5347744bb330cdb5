"""
PlaceBook Backend: Place Schemas
================================

What:  Input rules for creating/updating places and the JSON shape of a
       place in responses.
Who:   Place routes (input) and PlaceService (output).

Response shape:
    {
        "id": "5b1f...",
        "title": "Empire State Building",
        "description": "One of the most famous sky scrapers in the world!",
        "address": "20 W 34th St, New York, NY 10001",
        "location": {"lat": 40.7484405, "lng": -73.9878584},
        "image": "uploads/images/9c6d....png",
        "creator": "0f3a..."
    }
"""

from typing import List

from pydantic import BaseModel, Field

from placebook.models.place import Place


class Coordinates(BaseModel):
    """Latitude/longitude pair resolved from an address."""
    lat: float
    lng: float


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PlaceCreate(BaseModel):
    """Fields of the multipart POST /api/places form (besides the image)."""
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=5)
    address: str = Field(min_length=1, max_length=500)

    model_config = {"str_strip_whitespace": True}


class PlaceUpdate(BaseModel):
    """JSON body of PATCH /api/places/{placeId}."""
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=5)

    model_config = {"str_strip_whitespace": True}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PlaceResponse(BaseModel):
    id: str
    title: str
    description: str
    address: str
    location: Coordinates
    image: str
    creator: str

    @classmethod
    def from_model(cls, place: Place) -> "PlaceResponse":
        """Flatten an ORM Place into the API shape (ids as strings)."""
        return cls(
            id=str(place.id),
            title=place.title,
            description=place.description,
            address=place.address,
            location=Coordinates(lat=place.lat, lng=place.lng),
            image=place.image,
            creator=str(place.creator_id),
        )


class PlaceEnvelope(BaseModel):
    """Wrapper returned by single-place endpoints: ``{"place": {...}}``."""
    place: PlaceResponse


class PlaceListResponse(BaseModel):
    """Wrapper returned by GET /api/places/user/{userId}."""
    places: List[PlaceResponse]
