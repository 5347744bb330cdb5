"""
PlaceBook Backend: User Schemas
===============================

What:  Signup/login input rules and the user-facing response shapes.
Note:  No response model has a password field.
"""

from typing import List

from pydantic import BaseModel, EmailStr, Field, field_validator

from placebook.models.user import User

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class SignupRequest(BaseModel):
    """Fields of the multipart POST /api/users/signup form (besides the image)."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)

    # Password is deliberately left untouched
    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    """JSON body of POST /api/users/login."""
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    image: str
    places: List[str] = Field(description="Ids of the places this user owns")

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        """Requires `user.places` to be loaded (selectinload)."""
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            image=user.image,
            places=[str(place.id) for place in user.places],
        )


class UserListResponse(BaseModel):
    users: List[UserResponse]


class AuthResponse(BaseModel):
    """
    Returned by signup (201) and login (200).

    Serialized with camelCase ``userId`` to match the client contract.
    """
    user_id: str = Field(serialization_alias="userId")
    email: str
    token: str
