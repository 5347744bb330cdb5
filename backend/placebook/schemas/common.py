"""
PlaceBook Backend: Shared Schemas and Input Parsing
===================================================

What:  Response models shared by every router, plus `parse_input()`, the
       single place where Pydantic validation errors become a 422.
"""

from typing import Any, Type, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from placebook.exceptions import InvalidInputError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(model: Type[ModelT], **data: Any) -> ModelT:
    """
    Validate raw request fields against `model`.

    Raises:
        InvalidInputError: on the first failing rule set; the offending
            field names are kept in the error context for the log.
    """
    try:
        return model(**data)
    except PydanticValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise InvalidInputError(context={"fields": fields})


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. after deleting a place."""
    message: str = Field(description="Human-readable result")


class ErrorResponse(BaseModel):
    """
    Error body returned for every failed request.

    Example:
        {"message": "Could not find a place for the provided id."}
    """
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    geocoding: str = Field(description="Geocoder configuration: configured, missing_api_key")
    uptime_seconds: float = Field(description="Seconds since service started")
