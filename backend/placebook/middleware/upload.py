"""
PlaceBook Backend: Image Upload Dependency
==========================================

What:  Accepts the single ``image`` multipart field, validates and stores it.
How:   Yield-dependency around FileService.validate_and_store(). The stored
       image is handed to the route as a `StoredImage`; if anything later in
       the request raises, the file is deleted again before the error
       response goes out.
Who:   POST /api/places and POST /api/users/signup.

Routes declare their form-field validation dependency BEFORE this one, so
invalid fields are rejected before a single byte is written to disk.
"""

import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from fastapi import File, UploadFile

from placebook.exceptions import InvalidInputError
from placebook.services.file_service import file_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredImage:
    absolute_path: str
    public_path: str


async def image_upload(
    image: Optional[UploadFile] = File(
        default=None,
        description="PNG or JPEG image, at most 500 kB",
    ),
) -> AsyncGenerator[StoredImage, None]:
    if image is None:
        raise InvalidInputError(message="An image is required.", field="image")

    try:
        content = await image.read()
        absolute_path, public_path = await file_service.validate_and_store(
            content_type=image.content_type,
            content=content,
            content_length=image.size,
        )
    finally:
        await image.close()

    try:
        yield StoredImage(absolute_path=absolute_path, public_path=public_path)
    except Exception:
        # The request failed after the file was stored
        logger.info("Request failed, removing uploaded image %s", public_path)
        await file_service.cleanup_file(absolute_path)
        raise
