"""
PlaceBook Backend: File Storage Service
=======================================

What:  Validates, stores and removes uploaded images.
How:   Checks the declared MIME type, the size ceiling and the file header,
       then writes the bytes under the upload directory as ``<uuid4>.<ext>``.
Who:   The upload dependency (middleware/upload.py) and PlaceService, which
       removes a place's image after the place is deleted.

Paths:
    Every stored image has two names:
    - absolute path on disk:  /srv/placebook/uploads/images/9c6d....png
    - public path (stored in the database and served by StaticFiles):
      uploads/images/9c6d....png
    The file name is generated, so no user input ever reaches the file system.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os

from placebook.config import settings
from placebook.exceptions import FileStorageError, InvalidInputError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# MIME type → extension of the stored file
ALLOWED_MIME_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpg",
}

# Extension → leading bytes every file of that type starts with
FILE_SIGNATURES = {
    "png": b"\x89PNG\r\n\x1a\n",
    "jpeg": b"\xff\xd8\xff",
    "jpg": b"\xff\xd8\xff",
}

# URL prefix the upload directory is mounted under (see main.py)
PUBLIC_PREFIX = "uploads/images"


class FileService:
    """
    Manages the upload lifecycle of images.

    Lifecycle of an uploaded file:
        1. validate_mime_type(): declared content type must be png/jpeg/jpg
        2. validate_size(): at most settings.max_upload_size bytes, not empty
        3. validate_signature(): header bytes must match that type
        4. store_file(): written to <upload_dir>/<uuid>.<ext>
        5. cleanup_file(): removes it when the request fails later on, or
           when the owning place is deleted
    """

    def __init__(self, upload_dir: Optional[str] = None):
        """
        Args:
            upload_dir: Override the default directory (used in tests).
                        If None, uses settings.upload_dir.
        """
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    def validate_mime_type(self, content_type: Optional[str]) -> str:
        """
        Map the declared MIME type to a file extension.

        Returns: Extension without the dot (``png``, ``jpeg`` or ``jpg``).
        Raises:  InvalidInputError for any other type.
        """
        mime_type = (content_type or "").split(";")[0].strip().lower()
        extension = ALLOWED_MIME_TYPES.get(mime_type)
        if extension is None:
            raise InvalidInputError(
                message="Invalid mime type! Only png, jpeg and jpg images are accepted.",
                field="image",
                context={"mime_type": mime_type, "allowed": list(ALLOWED_MIME_TYPES)},
            )
        return extension

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate the upload size against settings.max_upload_size.

        Args:
            content_length: Size reported by the multipart parser (may be None)
            actual_size: Byte count actually read

        Raises:
            InvalidInputError when the file is empty or too large
        """
        limit = settings.max_upload_size

        if actual_size == 0:
            raise InvalidInputError(
                message="The uploaded image is empty.",
                field="image",
            )

        if (content_length and content_length > limit) or actual_size > limit:
            raise InvalidInputError(
                message=f"The uploaded image is too large. The limit is {limit} bytes.",
                field="image",
                context={
                    "max_size": limit,
                    "reported_size": content_length,
                    "actual_size": actual_size,
                },
            )

    def validate_signature(self, content: bytes, extension: str) -> None:
        """
        Check the file header against the declared type.

        What:  A PNG must start with the PNG signature, a JPEG with FF D8 FF.
        Why:   The multipart content type is chosen by the client; the bytes
               are what ends up being served.

        Raises:
            InvalidInputError when the header does not match
        """
        if not content.startswith(FILE_SIGNATURES[extension]):
            raise InvalidInputError(
                message="Invalid mime type! Only png, jpeg and jpg images are accepted.",
                field="image",
                context={"declared": extension, "header": content[:8].hex()},
            )

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Return (absolute_path, public_path) for a fresh ``<uuid>.<ext>`` name."""
        unique_name = f"{uuid.uuid4()}.{extension}"
        return self.upload_dir / unique_name, f"{PUBLIC_PREFIX}/{unique_name}"

    def resolve_public_path(self, public_path: str) -> Path:
        """
        Map a stored public path back to its location on disk.

        Only the file name is used, so a tampered value cannot point
        outside the upload directory.
        """
        return self.upload_dir / Path(public_path).name

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk.

        Returns: Tuple of (absolute_path, public_path).
        Raises:  FileStorageError if the write fails.
        """
        absolute_path, public_path = self._generate_storage_path(extension)

        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", public_path, len(content))
        return str(absolute_path), public_path

    async def cleanup_file(self, file_path: str | Path) -> None:
        """
        Remove a file from storage (best effort).

        When:  A request fails after its image was stored, or the place that
               referenced the image has been deleted.

        Missing files are ignored; other OS errors are logged, never raised.
        """
        path = Path(file_path)
        try:
            await aiofiles.os.remove(path)
            logger.info("Cleaned up file: %s", path.name)
        except FileNotFoundError:
            logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", path, str(e))

    async def validate_and_store(
        self,
        content_type: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Complete validation and storage pipeline.

        Validation order (cheapest first):
            1. MIME type, from the multipart headers
            2. Size, from the byte count
            3. File header matches the MIME type
            4. Store file

        Returns: Tuple of (absolute_path, public_path_for_db).
        """
        extension = self.validate_mime_type(content_type)
        self.validate_size(content_length, len(content))
        self.validate_signature(content, extension)
        return await self.store_file(content, extension)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
