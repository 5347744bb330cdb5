"""
PlaceBook Backend: File Service Unit Tests
==========================================

What:  FileService validation (MIME type, size), storage and cleanup.
How:   Each test gets a FileService rooted in pytest's tmp_path.

Test Strategy:
    ✅ Accepted MIME types map to png / jpeg / jpg
    ✅ Other MIME types, empty and oversized files are rejected (422)
    ✅ File headers must match the declared type
    ✅ Stored files get a UUID name under the public prefix
    ✅ Cleanup removes files and tolerates missing ones
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from placebook.exceptions import InvalidInputError
from placebook.services.file_service import PUBLIC_PREFIX, FileService


class TestFileValidation:
    """Tests for upload validation in FileService."""

    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.service = FileService(upload_dir=str(tmp_path / "images"))

    # ── MIME Type Validation ──────────────────────────────────────────────

    def test_png_accepted(self):
        assert self.service.validate_mime_type("image/png") == "png"

    def test_jpeg_and_jpg_accepted(self):
        assert self.service.validate_mime_type("image/jpeg") == "jpeg"
        assert self.service.validate_mime_type("image/jpg") == "jpg"

    def test_mime_type_parameters_and_case_ignored(self):
        assert self.service.validate_mime_type("Image/PNG; charset=binary") == "png"

    @pytest.mark.parametrize("mime", ["image/gif", "application/pdf", "text/plain", "", None])
    def test_other_mime_types_rejected(self, mime):
        with pytest.raises(InvalidInputError, match="Invalid mime type"):
            self.service.validate_mime_type(mime)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        # Should not raise
        self.service.validate_size(1000, 1000)

    def test_size_at_limit(self):
        with patch("placebook.services.file_service.settings") as mock_settings:
            mock_settings.max_upload_size = 500_000
            self.service.validate_size(500_000, 500_000)

    def test_size_over_limit(self):
        with patch("placebook.services.file_service.settings") as mock_settings:
            mock_settings.max_upload_size = 500_000
            with pytest.raises(InvalidInputError, match="too large"):
                self.service.validate_size(None, 500_001)

    def test_reported_size_over_limit(self):
        """The multipart size is trusted even if fewer bytes were read."""
        with patch("placebook.services.file_service.settings") as mock_settings:
            mock_settings.max_upload_size = 500_000
            with pytest.raises(InvalidInputError, match="too large"):
                self.service.validate_size(600_000, 10)

    def test_empty_file_rejected(self):
        with pytest.raises(InvalidInputError, match="empty"):
            self.service.validate_size(0, 0)

    # ── File Header Validation ────────────────────────────────────────────

    def test_png_header_matches(self, png_bytes):
        # Should not raise
        self.service.validate_signature(png_bytes, "png")

    @pytest.mark.parametrize("extension", ["jpeg", "jpg"])
    def test_jpeg_header_matches(self, extension):
        self.service.validate_signature(b"\xff\xd8\xff\xe0" + b"\x00" * 16, extension)

    def test_text_declared_as_png_rejected(self):
        with pytest.raises(InvalidInputError, match="Invalid mime type"):
            self.service.validate_signature(b"<script>alert(1)</script>", "png")

    def test_png_declared_as_jpeg_rejected(self, png_bytes):
        with pytest.raises(InvalidInputError):
            self.service.validate_signature(png_bytes, "jpeg")


class TestFileStorage:
    """Tests for writing and removing stored images."""

    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.upload_dir = tmp_path / "images"
        self.service = FileService(upload_dir=str(self.upload_dir))

    @pytest.mark.asyncio
    async def test_validate_and_store_writes_file(self, png_bytes):
        abs_path, public_path = await self.service.validate_and_store(
            content_type="image/png",
            content=png_bytes,
            content_length=len(png_bytes),
        )

        assert Path(abs_path).read_bytes() == png_bytes
        assert Path(abs_path).parent == self.upload_dir.resolve()
        assert public_path.startswith(f"{PUBLIC_PREFIX}/")
        assert public_path.endswith(".png")

    @pytest.mark.asyncio
    async def test_stored_names_are_unique(self, png_bytes):
        _, first = await self.service.validate_and_store("image/png", png_bytes)
        _, second = await self.service.validate_and_store("image/png", png_bytes)
        assert first != second

    @pytest.mark.asyncio
    async def test_invalid_upload_writes_nothing(self):
        with pytest.raises(InvalidInputError):
            await self.service.validate_and_store("image/gif", b"GIF89a")
        assert list(self.upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_disguised_upload_writes_nothing(self):
        with pytest.raises(InvalidInputError):
            await self.service.validate_and_store("image/png", b"%PDF-1.7 not an image")
        assert list(self.upload_dir.iterdir()) == []

    def test_resolve_public_path_stays_in_upload_dir(self):
        resolved = self.service.resolve_public_path("uploads/images/../../etc/passwd")
        assert resolved == self.service.upload_dir / "passwd"

    # ── Cleanup ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_cleanup_file_removes_file(self):
        test_file = self.upload_dir / "test.png"
        test_file.write_bytes(b"test content")

        await self.service.cleanup_file(str(test_file))
        assert not test_file.exists()

    @pytest.mark.asyncio
    async def test_cleanup_file_nonexistent(self):
        # Should not raise
        await self.service.cleanup_file(self.upload_dir / "nonexistent.png")
