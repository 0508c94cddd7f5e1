"""Tests for upload validation and writing."""

import io
import re

import pytest
from fastapi import UploadFile

from hospital_docs.api.exceptions import ValidationError
from hospital_docs.api.services.upload_service import (
    AREA_DOCUMENTS,
    AREA_STORAGE,
    UploadService,
    file_extension,
    make_stored_name,
)


def _upload(data: bytes, filename: str) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename)


class TestNames:

    def test_file_extension(self):
        assert file_extension("Report.PDF") == "pdf"
        assert file_extension("archive.tar.gz") == "gz"
        assert file_extension("README") == ""

    def test_stored_name_format(self):
        name = make_stored_name("file", "leave form.docx")
        assert re.fullmatch(r"file-\d{13}-\d+\.docx", name)

    def test_stored_name_without_extension(self):
        assert re.fullmatch(r"file-\d+-\d+", make_stored_name("file", "README"))

    def test_stored_names_differ(self):
        assert make_stored_name("file", "a.pdf") != make_stored_name("file", "a.pdf")


class TestValidateName:

    def test_allowed(self, uploads):
        assert uploads.validate_name("scan.png") == "png"

    def test_not_allowed(self, uploads):
        with pytest.raises(ValidationError) as exc_info:
            uploads.validate_name("payload.exe")
        assert ".exe" in exc_info.value.message

    def test_missing(self, uploads):
        with pytest.raises(ValidationError) as exc_info:
            uploads.validate_name("")
        assert exc_info.value.message == "No file uploaded"


class TestSave:

    @pytest.mark.asyncio
    async def test_writes_file(self, uploads, settings):
        saved = await uploads.save(_upload(b"%PDF-1.4 hello", "memo.pdf"), AREA_DOCUMENTS)

        assert saved.original_name == "memo.pdf"
        assert saved.file_type == "pdf"
        assert saved.size == len(b"%PDF-1.4 hello")
        assert saved.disk_path.parent == settings.UPLOAD_ROOT / AREA_DOCUMENTS
        assert saved.disk_path.read_bytes() == b"%PDF-1.4 hello"
        assert saved.public_path == f"/uploads/documents/{saved.stored_name}"

    @pytest.mark.asyncio
    async def test_public_path_resolves_to_disk(self, uploads):
        saved = await uploads.save(_upload(b"x", "a.pdf"), AREA_STORAGE)
        assert uploads.resolve_public_path(saved.public_path) == saved.disk_path

    @pytest.mark.asyncio
    async def test_rejected_extension_writes_nothing(self, uploads, settings):
        with pytest.raises(ValidationError):
            await uploads.save(_upload(b"MZ", "tool.exe"), AREA_DOCUMENTS)
        assert not (settings.UPLOAD_ROOT / AREA_DOCUMENTS).exists()

    @pytest.mark.asyncio
    async def test_oversize_upload_removed(self, tmp_path, settings):
        small = UploadService(tmp_path / "up", max_size=10, allowed_extensions=settings.ALLOWED_UPLOAD_EXTENSIONS)

        with pytest.raises(ValidationError) as exc_info:
            await small.save(_upload(b"x" * 200_000, "big.pdf"), AREA_STORAGE)

        assert "maximum size" in exc_info.value.message
        assert list((tmp_path / "up" / AREA_STORAGE).iterdir()) == []

    def test_discard_missing_file_is_quiet(self, tmp_path):
        UploadService.discard(tmp_path / "gone.pdf")
