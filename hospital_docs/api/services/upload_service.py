"""
Upload handling: validation and writing files under the upload root.

Files land in {UPLOAD_ROOT}/{area}/ and are exposed as /uploads/{area}/{name}.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet

import aiofiles
from fastapi import UploadFile

from hospital_docs.api.exceptions import ValidationError

logger = logging.getLogger(__name__)

AREA_DOCUMENTS = "documents"
AREA_CIRCULATION = "circulation"
AREA_STORAGE = "storage"

# Read uploads in chunks so oversized files are caught before being fully buffered
_CHUNK_SIZE = 64 * 1024


@dataclass
class SavedUpload:
    """A file written to disk."""
    stored_name: str
    original_name: str
    file_type: str
    size: int
    disk_path: Path
    public_path: str


def file_extension(filename: str) -> str:
    """Lower-case extension without the dot; empty when there is none."""
    return Path(filename or "").suffix.lower().lstrip(".")


def make_stored_name(field_name: str, original_name: str) -> str:
    """{field}-{millis}-{random}.{ext}"""
    ext = file_extension(original_name)
    stamp = int(time.time() * 1000)
    suffix = secrets.randbelow(10 ** 9)
    name = f"{field_name}-{stamp}-{suffix}"
    return f"{name}.{ext}" if ext else name


class UploadService:

    def __init__(
        self,
        upload_root: Path,
        max_size: int,
        allowed_extensions: FrozenSet[str],
    ):
        self._upload_root = Path(upload_root)
        self._max_size = max_size
        self._allowed_extensions = allowed_extensions

    @property
    def upload_root(self) -> Path:
        return self._upload_root

    def validate_name(self, filename: str) -> str:
        """Return the extension or raise ValidationError when it is not allowed."""
        if not filename:
            raise ValidationError("No file uploaded")
        ext = file_extension(filename)
        if ext not in self._allowed_extensions:
            allowed = ", ".join(sorted(self._allowed_extensions))
            raise ValidationError(f"File type .{ext} not allowed. Allowed types: {allowed}")
        return ext

    async def save(self, upload: UploadFile, area: str, field_name: str = "file") -> SavedUpload:
        """
        Validate and write an upload.

        Raises:
            ValidationError: bad extension or larger than the size limit;
                nothing is left on disk
        """
        ext = self.validate_name(upload.filename)

        target_dir = self._upload_root / area
        target_dir.mkdir(parents=True, exist_ok=True)
        stored_name = make_stored_name(field_name, upload.filename)
        disk_path = target_dir / stored_name

        size = 0
        try:
            async with aiofiles.open(disk_path, "wb") as out:
                while True:
                    chunk = await upload.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self._max_size:
                        raise ValidationError(
                            f"File exceeds maximum size of {self._max_size} bytes"
                        )
                    await out.write(chunk)
        except Exception:
            self.discard(disk_path)
            raise

        logger.info(f"Saved upload {upload.filename!r} as {disk_path} ({size} bytes)")
        return SavedUpload(
            stored_name=stored_name,
            original_name=upload.filename,
            file_type=ext,
            size=size,
            disk_path=disk_path,
            public_path=f"/uploads/{area}/{stored_name}",
        )

    def resolve_public_path(self, public_path: str) -> Path:
        """Map /uploads/{area}/{name} back to a location on disk."""
        relative = public_path
        if relative.startswith("/uploads/"):
            relative = relative[len("/uploads/"):]
        return self._upload_root / relative.lstrip("/")

    @staticmethod
    def discard(disk_path: Path) -> None:
        try:
            disk_path.unlink()
        except FileNotFoundError:
            pass
        else:
            logger.info(f"Removed upload {disk_path}")
