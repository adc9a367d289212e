"""
File storage abstraction.

Uploaded lesson plans and generated PDFs live under one storage root,
addressed by keys:
    original/<name>-<hash>.<ext>                    uploaded files
    standardized/<document-id>-standardized.pdf     generated PDFs

Hiding the filesystem behind keys means an S3 backend is a config change,
not a code rewrite.

Usage:
    storage = get_storage_service()
    size = await storage.save_file(file, "original/plano-1a2b3c4d.pdf")
    path = storage.get_file_path("original/plano-1a2b3c4d.pdf")
    await storage.delete_file("original/plano-1a2b3c4d.pdf")
"""

import os
import secrets
import tempfile
from pathlib import Path
from typing import Optional, Union

from fastapi import UploadFile

from lessonplans.config import settings
from lessonplans.errors import ValidationError

ORIGINAL_PREFIX = "original"
STANDARDIZED_PREFIX = "standardized"


def original_key(filename: str) -> str:
    """Storage key for an upload: original name plus a random suffix."""
    path = Path(filename or "document")
    return f"{ORIGINAL_PREFIX}/{path.stem}-{secrets.token_hex(8)}{path.suffix.lower()}"


def standardized_key(document_id) -> str:
    return f"{STANDARDIZED_PREFIX}/{document_id}-standardized.pdf"


def write_bytes_atomic(path: Union[str, Path], data: bytes) -> int:
    """Write data so that `path` either holds all of it or is untouched.

    Writes to a temp file in the same directory, then renames over the
    target. Returns the number of bytes written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return len(data)


class LocalStorageService:
    """Saves files to a local directory (settings.UPLOAD_DIR)."""

    def __init__(self, base_path: Optional[str] = None, max_file_size: Optional[int] = None):
        self.base_path = Path(base_path or settings.UPLOAD_DIR)
        self.max_file_size = max_file_size or settings.MAX_FILE_SIZE

    def ensure_directories(self) -> None:
        for prefix in (ORIGINAL_PREFIX, STANDARDIZED_PREFIX):
            (self.base_path / prefix).mkdir(parents=True, exist_ok=True)

    async def save_file(self, file: UploadFile, key: str) -> int:
        """Save an uploaded file to local disk.

        Args:
            file: FastAPI UploadFile (supports async read)
            key: The storage key (e.g., "original/plano-1a2b3c4d.pdf")

        Returns:
            The number of bytes written

        Raises:
            ValidationError: the file is larger than max_file_size. The
                partial file is removed.
        """
        file_path = self.get_file_path(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        # Write in chunks to handle large files without loading into memory
        chunk_size = 1024 * 1024  # 1MB chunks
        total_bytes = 0

        with open(file_path, "wb") as dest:
            while True:
                chunk = await file.read(chunk_size)
                if not chunk:
                    break
                total_bytes += len(chunk)
                if total_bytes > self.max_file_size:
                    break
                dest.write(chunk)

        if total_bytes > self.max_file_size:
            file_path.unlink(missing_ok=True)
            raise ValidationError(
                f"File too large. Maximum size is {self.max_file_size} bytes",
                status_code=413,
            )

        return total_bytes

    def get_file_path(self, key: str) -> Path:
        return self.base_path / key

    async def delete_file(self, key: str) -> bool:
        """Delete a file from storage."""
        file_path = self.get_file_path(key)
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    async def file_exists(self, key: str) -> bool:
        return self.get_file_path(key).exists()


def get_storage_service() -> LocalStorageService:
    """Factory function - returns the storage backend for the current config."""
    return LocalStorageService()
