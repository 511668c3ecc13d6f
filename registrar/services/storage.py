# registrar/services/storage.py - Upload validation and document storage on disk
from dataclasses import dataclass
from pathlib import Path
from typing import List, Iterable
import logging
import re
import secrets
import time

from registrar.core.config import Settings
from registrar.core.exceptions import UploadRejectedError
from registrar.core.security import sanitize_filename
from registrar.services.enrollment_service import StoredDocument

logger = logging.getLogger(__name__)

# MIME types accepted for each extension; both must agree
ALLOWED_MIME_TYPES = {
    ".jpg": {"image/jpeg", "image/jpg", "image/pjpeg"},
    ".jpeg": {"image/jpeg", "image/jpg", "image/pjpeg"},
    ".png": {"image/png"},
    ".pdf": {"application/pdf"},
    ".doc": {"application/msword"},
    ".docx": {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
}

FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{1,50}$")


@dataclass
class IncomingFile:
    """A file received in a multipart request, read fully into memory"""
    field_name: str
    filename: str
    content_type: str
    content: bytes

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()

    @property
    def size(self) -> int:
        return len(self.content)


class DocumentStorage:
    """Validates enrollment uploads and writes accepted ones under ``upload_dir``"""

    def __init__(
        self,
        upload_dir: str,
        max_file_size: int = 5 * 1024 * 1024,
        max_files: int = 5,
        allowed_extensions: Iterable[str] = tuple(ALLOWED_MIME_TYPES),
    ):
        self.upload_dir = Path(upload_dir)
        self.max_file_size = max_file_size
        self.max_files = max_files
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions} & set(ALLOWED_MIME_TYPES)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStorage":
        return cls(
            upload_dir=settings.UPLOAD_DIR,
            max_file_size=settings.max_file_size_bytes,
            max_files=settings.MAX_FILES_PER_REQUEST,
            allowed_extensions=settings.ALLOWED_FILE_TYPES,
        )

    def check_size(self, filename: str, size: int) -> None:
        if size > self.max_file_size:
            raise UploadRejectedError(
                f"{filename} exceeds the {self.max_file_size // (1024 * 1024)} MB limit",
                too_large=True,
            )

    def validate(self, files: List[IncomingFile]) -> None:
        """
        Check count, size, extension and MIME type of every file.

        Raises:
            UploadRejectedError: on the first violation
        """
        if len(files) > self.max_files:
            raise UploadRejectedError(f"At most {self.max_files} documents may be uploaded")

        for incoming in files:
            if not FIELD_NAME_PATTERN.match(incoming.field_name or ""):
                raise UploadRejectedError(f"Invalid document field name: {incoming.field_name!r}")

            if not incoming.filename:
                raise UploadRejectedError("Uploaded document has no filename")

            self.check_size(incoming.filename, incoming.size)

            if incoming.extension not in self.allowed_extensions:
                raise UploadRejectedError(f"{incoming.filename}: only images and documents are accepted")

            content_type = (incoming.content_type or "").split(";")[0].strip().lower()
            if content_type not in ALLOWED_MIME_TYPES[incoming.extension]:
                raise UploadRejectedError(
                    f"{incoming.filename}: content type {content_type or 'unknown'} does not match its extension"
                )

    def save(self, files: List[IncomingFile]) -> List[StoredDocument]:
        """Write validated files to disk under unique names"""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        stored: List[StoredDocument] = []
        try:
            for incoming in files:
                unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
                target = self.upload_dir / f"{incoming.field_name}-{unique_suffix}{incoming.extension}"
                target.write_bytes(incoming.content)
                stored.append(StoredDocument(
                    field_name=incoming.field_name,
                    filename=sanitize_filename(incoming.filename),
                    path=str(target),
                ))
        except OSError:
            self.remove(stored)
            raise

        return stored

    def remove(self, documents: List[StoredDocument]) -> None:
        """Delete stored files, used when the enrollment that owned them failed"""
        for document in documents:
            try:
                Path(document.path).unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove orphaned upload {document.path}: {e}")
