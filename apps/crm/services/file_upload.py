"""File upload service for follow-up attachments.

Validates an uploaded file, stores it in the configured blob storage and
returns the metadata a client later sends back when creating a follow-up.
No attachment row is written here.
"""

import secrets
import time
from typing import Optional

import structlog

from apps.crm.core.errors import UnavailableError, ValidationError
from apps.crm.schemas import UploadedFile
from apps.crm.services.storage import Storage, StorageError
from packages.shared.files import (
    ALLOWED_MIME_TYPES,
    categorize_mime_type,
    is_allowed_mime_type,
    unique_storage_name,
)

logger = structlog.get_logger()

FILE_VALIDATION_FAILED = "File validation failed"


class FileUploadService:
    """Service for validating and storing uploaded files."""

    def __init__(self, storage: Storage, max_size_bytes: int):
        self.storage = storage
        self.max_size_bytes = max_size_bytes

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        """
        Check a file against the type allow-list and the size limit.

        Args:
            filename: Original filename
            content_type: MIME type reported by the client
            size: File size in bytes

        Raises:
            ValidationError: With a ``file`` detail naming the failed rule
        """
        if not filename:
            raise ValidationError.for_field(
                "file", "Please choose a file to upload", summary=FILE_VALIDATION_FAILED
            )
        if not is_allowed_mime_type(content_type):
            raise ValidationError.for_field(
                "file",
                f"Unsupported file type: {content_type or 'unknown'}. "
                f"Supported types: {', '.join(ALLOWED_MIME_TYPES)}",
                summary=FILE_VALIDATION_FAILED,
            )
        if size > self.max_size_bytes:
            limit_mb = self.max_size_bytes // (1024 * 1024)
            raise ValidationError.for_field(
                "file", f"File size cannot exceed {limit_mb}MB", summary=FILE_VALIDATION_FAILED
            )

    def store(self, filename: Optional[str], content_type: Optional[str], data: bytes) -> UploadedFile:
        """
        Validate and persist a file.

        Args:
            filename: Original filename, None when no file part was sent
            content_type: MIME type
            data: File bytes

        Returns:
            Public metadata of the stored file
        """
        self.storage.ensure_configured()
        self.validate(filename, content_type, len(data))

        key = unique_storage_name(filename)
        try:
            url = self.storage.put_bytes(key, data, content_type=content_type)
        except StorageError as e:
            logger.error("File storage failed", filename=filename, key=key, error=str(e))
            raise UnavailableError("File storage is unavailable, please try again later") from e

        logger.info("Stored uploaded file", filename=filename, key=key, size=len(data))
        return UploadedFile(
            id=f"file_{int(time.time() * 1000)}_{secrets.token_hex(4)}",
            file_name=filename,
            file_url=url,
            file_type=categorize_mime_type(content_type),
            file_size=len(data),
        )
