"""Upload rules: accepted MIME types, coarse categories and storage names."""

import secrets
import time
from pathlib import PurePosixPath
from typing import Optional

ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
)


def is_allowed_mime_type(content_type: Optional[str]) -> bool:
    return (content_type or "").lower() in ALLOWED_MIME_TYPES


def categorize_mime_type(content_type: str) -> str:
    """
    Map a MIME type to the category stored on attachments.

    Returns one of image, pdf, document, spreadsheet, text or other.
    """
    mime = (content_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if "pdf" in mime:
        return "pdf"
    if "word" in mime or "document" in mime:
        return "document"
    if "excel" in mime or "spreadsheet" in mime:
        return "spreadsheet"
    if mime.startswith("text/"):
        return "text"
    return "other"


def unique_storage_name(original_name: str, now_ms: Optional[int] = None) -> str:
    """
    Build a collision-resistant storage key that keeps the file extension.

    Format: ``<epoch millis>_<random token>[.<ext>]``.
    """
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    token = secrets.token_hex(8)
    suffix = PurePosixPath(original_name or "").suffix.lower()
    return f"{timestamp}_{token}{suffix}"
