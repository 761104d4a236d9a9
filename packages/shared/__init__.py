"""Shared utilities and types."""

from packages.shared.files import (
    ALLOWED_MIME_TYPES,
    categorize_mime_type,
    is_allowed_mime_type,
    unique_storage_name,
)
from packages.shared.ordering import RecencyKey, sort_by_recent_activity

__all__ = [
    "ALLOWED_MIME_TYPES",
    "categorize_mime_type",
    "is_allowed_mime_type",
    "unique_storage_name",
    "RecencyKey",
    "sort_by_recent_activity",
]
