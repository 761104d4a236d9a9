"""File upload API endpoints."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, UploadFile

from apps.crm.api.deps import get_upload_service
from apps.crm.schemas import ApiResponse, UploadedFile
from apps.crm.services.file_upload import FileUploadService
from packages.shared.files import ALLOWED_MIME_TYPES

logger = structlog.get_logger()
router = APIRouter()


@router.post("/upload", response_model=ApiResponse[UploadedFile])
async def upload_file(
    file: Optional[UploadFile] = File(None),
    service: FileUploadService = Depends(get_upload_service),
):
    """
    Upload one attachment file to blob storage.

    Supports common images, PDF, Word, Excel and plain text up to the
    configured size limit. The returned metadata is what clients send in the
    ``attachments`` list when creating a follow-up.

    Args:
        file: Multipart ``file`` field
        service: Upload service

    Returns:
        Stored file metadata with its public URL
    """
    filename = file.filename if file else None
    content_type = file.content_type if file else None
    logger.info("Received file for upload", filename=filename, content_type=content_type)

    data = await file.read() if file else b""
    stored = service.store(filename, content_type, data)
    return ApiResponse(data=stored, message="File uploaded")


@router.get("/upload/supported-formats")
async def get_supported_formats(service: FileUploadService = Depends(get_upload_service)):
    """
    Get the accepted MIME types and size limit for uploads.

    Returns:
        Dictionary of supported types and the maximum size
    """
    return {
        "success": True,
        "data": {
            "mimeTypes": list(ALLOWED_MIME_TYPES),
            "maxFileSize": service.max_size_bytes,
        },
    }
