"""
Prizm Upload Utilities
Size and media type checks for uploaded images.
"""
from fastapi import HTTPException, UploadFile

from prizm.config import config


def _max_bytes() -> int:
    return config.MAX_FILE_MB * 1024 * 1024


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate an uploaded file before reading it.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 413 for oversized files, 415 for unsupported formats
    """
    # file.size can be None for some clients
    if file.size and file.size > _max_bytes():
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )


async def read_upload(file: UploadFile) -> bytes:
    """
    Read an uploaded image after validating it.

    Raises:
        HTTPException: 400 when the body cannot be read, 413 when too large
    """
    validate_file_upload(file)
    try:
        data = await file.read()
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    if len(data) > _max_bytes():
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )
    return data
