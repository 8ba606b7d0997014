"""
Upload checks performed before any bytes reach the extraction pipeline.
"""
from pathlib import Path
from typing import Optional

from config import ALLOWED_EXTENSIONS, get_max_upload_bytes


class UploadRejectedError(Exception):
    """Raised when an upload fails the type or size checks."""
    pass


class UnsupportedFileError(UploadRejectedError):
    """Raised for file extensions outside the allow-list."""
    pass


class FileTooLargeError(UploadRejectedError):
    """Raised when an upload exceeds the byte ceiling."""
    pass


def validate_upload(filename: str, size: int, max_bytes: Optional[int] = None) -> str:
    """
    Check an upload's name and size.

    Args:
        filename: Original file name
        size: Upload size in bytes
        max_bytes: Byte ceiling (defaults to config)

    Returns:
        The lower-cased file extension

    Raises:
        UnsupportedFileError: If the extension is not .csv, .xls or .xlsx
        FileTooLargeError: If the upload is larger than the ceiling
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise UnsupportedFileError(
            "Invalid file type. Only CSV, XLS, and XLSX files are allowed."
        )

    limit = get_max_upload_bytes() if max_bytes is None else max_bytes
    if size > limit:
        raise FileTooLargeError(
            f"File too large. Maximum size is {limit // (1024 * 1024)} MB."
        )

    return ext
