from docverify.config import settings
from docverify.errors import FileTooLarge, UnsupportedFileType


def check_file_metadata(mime_type: str | None, file_size_bytes: int | None) -> None:
    """Reject uploads whose declared type or size is outside the allowed limits.

    Both fields are optional; a missing value is not checked.
    """
    if mime_type is not None and mime_type not in settings.allowed_mime_types:
        raise UnsupportedFileType(f"Unsupported file type: {mime_type}")
    if file_size_bytes is not None and file_size_bytes > settings.max_upload_bytes:
        raise FileTooLarge(f"File too large (max {settings.max_upload_bytes} bytes)")
