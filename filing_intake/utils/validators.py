import re
from pathlib import Path
from typing import Optional, Sequence
from filing_intake.config import settings
from .exceptions import ValidationError

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")

def validate_file_count(count: int, max_files: Optional[int] = None) -> bool:
    """Validate that at least one and no more than the allowed number of files were sent"""
    max_files = max_files or settings.MAX_FILES_PER_UPLOAD
    if count == 0:
        raise ValidationError("No files provided")
    if count > max_files:
        raise ValidationError(f"Too many files: {count} provided, maximum is {max_files}")
    return True

def validate_file_size(file_size: int, filename: str = "file") -> bool:
    """Validate that file size is within limits"""
    if file_size > settings.MAX_FILE_SIZE:
        limit_mb = settings.MAX_FILE_SIZE // (1024 * 1024)
        raise ValidationError(f"File size exceeds {limit_mb}MB limit: {filename}")
    return True

def validate_content_type(content_type: str, filename: str = "file",
                          allowed: Optional[Sequence[str]] = None) -> bool:
    """Validate that the declared content type is one we accept"""
    allowed = allowed or settings.ALLOWED_CONTENT_TYPES
    if content_type not in allowed:
        raise ValidationError(f"Invalid file type for {filename}. Allowed: PDF, JPG, PNG, TXT")
    return True

def sanitize_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a safe storage name"""
    name = Path(filename or "").name
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).replace("..", "_")
    return name[:255] or "file"
