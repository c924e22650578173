import pytest

from filing_intake.config import settings
from filing_intake.utils.exceptions import ErrorCode, ValidationError
from filing_intake.utils.validators import (
    sanitize_filename,
    validate_content_type,
    validate_file_count,
    validate_file_size,
)


class TestFileCount:
    def test_within_limit(self):
        assert validate_file_count(3, max_files=5)

    def test_no_files(self):
        with pytest.raises(ValidationError, match="No files provided") as exc_info:
            validate_file_count(0)

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_too_many_files(self):
        with pytest.raises(ValidationError, match="Too many files: 6 provided, maximum is 5"):
            validate_file_count(6, max_files=5)


class TestFileSize:
    def test_exactly_at_limit_is_accepted(self):
        assert validate_file_size(settings.MAX_FILE_SIZE, "w2.pdf")

    def test_over_limit(self):
        with pytest.raises(ValidationError, match="File size exceeds 10MB limit: w2.pdf"):
            validate_file_size(settings.MAX_FILE_SIZE + 1, "w2.pdf")


class TestContentType:
    @pytest.mark.parametrize("content_type", ["application/pdf", "image/jpeg", "image/png", "text/plain"])
    def test_allowed(self, content_type):
        assert validate_content_type(content_type, "doc")

    def test_rejected(self):
        with pytest.raises(ValidationError, match="Invalid file type for notes.docx"):
            validate_content_type("application/msword", "notes.docx")

    def test_custom_allow_list(self):
        with pytest.raises(ValidationError):
            validate_content_type("text/plain", "notes.txt", allowed=["application/pdf"])


class TestSanitizeFilename:
    @pytest.mark.parametrize("raw, expected", [
        ("w2 2024.pdf", "w2_2024.pdf"),
        ("../../etc/passwd", "passwd"),
        ("my..file.pdf", "my_file.pdf"),
        ("", "file"),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_filename(raw) == expected
