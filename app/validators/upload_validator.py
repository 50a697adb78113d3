"""
app/validators/upload_validator.py

File input contract for the upload step.
"""

from __future__ import annotations

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


class InvalidFileError(ValueError):
    """
    Raised when an uploaded file cannot be used as CSV text.
    """

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename


def is_csv_upload(filename: str | None, content_type: str | None) -> bool:
    """
    Accept a CSV by extension or MIME type.
    """

    normalized_name = (filename or "").strip().lower()
    normalized_type = (content_type or "").split(";", 1)[0].strip().lower()
    return normalized_name.endswith(".csv") or normalized_type in CSV_CONTENT_TYPES


def validate_upload(filename: str | None, content_type: str | None, data: bytes) -> str:
    """
    Validate an uploaded file and return its text.

    Raises:
        InvalidFileError: Not a CSV, not UTF-8, or empty.
    """

    if not is_csv_upload(filename, content_type):
        raise InvalidFileError("Only CSV files are allowed.", filename=filename)

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InvalidFileError("The file is not valid UTF-8 text.", filename=filename) from exc

    if not text.strip():
        raise InvalidFileError("The file is empty.", filename=filename)
    return text
