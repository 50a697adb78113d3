"""
app/validators package marker.
"""

from app.validators.upload_validator import InvalidFileError, is_csv_upload, validate_upload

__all__ = [
    "InvalidFileError",
    "is_csv_upload",
    "validate_upload",
]
