from __future__ import annotations

import pytest

from app.validators.upload_validator import InvalidFileError, is_csv_upload, validate_upload


@pytest.mark.parametrize(
    ("filename", "content_type"),
    [
        ("data.csv", None),
        ("DATA.CSV", "application/octet-stream"),
        ("export", "text/csv"),
        ("export", "text/csv; charset=utf-8"),
        ("export.txt", "application/vnd.ms-excel"),
        (None, "application/csv"),
    ],
)
def test_accepts_csv_by_extension_or_mime(filename, content_type) -> None:
    assert is_csv_upload(filename, content_type)


def test_rejects_non_csv() -> None:
    with pytest.raises(InvalidFileError) as exc_info:
        validate_upload("report.pdf", "application/pdf", b"a,b\n1,2")

    assert exc_info.value.filename == "report.pdf"


def test_decodes_utf8_and_strips_bom() -> None:
    text = validate_upload("data.csv", "text/csv", "\ufeffcity,temp\nZürich,3".encode("utf-8"))

    assert text == "city,temp\nZürich,3"


def test_rejects_undecodable_bytes() -> None:
    with pytest.raises(InvalidFileError, match="UTF-8"):
        validate_upload("data.csv", "text/csv", b"\xff\xfe\x00bad")


@pytest.mark.parametrize("data", [b"", b"  \n\t\n"])
def test_rejects_empty_content(data) -> None:
    with pytest.raises(InvalidFileError, match="empty"):
        validate_upload("data.csv", "text/csv", data)


def test_invalid_file_error_is_value_error() -> None:
    assert issubclass(InvalidFileError, ValueError)
