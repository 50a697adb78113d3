"""
app/services/csv_sniffer.py

Best-effort header, sample and column-type inference for the preview screen.

This is advisory only: nothing it infers is sent to the analysis model.
Cells are split on plain commas, so quoted commas are not supported.
"""

from __future__ import annotations

import math
import re
import warnings
from dataclasses import dataclass, field

import pandas as pd

from app.config import get_upload_settings

NUMERICAL = "Numerical"
DATE_TIME = "Date/Time"
CATEGORICAL = "Categorical"

_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class ColumnProfile:
    """
    Inferred type and a few sample values for one CSV column.
    """

    name: str
    inferred_type: str
    sample_values: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SniffResult:
    headers: list[str]
    sample_rows: list[list[str]]
    column_types: list[ColumnProfile]


def _parse_line(line: str) -> list[str]:
    cells = []
    for cell in line.split(","):
        cell = cell.strip()
        if cell.startswith('"'):
            cell = cell[1:]
        if cell.endswith('"'):
            cell = cell[:-1]
        cells.append(cell)
    return cells


def is_number(value: str) -> bool:
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


def is_date(value: str) -> bool:
    """
    Return True when pandas can read ``value`` as a timestamp.
    """

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        try:
            parsed = pd.to_datetime(value, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return False
    return not pd.isna(parsed)


def infer_column_type(samples: list[str]) -> str:
    """
    Numerical if every sample is a number, else Date/Time if every sample is
    a non-numeric date, else Categorical.
    """

    if not samples:
        return CATEGORICAL
    if all(is_number(value) for value in samples):
        return NUMERICAL
    if all(is_date(value) and not is_number(value) for value in samples):
        return DATE_TIME
    return CATEGORICAL


class CSVSniffer:
    """
    Splits CSV text into headers and sample rows and profiles each column.
    """

    def __init__(self, preview_rows: int = 5, max_sample_values: int = 3) -> None:
        self.preview_rows = preview_rows
        self.max_sample_values = max_sample_values

    def sniff(self, csv_text: str) -> SniffResult:
        lines = [line for line in _LINE_SPLIT.split(csv_text or "") if line.strip()]
        if not lines:
            return SniffResult(headers=[], sample_rows=[], column_types=[])

        headers = _parse_line(lines[0])
        sample_rows = [_parse_line(line) for line in lines[1 : 1 + self.preview_rows]]

        column_types: list[ColumnProfile] = []
        for index, header in enumerate(headers):
            samples = [row[index] for row in sample_rows if index < len(row) and row[index] != ""]
            column_types.append(
                ColumnProfile(
                    name=header,
                    inferred_type=infer_column_type(samples),
                    sample_values=samples[: self.max_sample_values],
                )
            )

        return SniffResult(headers=headers, sample_rows=sample_rows, column_types=column_types)


def get_csv_sniffer() -> CSVSniffer:
    """
    Build a sniffer from upload settings.
    """

    settings = get_upload_settings()
    return CSVSniffer(
        preview_rows=settings.preview_rows,
        max_sample_values=settings.max_sample_values,
    )


def sniff(csv_text: str) -> SniffResult:
    return get_csv_sniffer().sniff(csv_text)
