from __future__ import annotations

from app.services.csv_sniffer import (
    CATEGORICAL,
    DATE_TIME,
    NUMERICAL,
    CSVSniffer,
    infer_column_type,
    sniff,
)


def test_numeric_and_date_columns() -> None:
    result = sniff("a,b\n1,2024-01-01\n2,2024-01-02")

    assert result.headers == ["a", "b"]
    assert [profile.inferred_type for profile in result.column_types] == [NUMERICAL, DATE_TIME]


def test_blank_lines_and_crlf_are_ignored() -> None:
    result = sniff("name,score\r\n\r\nalice,3\r\n   \nbob,4\r\n\r\n")

    assert result.sample_rows == [["alice", "3"], ["bob", "4"]]
    assert result.column_types[0].inferred_type == CATEGORICAL
    assert result.column_types[1].inferred_type == NUMERICAL


def test_quotes_are_stripped_from_cells() -> None:
    result = sniff('"city","pop"\n"Paris","2100000"')

    assert result.headers == ["city", "pop"]
    assert result.sample_rows == [["Paris", "2100000"]]
    assert result.column_types[1].inferred_type == NUMERICAL


def test_sample_rows_and_values_are_bounded() -> None:
    lines = ["n"] + [str(i) for i in range(10)]

    result = CSVSniffer(preview_rows=5, max_sample_values=3).sniff("\n".join(lines))

    assert len(result.sample_rows) == 5
    assert result.column_types[0].sample_values == ["0", "1", "2"]


def test_empty_input_yields_empty_result() -> None:
    result = sniff("  \n\n")

    assert result.headers == []
    assert result.sample_rows == []
    assert result.column_types == []


def test_column_without_samples_is_categorical() -> None:
    result = sniff("a,b\n1,\n2,")

    assert result.column_types[1].inferred_type == CATEGORICAL
    assert result.column_types[1].sample_values == []


def test_mixed_values_are_categorical() -> None:
    assert infer_column_type(["1", "two"]) == CATEGORICAL
    assert infer_column_type(["2024-01-01", "north"]) == CATEGORICAL


def test_numbers_are_never_dates() -> None:
    assert infer_column_type(["2024", "2025"]) == NUMERICAL
    assert infer_column_type(["1.5", "-3", "1e3"]) == NUMERICAL
