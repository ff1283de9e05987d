"""Unit tests for CSV parsing, upload validation and sample loading."""

from __future__ import annotations

import math
from pathlib import Path

import pandas as pd
import pytest

from chartboard.data_layer import (
    DatasetError,
    get_data_fingerprint,
    get_samples_fingerprint,
    is_csv_upload,
    list_sample_datasets,
    load_sample,
    load_upload,
    parse_csv,
    sniff_delimiter,
    summarize_columns,
)

pytestmark = pytest.mark.unit


def test_parse_csv_yields_one_row_per_data_line_with_typed_values() -> None:
    """Numeric columns become numbers, text columns stay text."""

    df = parse_csv("name,score,ratio\nalpha,10,0.5\nbeta,20,1.25\ngamma,30,2\n")

    assert list(df.columns) == ["name", "score", "ratio"]
    assert len(df) == 3
    assert df["name"].tolist() == ["alpha", "beta", "gamma"]
    assert df["score"].tolist() == [10, 20, 30]
    assert pd.api.types.is_numeric_dtype(df["score"])
    assert df["ratio"].tolist() == [0.5, 1.25, 2.0]


def test_parse_csv_trims_cells_and_headers() -> None:
    """Whitespace around headers and cells is removed."""

    df = parse_csv(" a , b \n x , 1 \n")

    assert list(df.columns) == ["a", "b"]
    assert df["a"].tolist() == ["x"]
    assert df["b"].tolist() == [1]


def test_parse_csv_skips_blank_lines() -> None:
    """Blank lines anywhere in the file are ignored."""

    df = parse_csv("\n\na,b\n\n1,2\n   \n3,4\n\n")

    assert len(df) == 2
    assert df["a"].tolist() == [1, 3]


def test_parse_csv_empty_cells_become_nan() -> None:
    """An empty numeric cell is missing, not zero."""

    df = parse_csv("a,b\n1,\n2,5\n")

    assert math.isnan(df["b"].iloc[0])
    assert df["b"].iloc[1] == 5


def test_parse_csv_mixed_column_keeps_numbers_and_text() -> None:
    """Cells are typed individually in a column that is not fully numeric."""

    df = parse_csv("a\n1\nx\n2.5\n")

    assert df["a"].tolist() == [1.0, "x", 2.5]


def test_parse_csv_short_rows_are_padded() -> None:
    """A row with fewer cells than the header gets NaN for the rest."""

    df = parse_csv("a,b,c\n1,2\n4,5,6\n")

    assert len(df) == 2
    assert math.isnan(df["c"].iloc[0])
    assert df["c"].iloc[1] == 6


@pytest.mark.parametrize("delimiter", [";", "\t", "|"])
def test_parse_csv_detects_other_delimiters(delimiter: str) -> None:
    """Semicolon, tab and pipe separated files parse like comma separated ones."""

    df = parse_csv(delimiter.join(["k", "v"]) + "\n" + delimiter.join(["x", "7"]) + "\n")

    assert list(df.columns) == ["k", "v"]
    assert df["v"].tolist() == [7]


def test_sniff_delimiter_defaults_to_comma() -> None:
    """A single-column header has no delimiter to count."""

    assert sniff_delimiter("value") == ","
    assert sniff_delimiter("a;b;c") == ";"


def test_sniff_delimiter_ignores_quoted_header_cells() -> None:
    """A delimiter inside a quoted column name does not count."""

    assert sniff_delimiter('"a,b,c";d') == ";"
    assert sniff_delimiter('"x, y",n') == ","


def test_parse_csv_quoted_header_keeps_its_delimiter() -> None:
    """A quoted header containing the delimiter stays one column."""

    df = parse_csv('"x, y",n\nA,1\nB,2\n')

    assert list(df.columns) == ["x, y", "n"]
    assert df["n"].tolist() == [1, 2]


def test_parse_csv_rejects_empty_text() -> None:
    """Whitespace-only content is reported as an empty file."""

    with pytest.raises(DatasetError, match="empty"):
        parse_csv("  \n\n ")


def test_parse_csv_truncates_to_max_rows() -> None:
    """Rows past max_rows are dropped."""

    df = parse_csv("a\n1\n2\n3\n4\n", max_rows=2)

    assert df["a"].tolist() == [1, 2]


def test_load_upload_requires_a_file() -> None:
    """No upload gives the 'no file' message."""

    with pytest.raises(DatasetError, match="No file selected"):
        load_upload(None, None, None)


def test_load_upload_rejects_non_csv() -> None:
    """Binary formats are refused before parsing."""

    with pytest.raises(DatasetError, match="valid CSV"):
        load_upload("report.pdf", "application/pdf", b"%PDF-1.4")


@pytest.mark.parametrize(
    ("name", "mime_type", "raw"),
    [
        ("report.xls", "application/vnd.ms-excel", b"\xd0\xcf\x11\xe0garbage"),
        ("data.json", "text/plain", b'{"a": 1}'),
        ("export", "application/csv", b"a,b\n1,2\n"),
    ],
)
def test_load_upload_needs_csv_mime_or_extension(name: str, mime_type: str, raw: bytes) -> None:
    """Loose MIME types are only trusted together with a CSV-like file name."""

    with pytest.raises(DatasetError, match="valid CSV"):
        load_upload(name, mime_type, raw)


def test_load_upload_accepts_csv_reported_as_excel() -> None:
    """Windows browsers label .csv files as Excel; the extension decides."""

    df = load_upload("sales.csv", "application/vnd.ms-excel", b"region,total\nEast,3\n")

    assert df["total"].tolist() == [3]


def test_load_upload_decodes_utf8_bom_and_latin1() -> None:
    """A BOM does not leak into the first header; Latin-1 bytes still decode."""

    df = load_upload("data.csv", "text/csv", "\ufeffcity,n\nSão Paulo,1\n".encode("utf-8"))
    assert list(df.columns) == ["city", "n"]

    df = load_upload("data.csv", "text/csv", "city,n\nSão Paulo,1\n".encode("latin-1"))
    assert df["city"].tolist() == ["São Paulo"]


def test_is_csv_upload_accepts_extension_when_mime_is_generic() -> None:
    """Browsers sometimes report octet-stream for CSV files."""

    assert is_csv_upload("data.CSV", "application/octet-stream")
    assert is_csv_upload("data.bin", "text/csv")
    assert not is_csv_upload("data.xlsx", "application/octet-stream")
    assert not is_csv_upload("data.xls", "application/vnd.ms-excel")
    assert not is_csv_upload("notes.md", "text/plain")


def test_fingerprint_tracks_content() -> None:
    """Same bytes, same fingerprint; different bytes, different fingerprint."""

    assert get_data_fingerprint(b"a,b\n1,2\n") == get_data_fingerprint(b"a,b\n1,2\n")
    assert get_data_fingerprint(b"a,b\n1,2\n") != get_data_fingerprint(b"a,b\n1,3\n")


def test_samples_are_listed_and_loaded(samples_dir: Path) -> None:
    """Only .csv files are listed; each loads through the same parser."""

    assert list_sample_datasets(str(samples_dir)) == ["a.csv", "b.csv"]

    df = load_sample(str(samples_dir), "a.csv")
    assert df["Value"].tolist() == [3]
    assert get_samples_fingerprint(str(samples_dir))


def test_load_sample_missing_file(samples_dir: Path) -> None:
    """A vanished sample becomes a DatasetError."""

    with pytest.raises(DatasetError, match="Error reading"):
        load_sample(str(samples_dir), "missing.csv")


def test_summarize_columns_splits_numeric_and_text(sales_df: pd.DataFrame) -> None:
    """Summary counts rows and classifies columns."""

    summary = summarize_columns(sales_df)

    assert summary["rows"] == 3
    assert summary["columns"] == 5
    assert summary["numeric_columns"] == ["Q1", "Q2", "Q3", "Q4"]
    assert summary["categorical_columns"] == ["Product"]
