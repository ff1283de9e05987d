"""Shared fixtures: small DataFrames shaped like the bundled samples."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from chartboard.data_layer import parse_csv


@pytest.fixture
def sales_df() -> pd.DataFrame:
    """Category column plus four numeric quarter columns."""

    return parse_csv(
        "Product,Q1,Q2,Q3,Q4\n"
        "Laptops,120,135,150,190\n"
        "Monitors,80,72,95,110\n"
        "Keyboards,45,50,48,62\n"
    )


@pytest.fixture
def flows_df() -> pd.DataFrame:
    """Source/target/value rows with a repeated pair and a self-link."""

    return pd.DataFrame({
        "Source": ["A", "A", "B", "C", "A", "C"],
        "Target": ["B", "C", "C", "A", "B", "C"],
        "Value": [10.0, 5.0, 3.0, 2.0, 4.0, 7.0],
    })


@pytest.fixture
def tree_df() -> pd.DataFrame:
    """Single-rooted parent/child table."""

    return pd.DataFrame({
        "Parent": [float("nan"), "CEO", "CEO", "CTO", "CTO"],
        "Child": ["CEO", "CTO", "CFO", "Platform", "Data"],
    })


@pytest.fixture
def groups_df() -> pd.DataFrame:
    """Two groups of numeric scores, one with an outlier."""

    return pd.DataFrame({
        "Group": ["a"] * 6 + ["b"] * 4,
        "Score": [10.0, 11.0, 12.0, 13.0, 14.0, 100.0, 50.0, 52.0, 54.0, 56.0],
    })


@pytest.fixture
def samples_dir(tmp_path: Path) -> Path:
    """A data directory holding two small CSV samples."""

    (tmp_path / "b.csv").write_text("Name,Value\nx,1\ny,2\n", encoding="utf-8")
    (tmp_path / "a.csv").write_text("Name;Value\nx;3\n", encoding="utf-8")
    (tmp_path / "notes.md").write_text("not a dataset", encoding="utf-8")
    return tmp_path
