"""
Data Layer: Turns an uploaded delimited-text file into a typed DataFrame.

The first non-blank line is the header; every following non-blank line is one
row.  Cells are trimmed and typed individually: numbers become numbers, empty
cells become NaN, everything else stays text.  A column whose every non-empty
cell is numeric becomes a numeric column.

Hot-reload: the sample datasets in  <project_root>/data/  are fingerprinted by
mtime, and uploads by content hash.  Pass the fingerprint to an
@st.cache_data-decorated loader so a changed file invalidates the cache.
"""
import glob
import hashlib
import io
import os
import re
from typing import Optional

import numpy as np
import pandas as pd

from .logger import get_logger

logger = get_logger(__name__)

_DELIMITERS = [",", ";", "\t", "|"]
_QUOTED = re.compile(r'"[^"]*"')
_ACCEPTED_MIME_TYPES = {"text/csv"}
_ACCEPTED_EXTENSIONS = (".csv", ".tsv", ".txt")


class DatasetError(ValueError):
    """Raised when an upload cannot be turned into rows. The message is shown as-is."""


# ── Fingerprints ──────────────────────────────────────────────────────────────

def get_data_fingerprint(raw: bytes) -> str:
    """Hex digest of an upload; changes whenever the file content does."""
    return hashlib.md5(raw).hexdigest()


def get_samples_fingerprint(data_dir: str) -> str:
    """
    Return a hex digest that changes whenever any CSV in data_dir is modified.
    Pass this as an argument to @st.cache_data-decorated loaders so Streamlit
    re-runs them when a sample file is updated.
    """
    h = hashlib.md5()
    for path in sorted(glob.glob(os.path.join(data_dir, "*.csv"))):
        h.update(f"{path}:{os.path.getmtime(path)}".encode())
    return h.hexdigest()


# ── Parsing ───────────────────────────────────────────────────────────────────

def sniff_delimiter(header_line: str) -> str:
    """Pick the candidate delimiter that splits the header the most; comma wins ties.

    Delimiters inside double-quoted header cells are not counted.
    """
    unquoted = _QUOTED.sub("", header_line)
    counts = {d: unquoted.count(d) for d in _DELIMITERS}
    best = max(_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] > 0 else ","


def _coerce_column(col: pd.Series) -> pd.Series:
    stripped = col.map(lambda v: v.strip() if isinstance(v, str) else v)
    blank = stripped.isna() | (stripped == "")
    numeric = pd.to_numeric(stripped.mask(blank), errors="coerce")

    if (numeric.notna() | blank).all():
        return numeric

    # Mixed column: keep numbers where a cell parses, text elsewhere
    mixed = stripped.astype(object).where(numeric.isna(), numeric.astype(object))
    mixed[blank] = np.nan
    return mixed


def parse_csv(text: str, max_rows: Optional[int] = None) -> pd.DataFrame:
    """
    Parse delimited text with a header row into a typed DataFrame.

    Raises DatasetError when the text holds no line at all or the parser
    rejects it.  Rows shorter than the header are padded with NaN; extra
    trailing cells are dropped.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise DatasetError("The CSV file is empty.")

    delimiter = sniff_delimiter(lines[0])
    try:
        header = pd.read_csv(io.StringIO(lines[0]), sep=delimiter, nrows=0, engine="python")
        width = len(header.columns)
        raw = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            index_col=False,
            engine="python",
            on_bad_lines=lambda bad: bad[:width],
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as exc:
        logger.exception("CSV parse failed: %s", exc)
        raise DatasetError("Error processing the CSV file. Check the format.") from exc

    raw.columns = [str(c).strip() for c in raw.columns]
    df = pd.DataFrame({name: _coerce_column(raw[name]) for name in raw.columns})

    if max_rows is not None and len(df) > max_rows:
        logger.warning("Dataset has %d rows; keeping the first %d", len(df), max_rows)
        df = df.head(max_rows)

    logger.info("Parsed %d rows x %d columns (delimiter %r)", len(df), len(df.columns), delimiter)
    return df


def decode_bytes(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("Upload is not UTF-8; falling back to Latin-1")
        return raw.decode("latin-1")


def is_csv_upload(name: str, mime_type: Optional[str]) -> bool:
    if mime_type and mime_type.lower() in _ACCEPTED_MIME_TYPES:
        return True
    return bool(name) and name.lower().endswith(_ACCEPTED_EXTENSIONS)


def load_upload(name: Optional[str], mime_type: Optional[str], raw: Optional[bytes],
                max_rows: Optional[int] = None) -> pd.DataFrame:
    """Validate an upload (Streamlit UploadedFile fields) and parse it."""
    if raw is None or name is None:
        raise DatasetError("No file selected.")
    if not is_csv_upload(name, mime_type):
        raise DatasetError("Please select a valid CSV file.")
    return parse_csv(decode_bytes(raw), max_rows=max_rows)


# ── Sample datasets ───────────────────────────────────────────────────────────

def list_sample_datasets(data_dir: str) -> list[str]:
    """File names of the CSVs shipped in data_dir, sorted."""
    return sorted(os.path.basename(p) for p in glob.glob(os.path.join(data_dir, "*.csv")))


def load_sample(data_dir: str, name: str, max_rows: Optional[int] = None) -> pd.DataFrame:
    path = os.path.join(data_dir, os.path.basename(name))
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        logger.warning("Could not read sample %s: %s", path, exc)
        raise DatasetError("Error reading the file.") from exc
    return parse_csv(decode_bytes(raw), max_rows=max_rows)


# ── Column summary ────────────────────────────────────────────────────────────

def summarize_columns(df: pd.DataFrame) -> dict:
    """Row count plus the numeric / categorical split of the columns."""
    numeric = [c for c in df.columns if pd.api.types.is_numeric_dtype(df[c])]
    categorical = [c for c in df.columns if c not in numeric]
    return {
        "rows": len(df),
        "columns": len(df.columns),
        "numeric_columns": numeric,
        "categorical_columns": categorical,
    }
