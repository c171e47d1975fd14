# file: src/tbcast/ingest.py
"""
Data Loader

Reads the incidence spreadsheet: a header row and exactly two columns,
a monthly date column and a numeric incidence value (per 100,000).
Rows come back in file order; nothing is sorted or dropped here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from .errors import LoadError

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xls")
CSV_SUFFIXES = (".csv",)


def _read_table(path: Path, sheet_name: Union[int, str]) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path, sheet_name=sheet_name)
    if suffix in CSV_SUFFIXES:
        return pd.read_csv(path)
    raise LoadError(f"Unsupported file type {suffix!r}: {path}")


def load_incidence_table(
    path: Union[str, Path],
    date_col: str = "Time",
    sheet_name: Union[int, str] = 0,
) -> pd.DataFrame:
    """
    Load the raw (date, value) table.

    Fails loud instead of coercing: unparseable dates or non-numeric values
    raise LoadError. Empty cells are kept as NaN and counted by the cleaner.

    Args:
        path: .xlsx/.xls/.csv file with a header row
        date_col: Name of the date column (the other column is the value)
        sheet_name: Excel sheet to read

    Returns:
        DataFrame with the file's two columns, in file order
    """
    path = Path(path)
    if not path.exists():
        raise LoadError(f"Input file not found: {path}")

    try:
        df = _read_table(path, sheet_name)
    except LoadError:
        raise
    except Exception as e:
        raise LoadError(f"Could not read {path}: {e}") from e

    if df.shape[1] != 2:
        raise LoadError(
            f"Expected exactly 2 columns ({date_col}, value), got {df.shape[1]}: "
            f"{df.columns.tolist()}"
        )
    if date_col not in df.columns:
        raise LoadError(f"Missing date column {date_col!r}, got {df.columns.tolist()}")

    value_col = [c for c in df.columns if c != date_col][0]

    try:
        pd.to_datetime(df[date_col].dropna(), errors="raise")
    except (ValueError, TypeError) as e:
        raise LoadError(f"Column {date_col!r} is not parseable as dates: {e}") from e

    try:
        pd.to_numeric(df[value_col], errors="raise")
    except (ValueError, TypeError) as e:
        raise LoadError(f"Column {value_col!r} is not numeric: {e}") from e

    logger.info(f"[load] {len(df)} rows from {path.name} (value column: {value_col!r})")
    return df
