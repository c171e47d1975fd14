# file: src/tbcast/validate.py
"""
Cleaner / Validator

Reporting gates for data quality:
- Missing values per column
- Fully duplicated rows
- Date column coerced to month-start timestamps

Nothing is imputed or dropped. Non-zero counts are a reportable anomaly;
the series builder rejects them.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class CleaningReport:
    """Results of the cleaning checks"""
    n_rows: int
    missing: Dict[str, int] = field(default_factory=dict)
    n_duplicates: int = 0
    value_min: float = float("nan")
    value_max: float = float("nan")

    @property
    def n_missing(self) -> int:
        return sum(self.missing.values())

    @property
    def is_clean(self) -> bool:
        return self.n_missing == 0 and self.n_duplicates == 0


def count_missing(table: pd.DataFrame) -> Dict[str, int]:
    """Missing values per column"""
    return {str(col): int(n) for col, n in table.isna().sum().items()}


def count_duplicates(table: pd.DataFrame) -> int:
    """Number of rows that repeat an earlier row exactly"""
    return int(table.duplicated(keep="first").sum())


def normalize_dates(table: pd.DataFrame, date_col: str = "Time") -> pd.DataFrame:
    """
    Coerce the raw table to canonical [ds, y] columns.

    ds is a timezone-naive timestamp floored to the first of its month,
    y is the numeric value. Row order is unchanged.

    Args:
        table: Raw table from load_incidence_table
        date_col: Name of the date column

    Returns:
        New DataFrame with columns [ds, y]
    """
    if date_col not in table.columns:
        raise ValueError(f"Missing required date column: {date_col}")

    value_col = [c for c in table.columns if c != date_col][0]

    ds = pd.to_datetime(table[date_col], errors="raise")
    if getattr(ds.dt, "tz", None) is not None:
        ds = ds.dt.tz_localize(None)

    return pd.DataFrame({
        "ds": ds.dt.to_period("M").dt.to_timestamp(),
        "y": pd.to_numeric(table[value_col], errors="raise").astype(float),
    }).reset_index(drop=True)


def clean_table(table: pd.DataFrame, date_col: str = "Time") -> Tuple[pd.DataFrame, CleaningReport]:
    """
    Run the cleaning checks and normalize dates.

    Returns:
        (normalized [ds, y] frame, CleaningReport)
    """
    missing = count_missing(table)
    n_duplicates = count_duplicates(table)
    clean = normalize_dates(table, date_col=date_col)

    report = CleaningReport(
        n_rows=len(table),
        missing=missing,
        n_duplicates=n_duplicates,
        value_min=float(clean["y"].min()),
        value_max=float(clean["y"].max()),
    )

    if not report.is_clean:
        logger.warning(
            f"[clean] anomalies found: missing={report.missing}, "
            f"duplicates={report.n_duplicates} (no imputation applied)"
        )
    else:
        logger.info(f"[clean] {report.n_rows} rows, no missing values, no duplicates")

    if (clean["y"] < 0).any():
        logger.warning(f"[clean] {int((clean['y'] < 0).sum())} negative incidence values")

    return clean, report


def print_cleaning_report(report: CleaningReport) -> None:
    """Print a human-readable cleaning report"""
    status = "PASS" if report.is_clean else "ANOMALY"
    print(f"\n=== Cleaning Report: {status} ===")
    print(f"Rows: {report.n_rows}")
    for col, n in report.missing.items():
        print(f"Missing in {col}: {n}")
    print(f"Duplicate rows: {report.n_duplicates}")
    print(f"Value range: {report.value_min:.2f} to {report.value_max:.2f}")
