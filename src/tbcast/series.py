# file: src/tbcast/series.py
"""
Series Builder + Splitter

Turns the cleaned [ds, y] table into a fixed-frequency monthly series
(DatetimeIndex at month starts, no gaps) and splits it by count into a
leading training segment and a trailing validation segment.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Optional, Tuple

import pandas as pd

from .errors import SeriesError

logger = logging.getLogger(__name__)

MONTH_FREQ = "MS"


def _label(period: pd.Period) -> str:
    return period.strftime("%b-%Y")


def expected_periods(start: Tuple[int, int], end: Tuple[int, int]) -> int:
    """Number of months from start to end inclusive"""
    return (end[0] - start[0]) * 12 + (end[1] - start[1]) + 1


def build_monthly_series(
    table: pd.DataFrame,
    start: Tuple[int, int] = (2012, 1),
    end: Optional[Tuple[int, int]] = None,
    freq: int = 12,
    name: str = "y",
) -> pd.Series:
    """
    Build the monthly series anchored at `start`.

    The row count must match the number of months between `start` and the
    declared `end` (or the implicit end start + n - 1), and the dates must
    sit exactly on that monthly grid.

    Args:
        table: Cleaned DataFrame with columns [ds, y]
        start: (year, month) of the first observation
        end: Optional (year, month) of the last observation
        freq: Periods per year; only 12 is supported

    Returns:
        pd.Series indexed by month-start timestamps
    """
    if freq != 12:
        raise SeriesError(f"Only monthly frequency (12) is supported, got {freq}")
    if not {"ds", "y"}.issubset(table.columns):
        raise SeriesError(f"Expected columns ds/y, got {table.columns.tolist()}")

    n = len(table)
    if n == 0:
        raise SeriesError("No rows to build a series from")

    first = pd.Period(year=start[0], month=start[1], freq="M")
    if end is not None:
        last = pd.Period(year=end[0], month=end[1], freq="M")
        n_expected = expected_periods(start, end)
        if n_expected <= 0:
            raise SeriesError(f"End {_label(last)} precedes start {_label(first)}")
    else:
        n_expected = n
        last = first + (n - 1)

    if n != n_expected:
        raise SeriesError(
            f"expected {n_expected} rows for {_label(first)}..{_label(last)}, got {n}"
        )

    n_missing = int(table["y"].isna().sum() + table["ds"].isna().sum())
    if n_missing:
        raise SeriesError(f"{n_missing} missing values; a monthly series cannot have gaps")

    n_dup = int(table["ds"].duplicated().sum())
    if n_dup:
        raise SeriesError(f"{n_dup} duplicate months in the date column")

    grid = pd.date_range(first.to_timestamp(), periods=n_expected, freq=MONTH_FREQ)
    observed = pd.DatetimeIndex(table["ds"])
    mismatch = observed != grid
    if mismatch.any():
        pos = int(mismatch.argmax())
        raise SeriesError(
            f"row {pos} is dated {observed[pos]:%Y-%m}, expected {grid[pos]:%Y-%m} "
            f"for a monthly series starting {_label(first)}"
        )

    series = pd.Series(table["y"].to_numpy(dtype=float), index=grid, name=name)
    series.index.name = "ds"

    logger.info(f"[series] {len(series)} monthly observations, {_label(first)}..{_label(last)}")
    return series


@dataclass
class SeriesSplit:
    """Leading training segment and trailing validation segment"""
    train: pd.Series
    test: pd.Series

    def __post_init__(self):
        """Validate no leakage"""
        if len(self.train) == 0 or len(self.test) == 0:
            raise ValueError("Train and test segments must both be non-empty")
        if self.train.index[-1] >= self.test.index[0]:
            raise ValueError(
                f"Train/test leakage: train_end ({self.train.index[-1]}) >= "
                f"test_start ({self.test.index[0]})"
            )

    @property
    def train_size(self) -> int:
        return len(self.train)

    @property
    def test_size(self) -> int:
        return len(self.test)

    @property
    def info(self) -> Dict:
        """Serialize split info"""
        return {
            "train_start": self.train.index[0].isoformat(),
            "train_end": self.train.index[-1].isoformat(),
            "test_start": self.test.index[0].isoformat(),
            "test_end": self.test.index[-1].isoformat(),
            "train_size": self.train_size,
            "test_size": self.test_size,
        }


def train_test_split(series: pd.Series, ratio: float = 0.85) -> SeriesSplit:
    """
    Split by count, no randomization.

    The test segment holds floor(N * (1 - ratio)) observations and the
    training segment the rest, so N=90 at 0.85 gives 77/13.
    """
    if not 0 < ratio < 1:
        raise ValueError(f"ratio must be in (0, 1), got {ratio}")

    n = len(series)
    # exact decimal arithmetic: 100 * (1 - 0.8) must floor to 20, not 19
    test_len = int(math.floor(n * (1 - Fraction(str(ratio)))))
    train_len = n - test_len
    if test_len < 1 or train_len < 1:
        raise ValueError(f"Series of length {n} cannot be split at ratio {ratio}")

    split = SeriesSplit(train=series.iloc[:train_len], test=series.iloc[train_len:])
    logger.info(f"[split] train={split.train_size} test={split.test_size}")
    return split
