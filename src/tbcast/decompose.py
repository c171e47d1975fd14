# file: src/tbcast/decompose.py
"""
Additive decomposition (period 12).

trend: centered 2x12 moving average, undefined for the first and last 6 months
seasonal: per-calendar-month mean of the detrended series, centered to sum to 0
resid: observed - trend - seasonal
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import seasonal_decompose

from .errors import SeriesError

logger = logging.getLogger(__name__)


@dataclass
class DecompositionResult:
    observed: pd.Series
    trend: pd.Series
    seasonal: pd.Series
    resid: pd.Series
    period: int

    @property
    def seasonal_figure(self) -> pd.Series:
        """The `period` seasonal values, indexed by calendar month (1..12)"""
        by_month = self.seasonal.groupby(self.seasonal.index.month).first()
        by_month.index.name = "month"
        return by_month

    @property
    def seasonal_strength(self) -> float:
        """1 - var(resid) / var(seasonal + resid), floored at 0"""
        mask = self.resid.notna()
        resid = self.resid[mask]
        detrended = self.seasonal[mask] + resid
        denom = float(np.var(detrended))
        if denom <= 0:
            return 0.0
        return max(0.0, 1.0 - float(np.var(resid)) / denom)


def decompose_additive(series: pd.Series, period: int = 12) -> DecompositionResult:
    """
    Split the series into trend, seasonal, and residual components.

    Args:
        series: Monthly series from build_monthly_series
        period: Seasonal period (12 for monthly)

    Returns:
        DecompositionResult aligned index-for-index with `series`
    """
    if len(series) < 2 * period:
        raise SeriesError(
            f"Decomposition needs at least {2 * period} observations, got {len(series)}",
            stage="decompose",
        )
    if series.isna().any():
        raise SeriesError("Decomposition requires a series without missing values", stage="decompose")

    result = seasonal_decompose(series, model="additive", period=period)

    decomposition = DecompositionResult(
        observed=result.observed,
        trend=result.trend,
        seasonal=result.seasonal,
        resid=result.resid,
        period=period,
    )

    logger.info(
        f"[decompose] trend defined for {int(decomposition.trend.notna().sum())}/{len(series)} periods, "
        f"seasonal strength={decomposition.seasonal_strength:.3f}"
    )
    return decomposition
