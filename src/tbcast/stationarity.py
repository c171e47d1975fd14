# file: src/tbcast/stationarity.py
"""
Stationarity tests over the full series.

- ADF: null = unit root (non-stationary). Constant + trend, fixed lag
  order trunc((n - 1) ** (1/3)).
- KPSS: null = level stationary. Short lag truncation trunc(4 * (n/100) ** 0.25).

They test complementary hypotheses, so both p-values are always reported
together and read jointly.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import asdict, dataclass
from typing import Dict

import pandas as pd
from statsmodels.tools.sm_exceptions import InterpolationWarning
from statsmodels.tsa.stattools import adfuller, kpss

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HypothesisOutcome:
    name: str
    statistic: float
    p_value: float
    lags: int
    null_hypothesis: str
    reject: bool

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class StationarityReport:
    adf: HypothesisOutcome
    kpss: HypothesisOutcome
    alpha: float

    @property
    def conclusion(self) -> str:
        """Joint reading of the two tests"""
        if not self.adf.reject and self.kpss.reject:
            return "non-stationary"
        if self.adf.reject and not self.kpss.reject:
            return "stationary"
        return "inconclusive"

    def to_dict(self) -> Dict:
        return {
            "alpha": self.alpha,
            "adf": self.adf.to_dict(),
            "kpss": self.kpss.to_dict(),
            "conclusion": self.conclusion,
        }


def adf_test(series: pd.Series, alpha: float = 0.05) -> HypothesisOutcome:
    """Augmented Dickey-Fuller unit-root test"""
    n = len(series)
    lags = int(math.trunc((n - 1) ** (1 / 3)))
    stat, p_value, used_lag, *_ = adfuller(
        series.to_numpy(dtype=float),
        maxlag=lags,
        regression="ct",
        autolag=None,
    )
    return HypothesisOutcome(
        name="adf",
        statistic=float(stat),
        p_value=float(p_value),
        lags=int(used_lag),
        null_hypothesis="unit root (non-stationary)",
        reject=bool(p_value < alpha),
    )


def kpss_test(series: pd.Series, alpha: float = 0.05) -> HypothesisOutcome:
    """KPSS level-stationarity test"""
    n = len(series)
    lags = int(math.trunc(4 * (n / 100) ** 0.25))

    # p-values come from a lookup table bounded to [0.01, 0.10]
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", InterpolationWarning)
        stat, p_value, used_lags, _ = kpss(
            series.to_numpy(dtype=float),
            regression="c",
            nlags=lags,
        )
    for w in caught:
        if issubclass(w.category, InterpolationWarning):
            logger.info(f"[stationarity] KPSS p-value at table bound: {w.message}")

    return HypothesisOutcome(
        name="kpss",
        statistic=float(stat),
        p_value=float(p_value),
        lags=int(used_lags),
        null_hypothesis="level stationary",
        reject=bool(p_value < alpha),
    )


def run_stationarity_tests(series: pd.Series, alpha: float = 0.05) -> StationarityReport:
    """
    Run ADF and KPSS on the full series (no split).

    Args:
        series: Monthly series
        alpha: Significance threshold for both tests

    Returns:
        StationarityReport with both outcomes and their joint reading
    """
    report = StationarityReport(
        adf=adf_test(series, alpha=alpha),
        kpss=kpss_test(series, alpha=alpha),
        alpha=alpha,
    )
    logger.info(
        f"[stationarity] ADF p={report.adf.p_value:.4f} KPSS p={report.kpss.p_value:.4f} "
        f"-> {report.conclusion}"
    )
    return report


def print_stationarity_report(report: StationarityReport) -> None:
    """Print a human-readable stationarity report"""
    print(f"\n=== Stationarity Report (alpha={report.alpha}) ===")
    for outcome in (report.adf, report.kpss):
        verdict = "reject" if outcome.reject else "fail to reject"
        print(
            f"{outcome.name.upper():5s} stat={outcome.statistic:8.4f} "
            f"p={outcome.p_value:.4f} lags={outcome.lags} "
            f"H0: {outcome.null_hypothesis} -> {verdict}"
        )
    print(f"Joint reading: {report.conclusion}")
