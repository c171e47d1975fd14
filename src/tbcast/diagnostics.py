# file: src/tbcast/diagnostics.py
"""
Residual diagnostics for the fitted SARIMA model.

- Ljung-Box at several lags: p > alpha means no residual autocorrelation
- Jarque-Bera normality: p <= alpha means the normality assumption is
  violated, which is reported (WARNING + summary), never hidden
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import numpy as np
import pandas as pd
from statsmodels.stats.diagnostic import acorr_ljungbox
from statsmodels.stats.stattools import jarque_bera

logger = logging.getLogger(__name__)


@dataclass
class ResidualDiagnostics:
    ljung_box: pd.DataFrame
    jb_statistic: float
    jb_p_value: float
    skew: float
    kurtosis: float
    alpha: float = 0.05
    notes: List[str] = field(default_factory=list)

    @property
    def no_autocorrelation(self) -> bool:
        """All tested lags have Ljung-Box p > alpha"""
        pvals = self.ljung_box["lb_pvalue"].dropna()
        return bool(len(pvals) > 0 and (pvals > self.alpha).all())

    @property
    def residuals_normal(self) -> bool:
        return bool(self.jb_p_value > self.alpha)

    def to_dict(self) -> Dict:
        return {
            "ljung_box": {
                int(lag): {"stat": float(row["lb_stat"]), "p_value": float(row["lb_pvalue"])}
                for lag, row in self.ljung_box.iterrows()
            },
            "no_autocorrelation": self.no_autocorrelation,
            "jarque_bera": {"stat": self.jb_statistic, "p_value": self.jb_p_value},
            "skew": self.skew,
            "kurtosis": self.kurtosis,
            "residuals_normal": self.residuals_normal,
            "notes": list(self.notes),
        }


def run_residual_diagnostics(
    residuals: pd.Series,
    lags: Iterable[int] = (6, 12, 18, 24),
    model_df: int = 0,
    alpha: float = 0.05,
) -> ResidualDiagnostics:
    """
    Check the residuals before trusting the fit.

    Args:
        residuals: In-sample residuals of the fitted model
        lags: Ljung-Box lags
        model_df: Number of estimated ARMA coefficients (p + q + P + Q)
        alpha: Significance threshold

    Returns:
        ResidualDiagnostics
    """
    resid = residuals.dropna().to_numpy(dtype=float)
    usable = [lag for lag in lags if model_df < lag < len(resid)]
    if not usable:
        raise ValueError(
            f"No usable Ljung-Box lags in {list(lags)} for {len(resid)} residuals "
            f"and model_df={model_df}"
        )

    lb = acorr_ljungbox(resid, lags=usable, model_df=model_df)
    jb_stat, jb_p, skew, kurtosis = jarque_bera(resid)

    diagnostics = ResidualDiagnostics(
        ljung_box=lb,
        jb_statistic=float(jb_stat),
        jb_p_value=float(jb_p),
        skew=float(skew),
        kurtosis=float(kurtosis),
        alpha=alpha,
    )

    if diagnostics.no_autocorrelation:
        logger.info(f"[diagnostics] Ljung-Box p > {alpha} at lags {usable}: no residual autocorrelation")
    else:
        note = f"residual autocorrelation at lags {lb.index[lb['lb_pvalue'] <= alpha].tolist()}"
        diagnostics.notes.append(note)
        logger.warning(f"[diagnostics] {note}")

    if not diagnostics.residuals_normal:
        note = (
            f"residuals are not normal (Jarque-Bera p={diagnostics.jb_p_value:.4f}); "
            f"prediction intervals may be miscalibrated"
        )
        diagnostics.notes.append(note)
        logger.warning(f"[diagnostics] {note}")

    if np.isnan(diagnostics.jb_p_value):
        diagnostics.notes.append("Jarque-Bera p-value undefined")

    return diagnostics
