# file: src/tbcast/evaluation.py
"""
Model Evaluation Metrics

Scores each forecast against the test segment, paired by position:
SSE = sum((test - forecast)^2), RMSE = sqrt(SSE / horizon).
Lower RMSE wins.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable

import numpy as np
import pandas as pd

from .models import ForecastResult

logger = logging.getLogger(__name__)


def _paired(y_true: np.ndarray, y_pred: np.ndarray):
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Length mismatch: {y_true.shape} vs {y_pred.shape}")
    if len(y_true) == 0:
        raise ValueError("Cannot score an empty forecast")
    return y_true, y_pred


class ForecastMetrics:
    """Compute forecasting evaluation metrics"""

    @staticmethod
    def sse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Sum of squared errors"""
        y_true, y_pred = _paired(y_true, y_pred)
        return float(np.sum((y_true - y_pred) ** 2))

    @staticmethod
    def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Root Mean Squared Error, sqrt(SSE / horizon)"""
        y_true, y_pred = _paired(y_true, y_pred)
        return float(np.sqrt(ForecastMetrics.sse(y_true, y_pred) / len(y_true)))

    @staticmethod
    def mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Mean Absolute Error"""
        y_true, y_pred = _paired(y_true, y_pred)
        return float(np.mean(np.abs(y_pred - y_true)))

    @staticmethod
    def coverage(
        y_true: np.ndarray,
        lower: np.ndarray,
        upper: np.ndarray
    ) -> float:
        """
        Prediction Interval Coverage (%)

        Percentage of actual values within prediction interval.
        """
        y_true, lower = _paired(y_true, lower)
        _, upper = _paired(y_true, upper)
        covered = (y_true >= lower) & (y_true <= upper)
        return float(100 * np.mean(covered))


@dataclass(frozen=True)
class ModelScore:
    model_name: str
    horizon: int
    sse: float
    rmse: float
    mae: float
    coverage: float
    level: int

    def to_dict(self) -> Dict:
        return asdict(self)


def score_forecast(result: ForecastResult) -> ModelScore:
    """Score a forecast that has been paired with its test segment"""
    if result.actual is None:
        raise ValueError(f"{result.model_name}: forecast has no paired test values")

    score = ModelScore(
        model_name=result.model_name,
        horizon=result.horizon,
        sse=ForecastMetrics.sse(result.actual, result.forecast),
        rmse=ForecastMetrics.rmse(result.actual, result.forecast),
        mae=ForecastMetrics.mae(result.actual, result.forecast),
        coverage=ForecastMetrics.coverage(result.actual, result.lower, result.upper),
        level=result.level,
    )
    logger.info(
        f"[evaluate] {score.model_name}: SSE={score.sse:.4f} RMSE={score.rmse:.4f} "
        f"MAE={score.mae:.4f} coverage@{score.level}={score.coverage:.1f}%"
    )
    return score


def compare_models(scores: Iterable[ModelScore]) -> pd.DataFrame:
    """
    Side-by-side leaderboard, lowest RMSE first.

    Returns:
        DataFrame with one row per model and a 1-based `rank`
    """
    rows = [s.to_dict() for s in scores]
    if not rows:
        raise ValueError("No scores to compare")

    leaderboard = pd.DataFrame(rows).sort_values("rmse", kind="mergesort").reset_index(drop=True)
    leaderboard["rank"] = leaderboard.index + 1
    return leaderboard
