"""
Evaluation Metrics Tests

SSE / RMSE are paired by position and symmetric in their arguments.
"""

import numpy as np
import pandas as pd
import pytest

from src.tbcast.evaluation import (ForecastMetrics, ModelScore, compare_models,
                                   score_forecast)
from src.tbcast.models import ForecastResult, future_months


def _result(name: str, forecast, actual=None, width: float = 1.0) -> ForecastResult:
    forecast = np.asarray(forecast, dtype=float)
    return ForecastResult(
        model_name=name,
        ds=future_months(pd.Timestamp("2018-05-01"), len(forecast)),
        forecast=forecast,
        lower=forecast - width,
        upper=forecast + width,
        level=95,
        actual=None if actual is None else np.asarray(actual, dtype=float),
    )


@pytest.mark.smoke
class TestMetricsBasic:

    def test_perfect_forecast_zero_error(self):
        y = np.array([10.0, 9.5, 9.0, 8.8])

        assert ForecastMetrics.sse(y, y) == 0.0
        assert ForecastMetrics.rmse(y, y) == 0.0
        assert ForecastMetrics.mae(y, y) == 0.0

    def test_sse_and_rmse_values(self):
        y_true = np.array([1.0, 2.0, 3.0, 4.0])
        y_pred = np.array([2.0, 2.0, 1.0, 4.0])

        assert ForecastMetrics.sse(y_true, y_pred) == 5.0
        assert ForecastMetrics.rmse(y_true, y_pred) == pytest.approx(np.sqrt(5.0 / 4))

    def test_rmse_symmetric(self):
        rng = np.random.default_rng(0)
        a = rng.normal(10, 1, 13)
        b = rng.normal(10, 1, 13)

        assert ForecastMetrics.rmse(a, b) == ForecastMetrics.rmse(b, a)
        assert ForecastMetrics.sse(a, b) == ForecastMetrics.sse(b, a)

    def test_coverage(self):
        y = np.array([10.0, 9.0, 8.0, 7.0])
        lower = np.array([9.0, 9.5, 7.0, 6.0])
        upper = np.array([11.0, 10.0, 9.0, 8.0])

        assert ForecastMetrics.coverage(y, lower, upper) == 75.0


@pytest.mark.fail_loud
class TestMetricsRejectMisalignment:

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="Length mismatch"):
            ForecastMetrics.rmse(np.ones(13), np.ones(12))

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            ForecastMetrics.sse(np.array([]), np.array([]))

    def test_unpaired_forecast_cannot_be_scored(self):
        with pytest.raises(ValueError, match="no paired test values"):
            score_forecast(_result("sarima", [1.0, 2.0]))

    def test_with_actual_requires_same_horizon(self):
        test = pd.Series([1.0, 2.0, 3.0], index=future_months(pd.Timestamp("2018-05-01"), 3))
        with pytest.raises(ValueError, match="horizon"):
            _result("prophet", [1.0, 2.0]).with_actual(test)


@pytest.mark.smoke
class TestModelComparison:

    def test_score_forecast(self):
        score = score_forecast(_result("sarima", [10.0, 9.0], actual=[10.5, 9.0], width=1.0))

        assert isinstance(score, ModelScore)
        assert score.horizon == 2
        assert score.sse == pytest.approx(0.25)
        assert score.rmse == pytest.approx(np.sqrt(0.125))
        assert score.coverage == 100.0

    def test_lower_rmse_wins(self):
        actual = [10.0, 9.0, 8.0]
        good = score_forecast(_result("sarima", [10.1, 9.1, 8.1], actual=actual))
        bad = score_forecast(_result("prophet", [11.0, 10.0, 9.0], actual=actual))

        leaderboard = compare_models([bad, good])

        assert leaderboard.iloc[0]["model_name"] == "sarima"
        assert leaderboard["rank"].tolist() == [1, 2]
        assert {"sse", "rmse"}.issubset(leaderboard.columns)

    def test_no_scores(self):
        with pytest.raises(ValueError):
            compare_models([])
