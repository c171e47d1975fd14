# file: src/tbcast/models.py
"""
Model Implementations

Fits the two competing forecasters on the training segment:
1. SARIMA with automatic order selection (statsforecast AutoARIMA, AICc)
2. Prophet (additive trend + yearly seasonality)

Each model instance is fitted once and produces one forecast. Fitting
problems raise FitError; there is no silent fallback to another model.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import FitError

logger = logging.getLogger(__name__)


@dataclass
class ForecastResult:
    """Point forecast + interval for the `horizon` months after training"""
    model_name: str
    ds: pd.DatetimeIndex
    forecast: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    level: int
    actual: Optional[np.ndarray] = None

    @property
    def horizon(self) -> int:
        return len(self.forecast)

    def with_actual(self, test: pd.Series) -> "ForecastResult":
        """Pair with the test segment by position (row index), not by date"""
        if len(test) != self.horizon:
            raise ValueError(
                f"{self.model_name}: forecast horizon {self.horizon} != test length {len(test)}"
            )
        return ForecastResult(
            model_name=self.model_name,
            ds=self.ds,
            forecast=self.forecast,
            lower=self.lower,
            upper=self.upper,
            level=self.level,
            actual=test.to_numpy(dtype=float),
        )


def future_months(last: pd.Timestamp, horizon: int) -> pd.DatetimeIndex:
    """The `horizon` month starts immediately after `last`"""
    return pd.date_range(last + pd.offsets.MonthBegin(1), periods=horizon, freq="MS")


class ForecastModel(ABC):
    """Base class for forecasting models"""

    @abstractmethod
    def fit(self, train: pd.Series) -> "ForecastModel":
        """Fit model to the training segment"""
        pass

    @abstractmethod
    def predict(self, horizon: int) -> ForecastResult:
        """Generate forecast for given horizon"""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Model name"""
        pass

    def _require_fit(self):
        if self.train is None:
            raise FitError(f"{self.get_name()} must be fitted before predict", stage=self.get_name())


class SARIMAModel(ForecastModel):
    """Seasonal ARIMA with automatic order selection"""

    def __init__(
        self,
        season_length: int = 12,
        ic: str = "aicc",
        stepwise: bool = True,
        level: int = 95,
    ):
        self.season_length = season_length
        self.ic = ic
        self.stepwise = stepwise
        self.level = level
        self.model = None
        self.train = None

    def fit(self, train: pd.Series) -> "SARIMAModel":
        """Search (p,d,q)(P,D,Q,s) by information criterion and fit"""
        min_len = 2 * self.season_length
        if len(train) < min_len:
            raise FitError(
                f"training segment has {len(train)} observations; seasonal period "
                f"{self.season_length} needs at least {min_len}",
                stage="sarima",
            )

        from statsforecast.models import AutoARIMA

        model = AutoARIMA(
            season_length=self.season_length,
            ic=self.ic,
            stepwise=self.stepwise,
            seasonal=True,
        )
        try:
            model.fit(train.to_numpy(dtype=float))
        except Exception as e:
            raise FitError(f"AutoARIMA order search failed: {e}", stage="sarima") from e

        self.model = model
        self.train = train

        summary = self.order_summary()
        if summary["seasonal_dropped"]:
            logger.warning(
                f"[sarima] selected model has no seasonal terms: {self.get_name()} "
                f"(seasonality was enabled in the search)"
            )
        logger.info(f"[sarima] selected {self.get_name()} {self.ic.upper()}={summary['aicc']:.3f}")
        return self

    @property
    def _arma(self) -> Tuple[int, ...]:
        self._require_fit()
        # statsforecast arma layout: (p, q, P, Q, s, d, D)
        return tuple(int(v) for v in self.model.model_["arma"])

    @property
    def order(self) -> Tuple[int, int, int]:
        p, q, _, _, _, d, _ = self._arma
        return (p, d, q)

    @property
    def seasonal_order(self) -> Tuple[int, int, int, int]:
        _, _, P, Q, s, _, D = self._arma
        return (P, D, Q, s)

    @property
    def aicc(self) -> float:
        self._require_fit()
        return float(self.model.model_.get("aicc", np.nan))

    def order_summary(self) -> Dict:
        P, D, Q, s = self.seasonal_order
        return {
            "order": list(self.order),
            "seasonal_order": list(self.seasonal_order),
            "aicc": self.aicc,
            "seasonal_dropped": (P, D, Q) == (0, 0, 0) or s <= 1,
        }

    def residuals(self) -> pd.Series:
        """In-sample one-step residuals aligned with the training index"""
        self._require_fit()
        resid = np.asarray(self.model.model_["residuals"], dtype=float)
        return pd.Series(resid, index=self.train.index, name="resid")

    def predict(self, horizon: int) -> ForecastResult:
        """Generate SARIMA forecast with prediction interval"""
        self._require_fit()

        out = self.model.predict(h=horizon, level=[self.level])
        return ForecastResult(
            model_name="sarima",
            ds=future_months(self.train.index[-1], horizon),
            forecast=np.asarray(out["mean"], dtype=float),
            lower=np.asarray(out[f"lo-{self.level}"], dtype=float),
            upper=np.asarray(out[f"hi-{self.level}"], dtype=float),
            level=self.level,
        )

    def get_name(self) -> str:
        if self.model is None:
            return "sarima"
        return f"ARIMA{self.order}{self.seasonal_order}"


class ProphetModel(ForecastModel):
    """Facebook Prophet model wrapper"""

    def __init__(
        self,
        yearly_seasonality: bool = True,
        seasonality_mode: str = "additive",
        interval_width: float = 0.95,
        month_step: str = "calendar",
        fixed_step_days: int = 30,
        random_seed: int = 42,
    ):
        if month_step not in ("calendar", "fixed"):
            raise ValueError(f"month_step must be 'calendar' or 'fixed', got {month_step!r}")
        self.yearly_seasonality = yearly_seasonality
        self.seasonality_mode = seasonality_mode
        self.interval_width = interval_width
        self.month_step = month_step
        self.fixed_step_days = fixed_step_days
        self.random_seed = random_seed
        self.model = None
        self.train = None

    def fit(self, train: pd.Series) -> "ProphetModel":
        """Fit Prophet to the training segment"""
        from prophet import Prophet

        df = pd.DataFrame({
            "ds": train.index,
            "y": train.to_numpy(dtype=float),
        })

        model = Prophet(
            growth="linear",
            yearly_seasonality=self.yearly_seasonality,
            weekly_seasonality=False,
            daily_seasonality=False,
            seasonality_mode=self.seasonality_mode,
            interval_width=self.interval_width,
        )
        try:
            model.fit(df)
        except Exception as e:
            raise FitError(f"Prophet fitting failed: {e}", stage="prophet") from e

        self.model = model
        self.train = train
        logger.info(
            f"[prophet] fitted on {len(train)} months, "
            f"{len(model.changepoints)} candidate changepoints"
        )
        return self

    def future_frame(self, horizon: int) -> pd.DataFrame:
        """
        History + horizon date grid (len(train) + horizon rows).

        "fixed" steps a constant number of days per month, so the future
        dates drift away from month starts.
        """
        self._require_fit()

        if self.month_step == "calendar":
            return self.model.make_future_dataframe(periods=horizon, freq="MS", include_history=True)

        last = self.train.index[-1]
        step = pd.Timedelta(days=self.fixed_step_days)
        future = [last + step * k for k in range(1, horizon + 1)]
        return pd.DataFrame({"ds": list(self.train.index) + future})

    def predict(self, horizon: int) -> ForecastResult:
        """Predict over the full grid and keep the last `horizon` rows"""
        future = self.future_frame(horizon)
        if len(future) != len(self.train) + horizon:
            raise FitError(
                f"future grid has {len(future)} rows, expected {len(self.train) + horizon}",
                stage="prophet",
            )

        # interval bounds are simulated
        np.random.seed(self.random_seed)
        forecast = self.model.predict(future).tail(horizon)
        return ForecastResult(
            model_name="prophet",
            ds=pd.DatetimeIndex(forecast["ds"]),
            forecast=forecast["yhat"].to_numpy(dtype=float),
            lower=forecast["yhat_lower"].to_numpy(dtype=float),
            upper=forecast["yhat_upper"].to_numpy(dtype=float),
            level=int(round(self.interval_width * 100)),
        )

    def get_name(self) -> str:
        return "prophet"


class ModelFactory:
    """Factory for creating model instances"""

    _models = {
        "sarima": SARIMAModel,
        "prophet": ProphetModel,
    }

    @classmethod
    def create(cls, model_name: str, **kwargs) -> ForecastModel:
        """Create model by name"""
        if model_name not in cls._models:
            raise ValueError(f"Unknown model: {model_name}")

        return cls._models[model_name](**kwargs)

    @classmethod
    def list_models(cls) -> List[str]:
        """List available models"""
        return list(cls._models.keys())
