"""
Forecaster Tests

SARIMA (statsforecast AutoARIMA) and Prophet on synthetic monthly data.
Library-backed tests are skipped when the library is not installed.
"""

import numpy as np
import pandas as pd
import pytest

from src.tbcast.errors import FitError
from src.tbcast.models import (ModelFactory, ProphetModel, SARIMAModel,
                               future_months)
from src.tbcast.series import train_test_split

from ._data import synthetic_series


@pytest.mark.fail_loud
class TestFitGuards:

    def test_sarima_needs_two_seasons(self):
        with pytest.raises(FitError) as exc:
            SARIMAModel(season_length=12).fit(synthetic_series(23))

        assert exc.value.stage == "sarima"
        assert "at least 24" in str(exc.value)

    def test_predict_before_fit(self):
        with pytest.raises(FitError):
            SARIMAModel().predict(13)

    def test_prophet_month_step_validated(self):
        with pytest.raises(ValueError):
            ProphetModel(month_step="weekly")

    def test_factory(self):
        assert ModelFactory.list_models() == ["sarima", "prophet"]
        assert isinstance(ModelFactory.create("sarima"), SARIMAModel)

        prophet = ModelFactory.create("prophet", month_step="fixed", fixed_step_days=30)
        assert isinstance(prophet, ProphetModel)
        assert prophet.month_step == "fixed"
        with pytest.raises(ValueError):
            ModelFactory.create("xgboost")


def test_future_months_follow_training_end():
    ds = future_months(pd.Timestamp("2018-05-01"), 13)

    assert ds[0] == pd.Timestamp("2018-06-01")
    assert ds[-1] == pd.Timestamp("2019-06-01")
    assert (ds.day == 1).all()


class TestSARIMA:

    @pytest.fixture(scope="class")
    def fitted(self):
        pytest.importorskip("statsforecast")
        split = train_test_split(synthetic_series(90))
        return split, SARIMAModel(season_length=12).fit(split.train)

    def test_orders_selected(self, fitted):
        _, model = fitted
        summary = model.order_summary()

        assert len(model.order) == 3
        assert model.seasonal_order[3] == 12
        assert np.isfinite(summary["aicc"])
        assert model.get_name().startswith("ARIMA(")

    def test_forecast_shape_and_dates(self, fitted):
        split, model = fitted
        result = model.predict(split.test_size)

        assert result.horizon == 13
        assert result.ds.equals(split.test.index)
        assert (result.lower <= result.forecast).all()
        assert (result.forecast <= result.upper).all()

    def test_residuals_aligned(self, fitted):
        split, model = fitted
        resid = model.residuals()

        assert len(resid) == split.train_size
        assert resid.index.equals(split.train.index)

    def test_refit_is_deterministic(self, fitted):
        split, model = fitted
        again = SARIMAModel(season_length=12).fit(split.train)

        np.testing.assert_allclose(
            again.predict(13).forecast, model.predict(13).forecast
        )


class TestProphet:

    @pytest.fixture(scope="class")
    def split(self):
        pytest.importorskip("prophet")
        return train_test_split(synthetic_series(90))

    def test_calendar_grid(self, split):
        model = ProphetModel(month_step="calendar").fit(split.train)
        future = model.future_frame(split.test_size)

        assert len(future) == split.train_size + split.test_size
        assert (pd.DatetimeIndex(future["ds"]).day == 1).all()

    def test_fixed_step_grid_drifts(self, split):
        model = ProphetModel(month_step="fixed", fixed_step_days=30).fit(split.train)
        future = model.future_frame(split.test_size)

        assert len(future) == split.train_size + split.test_size
        tail = pd.DatetimeIndex(future["ds"].tail(split.test_size))
        assert not (tail.day == 1).all()

    def test_forecast_last_horizon_rows(self, split):
        model = ProphetModel().fit(split.train)
        result = model.predict(split.test_size)

        assert result.horizon == split.test_size
        assert result.ds[0] > split.train.index[-1]
        assert result.level == 95
        paired = result.with_actual(split.test)
        np.testing.assert_array_equal(paired.actual, split.test.values)

    def test_repeat_predict_is_identical(self, split):
        model = ProphetModel().fit(split.train)
        a = model.predict(split.test_size)
        b = model.predict(split.test_size)

        np.testing.assert_array_equal(a.forecast, b.forecast)
        np.testing.assert_array_equal(a.lower, b.lower)
        np.testing.assert_array_equal(a.upper, b.upper)
