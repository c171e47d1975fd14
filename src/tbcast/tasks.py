# file: src/tbcast/tasks.py
"""
Pipeline Tasks

Linear, single-pass analysis:
load -> clean -> series -> explore -> decompose -> stationarity -> split
-> sarima -> prophet -> evaluate

Each task takes the config plus the previous stage's output and returns
its own result object. Any failure aborts the run: the failing stage is
logged and the error re-raised, downstream stages never run.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

import pandas as pd

from .config import AnalysisConfig
from .decompose import DecompositionResult, decompose_additive
from .diagnostics import ResidualDiagnostics, run_residual_diagnostics
from .errors import AnalysisError
from .evaluation import ModelScore, compare_models, score_forecast
from .ingest import load_incidence_table
from .io_utils import atomic_write_json
from .models import ForecastResult, ModelFactory, ProphetModel, SARIMAModel
from .series import SeriesSplit, build_monthly_series, train_test_split
from .stationarity import StationarityReport, run_stationarity_tests
from .validate import CleaningReport, clean_table

logger = logging.getLogger(__name__)


def _run_stage(stage: str, fn: Callable, *args, **kwargs):
    """Run one stage; tag unexpected failures with the stage name"""
    start = time.time()
    try:
        out = fn(*args, **kwargs)
    except AnalysisError as e:
        logger.error(f"[{e.stage}] failed: {e.reason}")
        raise
    except Exception as e:
        logger.error(f"[{stage}] failed: {e}")
        raise AnalysisError(str(e), stage=stage) from e
    logger.debug(f"[{stage}] done in {time.time() - start:.2f}s")
    return out


def load_and_clean(config: AnalysisConfig) -> Tuple[pd.DataFrame, CleaningReport]:
    """Tasks 1-2: read the file, count anomalies, normalize dates"""
    raw = _run_stage(
        "load",
        load_incidence_table,
        config.data_path,
        date_col=config.date_col,
        sheet_name=config.sheet_name,
    )
    return _run_stage("clean", clean_table, raw, date_col=config.date_col)


def build_series(config: AnalysisConfig, clean: pd.DataFrame) -> pd.Series:
    """Task 3: fixed monthly series"""
    return _run_stage(
        "series",
        build_monthly_series,
        clean,
        start=config.start,
        end=config.end,
        freq=config.frequency,
    )


def explore(config: AnalysisConfig, series: pd.Series, run_id: str) -> Dict[str, str]:
    """Exploratory plots of the full series"""
    from . import plots

    return {
        "series": str(plots.plot_series(series, config.plot_path(run_id, "series"))),
        "monthly_profile": str(plots.plot_monthly_profile(series, config.plot_path(run_id, "monthly_profile"))),
        "autocorrelation": str(plots.plot_autocorrelation(series, config.plot_path(run_id, "autocorrelation"))),
    }


def fit_sarima(
    config: AnalysisConfig,
    split: SeriesSplit,
) -> Tuple[SARIMAModel, ForecastResult, ResidualDiagnostics]:
    """Task 7: AutoARIMA fit, residual checks, forecast over the test horizon"""
    model = _run_stage(
        "sarima",
        ModelFactory.create(
            "sarima",
            season_length=config.season_length,
            ic=config.information_criterion,
            stepwise=config.stepwise,
            level=config.confidence_level,
        ).fit,
        split.train,
    )

    P, _, Q, _ = model.seasonal_order
    p, _, q = model.order
    diagnostics = _run_stage(
        "diagnostics",
        run_residual_diagnostics,
        model.residuals(),
        lags=config.ljung_box_lags,
        model_df=p + q + P + Q,
        alpha=config.alpha,
    )

    forecast = _run_stage("sarima", model.predict, split.test_size)
    return model, forecast.with_actual(split.test), diagnostics


def fit_prophet(config: AnalysisConfig, split: SeriesSplit) -> Tuple[ProphetModel, ForecastResult]:
    """Task 8: Prophet fit and forecast over the test horizon"""
    model = _run_stage(
        "prophet",
        ModelFactory.create(
            "prophet",
            yearly_seasonality=True,
            seasonality_mode="additive",
            interval_width=config.confidence_level / 100,
            month_step=config.month_step,
            fixed_step_days=config.fixed_step_days,
        ).fit,
        split.train,
    )
    forecast = _run_stage("prophet", model.predict, split.test_size)
    return model, forecast.with_actual(split.test)


def run_full_pipeline(config: AnalysisConfig, run_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Run every stage in order and write the run summary.

    Returns:
        Flat dict of headline results (for console tables)
    """
    run_id = run_id or config.run_id()
    logger.info(f"[run] {run_id} data={config.data_path}")

    clean, cleaning = load_and_clean(config)
    series = build_series(config, clean)

    plot_paths: Dict[str, str] = {}
    if config.make_plots:
        plot_paths.update(_run_stage("explore", explore, config, series, run_id))

    decomposition: DecompositionResult = _run_stage(
        "decompose", decompose_additive, series, period=config.season_length
    )
    stationarity: StationarityReport = _run_stage(
        "stationarity", run_stationarity_tests, series, alpha=config.alpha
    )
    split: SeriesSplit = _run_stage("split", train_test_split, series, ratio=config.train_ratio)

    sarima, sarima_fc, diagnostics = fit_sarima(config, split)
    _, prophet_fc = fit_prophet(config, split)

    scores: Dict[str, ModelScore] = {
        fc.model_name: _run_stage("evaluate", score_forecast, fc)
        for fc in (sarima_fc, prophet_fc)
    }
    leaderboard = _run_stage("evaluate", compare_models, scores.values())
    winner = str(leaderboard.iloc[0]["model_name"])

    if config.make_plots:
        from . import plots

        def _render():
            return {
                "decomposition": plots.plot_decomposition(decomposition, config.plot_path(run_id, "decomposition")),
                "sarima_forecast": plots.plot_forecast(
                    split.train, split.test, sarima_fc, config.plot_path(run_id, "sarima_forecast")
                ),
                "sarima_residuals": plots.plot_residual_diagnostics(
                    sarima.residuals(), config.plot_path(run_id, "sarima_residuals")
                ),
                "prophet_forecast": plots.plot_forecast(
                    split.train, split.test, prophet_fc, config.plot_path(run_id, "prophet_forecast")
                ),
                "comparison": plots.plot_model_comparison(
                    split.test, [sarima_fc, prophet_fc], config.plot_path(run_id, "comparison")
                ),
            }

        plot_paths.update({k: str(v) for k, v in _run_stage("report", _render).items()})

    summary = {
        "run_id": run_id,
        "data_path": str(config.data_path),
        "cleaning": {
            "n_rows": cleaning.n_rows,
            "missing": cleaning.missing,
            "n_duplicates": cleaning.n_duplicates,
        },
        "series": {
            "start": series.index[0].isoformat(),
            "end": series.index[-1].isoformat(),
            "n_obs": len(series),
        },
        "decomposition": {
            "seasonal_figure": {int(k): float(v) for k, v in decomposition.seasonal_figure.items()},
            "seasonal_strength": decomposition.seasonal_strength,
        },
        "stationarity": stationarity.to_dict(),
        "split": split.info,
        "sarima": {**sarima.order_summary(), "diagnostics": diagnostics.to_dict()},
        "prophet": {"month_step": config.month_step},
        "scores": {name: s.to_dict() for name, s in scores.items()},
        "winner": winner,
        "plots": plot_paths,
    }
    summary_path = config.summary_path(run_id)
    atomic_write_json(summary, summary_path)
    logger.info(f"[run] summary written: {summary_path}")

    return {
        "run_id": run_id,
        "rows": cleaning.n_rows,
        "missing": cleaning.n_missing,
        "duplicates": cleaning.n_duplicates,
        "adf_p_value": round(stationarity.adf.p_value, 4),
        "kpss_p_value": round(stationarity.kpss.p_value, 4),
        "stationarity": stationarity.conclusion,
        "train/test": f"{split.train_size}/{split.test_size}",
        "sarima_model": sarima.get_name(),
        "sarima_rmse": round(scores["sarima"].rmse, 4),
        "prophet_rmse": round(scores["prophet"].rmse, 4),
        "residual_notes": "; ".join(diagnostics.notes) or "none",
        "winner": winner,
        "summary": str(summary_path),
    }
