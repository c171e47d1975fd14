"""
TB incidence forecasting analysis

Pipeline stages, in order:
1. ingest - Read the (date, value) spreadsheet
2. validate - Missing/duplicate counts, date normalization
3. series - Fixed monthly series + count-based train/test split
4. decompose - Additive decomposition (period 12)
5. stationarity - ADF + KPSS, read jointly
6. models - SARIMA (AutoARIMA) and Prophet forecasters
7. diagnostics - Ljung-Box + normality checks on SARIMA residuals
8. evaluation - SSE / RMSE scoring and model comparison
9. tasks - Stage orchestration, plots and run summary
"""

from .config import AnalysisConfig, load_config
from .decompose import DecompositionResult, decompose_additive
from .errors import AnalysisError, FitError, LoadError, SeriesError
from .evaluation import ForecastMetrics, ModelScore, compare_models, score_forecast
from .ingest import load_incidence_table
from .models import ForecastModel, ForecastResult, ModelFactory, ProphetModel, SARIMAModel
from .series import SeriesSplit, build_monthly_series, train_test_split
from .stationarity import StationarityReport, run_stationarity_tests
from .validate import (CleaningReport, clean_table, count_duplicates,
                       count_missing, normalize_dates)

__all__ = [
    # Config / errors
    "AnalysisConfig",
    "load_config",
    "AnalysisError",
    "LoadError",
    "SeriesError",
    "FitError",
    # Data
    "load_incidence_table",
    "CleaningReport",
    "clean_table",
    "count_missing",
    "count_duplicates",
    "normalize_dates",
    "build_monthly_series",
    "SeriesSplit",
    "train_test_split",
    # Analysis
    "DecompositionResult",
    "decompose_additive",
    "StationarityReport",
    "run_stationarity_tests",
    # Models
    "ForecastModel",
    "SARIMAModel",
    "ProphetModel",
    "ModelFactory",
    "ForecastResult",
    # Evaluation
    "ForecastMetrics",
    "ModelScore",
    "score_forecast",
    "compare_models",
]
