# file: src/tbcast/plots.py
"""
Report plots (PNG) for the incidence analysis.

Every function draws on its own figure, saves it, closes it, and returns
the written path.
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Iterable

import matplotlib.pyplot as plt
import pandas as pd
from statsmodels.graphics.gofplots import qqplot
from statsmodels.graphics.tsaplots import plot_acf, plot_pacf

from .decompose import DecompositionResult
from .models import ForecastResult

warnings.filterwarnings('ignore', category=UserWarning, module='matplotlib')

plt.rcParams['figure.figsize'] = (12, 6)
plt.rcParams['figure.dpi'] = 100

Y_LABEL = "Incidence per 100,000"


def _save(fig, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path


def plot_series(series: pd.Series, path: Path, title: str = "Monthly TB incidence") -> Path:
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(series.index, series.values, marker='o', markersize=3)
    ax.set_title(title)
    ax.set_xlabel('Date')
    ax.set_ylabel(Y_LABEL)
    ax.grid(True, alpha=0.3)
    return _save(fig, path)


def plot_monthly_profile(series: pd.Series, path: Path) -> Path:
    """Box plot of values by calendar month"""
    frame = pd.DataFrame({"month": series.index.month, "y": series.values})
    groups = [frame.loc[frame["month"] == m, "y"].values for m in range(1, 13)]

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.boxplot(groups)
    ax.set_xticks(range(1, 13))
    ax.set_xticklabels([pd.Timestamp(2000, m, 1).strftime('%b') for m in range(1, 13)])
    ax.set_title('Incidence by calendar month')
    ax.set_xlabel('Month')
    ax.set_ylabel(Y_LABEL)
    ax.grid(True, alpha=0.3)
    return _save(fig, path)


def plot_autocorrelation(series: pd.Series, path: Path, lags: int = 24) -> Path:
    lags = min(lags, len(series) // 2 - 1)

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    plot_acf(series.values, lags=lags, ax=axes[0])
    axes[0].set_title('Autocorrelation')
    plot_pacf(series.values, lags=lags, ax=axes[1], method='ywm')
    axes[1].set_title('Partial autocorrelation')
    for ax in axes:
        ax.axvline(x=12, color='red', linestyle='--', alpha=0.5, label='12 months')
        ax.legend()
    return _save(fig, path)


def plot_decomposition(decomposition: DecompositionResult, path: Path) -> Path:
    parts = [
        ('Observed', decomposition.observed),
        ('Trend', decomposition.trend),
        ('Seasonal', decomposition.seasonal),
        ('Residual', decomposition.resid),
    ]
    fig, axes = plt.subplots(len(parts), 1, figsize=(12, 10), sharex=True)
    for ax, (label, values) in zip(axes, parts):
        if label == 'Residual':
            ax.scatter(values.index, values.values, s=8)
            ax.axhline(0, color='black', linewidth=0.8)
        else:
            ax.plot(values.index, values.values)
        ax.set_ylabel(label)
        ax.grid(True, alpha=0.3)
    axes[0].set_title(f'Additive decomposition (period={decomposition.period})')
    axes[-1].set_xlabel('Date')
    return _save(fig, path)


def plot_forecast(
    train: pd.Series,
    test: pd.Series,
    result: ForecastResult,
    path: Path,
) -> Path:
    """Training history, test actuals, and the forecast with its interval"""
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(train.index, train.values, color='black', label='Train')
    ax.plot(test.index, test.values, color='tab:green', marker='o', markersize=3, label='Test')
    # drawn on the test dates: forecasts are aligned by position
    ax.plot(test.index, result.forecast, color='tab:blue', label=f'{result.model_name} forecast')
    ax.fill_between(
        test.index,
        result.lower,
        result.upper,
        color='tab:blue',
        alpha=0.2,
        label=f'{result.level}% interval',
    )
    ax.set_title(f'{result.model_name}: forecast vs test')
    ax.set_xlabel('Date')
    ax.set_ylabel(Y_LABEL)
    ax.legend()
    ax.grid(True, alpha=0.3)
    return _save(fig, path)


def plot_residual_diagnostics(residuals: pd.Series, path: Path, lags: int = 24) -> Path:
    resid = residuals.dropna()
    lags = min(lags, len(resid) - 1)

    fig, axes = plt.subplots(2, 2, figsize=(14, 9))
    axes[0, 0].plot(resid.index, resid.values)
    axes[0, 0].axhline(0, color='black', linewidth=0.8)
    axes[0, 0].set_title('Residuals')

    plot_acf(resid.values, lags=lags, ax=axes[0, 1])
    axes[0, 1].set_title('Residual autocorrelation')

    qqplot(resid.values, line='s', ax=axes[1, 0])
    axes[1, 0].set_title('Normal Q-Q')

    axes[1, 1].hist(resid.values, bins=20, density=True, alpha=0.7)
    axes[1, 1].set_title('Residual distribution')
    return _save(fig, path)


def plot_model_comparison(
    test: pd.Series,
    results: Iterable[ForecastResult],
    path: Path,
) -> Path:
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(test.index, test.values, color='black', marker='o', markersize=3, label='Test')
    for result in results:
        ax.plot(test.index, result.forecast, marker='x', markersize=4, label=result.model_name)
    ax.set_title('Forecast comparison on the validation segment')
    ax.set_xlabel('Date')
    ax.set_ylabel(Y_LABEL)
    ax.legend()
    ax.grid(True, alpha=0.3)
    return _save(fig, path)
