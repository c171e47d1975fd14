# file: src/tbcast/config.py
"""
Analysis configuration.

One frozen config object is passed to every stage, so every run logs the
same settings and no stage reads ambient state. TB_INCIDENCE_DATA and
TB_REPORTS_DIR can be set in the environment or a local .env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


@dataclass(frozen=True)
class AnalysisConfig:
    # Input
    data_path: str = "data/tb_incidence.xlsx"
    date_col: str = "Time"
    sheet_name: int = 0

    # Series layout (Jan 2012 .. Jun 2019)
    start: Tuple[int, int] = (2012, 1)
    end: Optional[Tuple[int, int]] = (2019, 6)
    frequency: int = 12

    # Tests
    alpha: float = 0.05
    ljung_box_lags: Tuple[int, ...] = (6, 12, 18, 24)

    # Split / forecasting
    train_ratio: float = 0.85
    season_length: int = 12
    information_criterion: str = "aicc"
    stepwise: bool = True
    confidence_level: int = 95

    # Prophet future grid: "calendar" month starts or "fixed" day steps
    month_step: str = "calendar"
    fixed_step_days: int = 30

    # Output
    reports_dir: str = "reports"
    make_plots: bool = True

    def run_id(self) -> str:
        return datetime.utcnow().strftime("%Y%m%d_%H%M%S")

    def reports_path(self) -> Path:
        return Path(self.reports_dir)

    def report_path(self, run_id: str) -> Path:
        return self.reports_path() / run_id

    def summary_path(self, run_id: str) -> Path:
        return self.report_path(run_id) / "summary.json"

    def plot_path(self, run_id: str, name: str) -> Path:
        return self.report_path(run_id) / f"{name}.png"


def load_config(**overrides) -> AnalysisConfig:
    """
    Build the config from defaults, environment, and explicit overrides.

    Explicit keyword overrides win over TB_INCIDENCE_DATA / TB_REPORTS_DIR.
    """
    load_dotenv()

    env = {}
    data_path = os.getenv("TB_INCIDENCE_DATA")
    if data_path:
        env["data_path"] = data_path
    reports_dir = os.getenv("TB_REPORTS_DIR")
    if reports_dir:
        env["reports_dir"] = reports_dir

    env.update({k: v for k, v in overrides.items() if v is not None})
    cfg = replace(AnalysisConfig(), **env)

    if cfg.month_step not in ("calendar", "fixed"):
        raise ValueError(f"month_step must be 'calendar' or 'fixed', got {cfg.month_step!r}")
    if cfg.frequency != 12:
        raise ValueError(f"Only monthly series (frequency=12) are supported, got {cfg.frequency}")

    return cfg
