"""
Smoke Tests: end-to-end run on synthetic data

Stage failures must halt the run with the failing stage named.
"""

import json

import pytest

from src.tbcast.config import AnalysisConfig, load_config
from src.tbcast.errors import AnalysisError, LoadError, SeriesError
from src.tbcast.tasks import _run_stage, run_full_pipeline

from ._data import synthetic_incidence


def _write(tmp_path, n: int = 90):
    path = tmp_path / "tb.csv"
    synthetic_incidence(n=n).to_csv(path, index=False)
    return path


@pytest.mark.fail_loud
class TestStageFailures:

    def test_missing_file_halts_at_load(self, tmp_path):
        cfg = AnalysisConfig(data_path=str(tmp_path / "missing.xlsx"), reports_dir=str(tmp_path))

        with pytest.raises(LoadError):
            run_full_pipeline(cfg, run_id="t")

    def test_short_file_halts_at_series(self, tmp_path):
        cfg = AnalysisConfig(data_path=str(_write(tmp_path, n=88)), reports_dir=str(tmp_path))

        with pytest.raises(SeriesError, match="expected 90 rows for Jan-2012..Jun-2019, got 88"):
            run_full_pipeline(cfg, run_id="t")

        assert not cfg.summary_path("t").exists()

    def test_unexpected_errors_tagged_with_stage(self):
        def boom():
            raise RuntimeError("kaput")

        with pytest.raises(AnalysisError) as exc:
            _run_stage("decompose", boom)

        assert exc.value.stage == "decompose"
        assert str(exc.value) == "[decompose] kaput"


@pytest.mark.smoke
class TestConfig:

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TB_INCIDENCE_DATA", str(tmp_path / "env.xlsx"))
        monkeypatch.setenv("TB_REPORTS_DIR", str(tmp_path / "reports"))

        cfg = load_config()

        assert cfg.data_path.endswith("env.xlsx")
        assert cfg.summary_path("r1") == tmp_path / "reports" / "r1" / "summary.json"

    def test_explicit_override_wins(self, monkeypatch):
        monkeypatch.setenv("TB_INCIDENCE_DATA", "env.xlsx")

        cfg = load_config(data_path="cli.csv", train_ratio=0.8)

        assert cfg.data_path == "cli.csv"
        assert cfg.train_ratio == 0.8

    def test_bad_month_step(self):
        with pytest.raises(ValueError):
            load_config(month_step="weekly")


@pytest.mark.smoke
class TestFullPipeline:

    def test_run_writes_summary(self, tmp_path):
        pytest.importorskip("statsforecast")
        pytest.importorskip("prophet")

        cfg = AnalysisConfig(
            data_path=str(_write(tmp_path)),
            reports_dir=str(tmp_path / "reports"),
            make_plots=False,
        )

        results = run_full_pipeline(cfg, run_id="smoke")

        assert results["train/test"] == "77/13"
        assert results["winner"] in ("sarima", "prophet")
        assert results["sarima_rmse"] >= 0

        summary = json.loads(cfg.summary_path("smoke").read_text())
        assert summary["split"]["train_size"] == 77
        assert set(summary["scores"]) == {"sarima", "prophet"}
        assert "ljung_box" in summary["sarima"]["diagnostics"]
        assert summary["stationarity"]["kpss"]["p_value"] <= 0.1

    def test_rerun_gives_identical_scores(self, tmp_path):
        pytest.importorskip("statsforecast")
        pytest.importorskip("prophet")

        cfg = AnalysisConfig(
            data_path=str(_write(tmp_path)),
            reports_dir=str(tmp_path / "reports"),
            make_plots=False,
        )

        first = run_full_pipeline(cfg, run_id="first")
        second = run_full_pipeline(cfg, run_id="second")

        for key in ("sarima_model", "sarima_rmse", "prophet_rmse", "winner", "train/test"):
            assert first[key] == second[key]

        a, b = (json.loads(cfg.summary_path(r).read_text())["scores"] for r in ("first", "second"))
        for name in ("sarima", "prophet"):
            assert a[name]["sse"] == pytest.approx(b[name]["sse"], rel=1e-9)
            assert a[name]["coverage"] == b[name]["coverage"]
