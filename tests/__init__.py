"""
TB Incidence Analysis Test Suite

- test_ingest_fail_loud.py — loader rejects bad files
- test_cleaning.py — missing/duplicate counts, date normalization
- test_series.py — monthly grid invariant, 77/13 split
- test_decompose_stationarity.py — additive decomposition, ADF/KPSS
- test_metrics.py — SSE/RMSE, model comparison
- test_models.py — SARIMA / Prophet forecasters
- test_pipeline_smoke.py — end-to-end run on synthetic data
- test_reference.py — reference scores on the original data file
"""
