"""
TBCAST - Tuberculosis incidence forecasting analysis

Modules:
- tbcast: monthly incidence pipeline (load, clean, decompose, stationarity
  tests, SARIMA vs Prophet, evaluation, plots, CLI)
"""
