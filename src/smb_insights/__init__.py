"""Forecasting, staffing and anomaly reports for small-business CSV exports."""

from .analytics import (
    AnomalyScorer,
    BacktestHarness,
    FitConfig,
    ForecastPipeline,
    SSAForecaster,
    StaffingPlanner,
)
from .config import AnomalySettings, ForecastSettings

__all__ = [
    "AnomalyScorer",
    "BacktestHarness",
    "FitConfig",
    "ForecastPipeline",
    "SSAForecaster",
    "StaffingPlanner",
    "AnomalySettings",
    "ForecastSettings",
]

__version__ = "0.1.0"
