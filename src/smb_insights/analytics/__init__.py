"""
Time-Series Analytics
=====================

Core components for small-business batch reports:

1. SSAForecaster - Forecasts demand with Singular Spectrum Analysis
2. AnomalyScorer - Flags unusual amounts with the spectral residual method
3. BacktestHarness - Refits on a prefix and scores the held-out tail
4. StaffingPlanner - Converts forecast demand into headcount
5. ForecastPipeline - Orchestrates the forecast workflow per series

Data Flow:
    series -> SSAForecaster.fit() -> TrainedModel
                                        |
                SSAForecaster.predict() -> ForecastResult -> StaffingPlanner.plan()
    series -> BacktestHarness.evaluate() -> BacktestMetrics
    series -> AnomalyScorer.score() -> AnomalyRecord stream
"""

from .ssa_forecaster import FitConfig, ForecastResult, SSAForecaster, TrainedModel
from .anomaly_scorer import AnomalyRecord, AnomalyScorer
from .backtest import BacktestHarness, BacktestMetrics
from .staffing_planner import StaffingPlanner, StaffingRecommendation
from .pipeline import ForecastPipeline, PipelineResult, SeriesOutcome

__all__ = [
    "FitConfig",
    "ForecastResult",
    "SSAForecaster",
    "TrainedModel",
    "AnomalyRecord",
    "AnomalyScorer",
    "BacktestHarness",
    "BacktestMetrics",
    "StaffingPlanner",
    "StaffingRecommendation",
    "ForecastPipeline",
    "PipelineResult",
    "SeriesOutcome",
]
