"""
Pipeline Module (The Manager)
=============================

Orchestrates the forecast workflow: Fit -> Forecast -> Backtest -> Staffing.
Connects SSAForecaster, BacktestHarness and StaffingPlanner into an
end-to-end run per series, and fans several series out over a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import pandas as pd

from ..config import ForecastSettings
from ..errors import InsightsError
from .backtest import BacktestHarness, BacktestMetrics
from .ssa_forecaster import ForecastResult, SSAForecaster
from .staffing_planner import StaffingPlanner, StaffingRecommendation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Complete result from running the pipeline on one series.

    Attributes:
        key: Series key (e.g. the SKU).
        dates: Forecast dates, starting the day after the last observation.
        forecast: Point forecast and confidence bounds.
        backtest: Accuracy of the same configuration on a held-out tail.
        staffing: Per-day headcount derived from the forecast.
    """
    key: str
    dates: pd.DatetimeIndex
    forecast: ForecastResult
    backtest: BacktestMetrics
    staffing: list[StaffingRecommendation]


@dataclass(frozen=True)
class SeriesOutcome:
    """Result of one series in a multi-series run; exactly one field is set."""
    key: str
    result: PipelineResult | None = None
    error: InsightsError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ForecastPipeline:
    """Runs forecasting, backtesting and staffing for a series.

    Every run builds its own SSAForecaster, so series share no model state
    and can be processed concurrently.

    Workflow (run method):
        1. Fit SSAForecaster on the series and predict the horizon
        2. Backtest the same configuration with BacktestHarness
        3. Convert the forecast into headcount with StaffingPlanner
    """

    def __init__(self, settings: ForecastSettings | None = None) -> None:
        """Initialize the pipeline.

        Args:
            settings: Forecast settings; defaults to ForecastSettings().
        """
        self.settings = settings or ForecastSettings()
        self.harness = BacktestHarness()
        self.planner = StaffingPlanner(self.settings.staff_capacity_per_day)

    def run(self, series: pd.Series, key: str | None = None) -> PipelineResult:
        """Execute the full workflow for one series.

        Args:
            series: Daily observations indexed by timestamp.
            key: Label for the result; defaults to ``series.name``.

        Returns:
            PipelineResult with forecast, backtest metrics and staffing.

        Raises:
            InsufficientDataError: If the series is shorter than train_size.
            DecompositionError: If the SSA fit fails.
        """
        key = series.name if key is None else key
        config = self.settings.to_fit_config()

        # Step 1: Forecast
        forecaster = SSAForecaster()
        model = forecaster.fit(series, config)
        forecast = forecaster.predict(model, config.horizon)
        dates = pd.date_range(
            start=series.index[-1].normalize() + pd.Timedelta(days=1),
            periods=config.horizon,
            freq="D",
        )

        # Step 2: Backtest
        backtest = self.harness.evaluate(series, config)

        # Step 3: Staffing
        staffing = self.planner.plan(dates, forecast.forecasted)

        logger.info("Forecast for %s: rank=%d, backtest MAE=%.2f", key, model.rank, backtest.mae)
        return PipelineResult(
            key=key,
            dates=dates,
            forecast=forecast,
            backtest=backtest,
            staffing=staffing,
        )

    def _run_outcome(self, key: str, series: pd.Series) -> SeriesOutcome:
        try:
            return SeriesOutcome(key=key, result=self.run(series, key))
        except InsightsError as exc:
            logger.warning("Forecast for %s failed: %s", key, exc)
            return SeriesOutcome(key=key, error=exc)

    def run_many(self, store, keys) -> list[SeriesOutcome]:
        """Run the pipeline on several series from a SeriesStore.

        A failure in one series is recorded in its outcome and does not
        affect the others.

        Args:
            store: SeriesStore holding the series.
            keys: Keys to process.

        Returns:
            One SeriesOutcome per key, in the order given.
        """
        keys = list(keys)
        workers = min(self.settings.max_workers, max(1, len(keys)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._run_outcome, key, store.series(key)) for key in keys]
            return [future.result() for future in futures]
