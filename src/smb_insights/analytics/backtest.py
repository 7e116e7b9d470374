"""Backtest Harness - Scores SSA forecast accuracy on a held-out tail."""

import logging
from dataclasses import dataclass

import numpy as np
from sklearn.metrics import mean_absolute_error

from .ssa_forecaster import FitConfig, SSAForecaster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestMetrics:
    """Forecast accuracy over the holdout.

    Attributes:
        mae: Mean absolute error over all holdout steps.
        mape: Mean absolute percentage error (as a fraction) over the
            holdout steps whose actual value is non-zero; 0.0 if none are.
        horizon: Number of held-out steps h.
    """
    mae: float
    mape: float
    horizon: int


def holdout_horizon(length: int, horizon: int) -> int:
    """Holdout size: one tenth of the series, at least 1, at most ``horizon``."""
    return min(horizon, max(1, length // 10))


class BacktestHarness:
    """Refits the forecaster on a prefix and compares it with the tail.

    Uses the same fit/predict contract as a production forecast, with a
    shorter training history. Each evaluation gets its own SSAForecaster so
    no model state is shared with the caller.
    """

    def __init__(self, forecaster_factory=SSAForecaster) -> None:
        """Initialize the harness.

        Args:
            forecaster_factory: Callable returning a fresh SSAForecaster.
        """
        self.forecaster_factory = forecaster_factory

    @staticmethod
    def refit_config(config: FitConfig, train_length: int, horizon: int) -> FitConfig:
        """Shrink a config so it fits a training prefix of ``train_length``."""
        train_size = min(config.train_size, max(2, train_length - 1))
        series_length = min(config.series_length, train_size)
        return FitConfig(
            window_size=min(config.window_size, series_length),
            series_length=series_length,
            train_size=train_size,
            horizon=horizon,
            confidence_level=config.confidence_level,
        )

    def evaluate(self, series, config: FitConfig) -> BacktestMetrics:
        """Backtest a configuration on a series.

        Args:
            series: Observations ordered oldest to newest.
            config: The configuration used for the production forecast.

        Returns:
            BacktestMetrics over the last h points.

        Raises:
            InsufficientDataError: If the training prefix is too short.
            DecompositionError: If the refit fails.
        """
        values = np.asarray(series, dtype=float)
        h = holdout_horizon(len(values), config.horizon)
        train, actual = values[:-h], values[-h:]

        refit = self.refit_config(config, len(train), h)
        forecaster = self.forecaster_factory()
        model = forecaster.fit(train, refit)
        predicted = forecaster.predict(model, h).forecasted

        mae = float(mean_absolute_error(actual, predicted))

        # Zero actuals are left out of MAPE rather than counted as infinite error
        nonzero = actual != 0
        if nonzero.any():
            mape = float(np.mean(np.abs((predicted[nonzero] - actual[nonzero]) / actual[nonzero])))
        else:
            mape = 0.0

        logger.info("Backtest over last %d points: MAE=%.4f MAPE=%.4f", h, mae, mape)
        return BacktestMetrics(mae=mae, mape=mape, horizon=h)
