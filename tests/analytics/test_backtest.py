"""Tests for the backtest harness."""
import numpy as np
import pytest

from smb_insights.analytics.backtest import BacktestHarness, holdout_horizon
from smb_insights.analytics.ssa_forecaster import FitConfig, ForecastResult
from smb_insights.errors import InsufficientDataError


class FixedForecaster:
    """Forecaster stub that predicts a fixed path and records its fit config."""

    fitted = []

    def __init__(self, path):
        self.path = np.asarray(path, dtype=float)

    def fit(self, series, config):
        FixedForecaster.fitted.append((len(series), config))
        return config

    def predict(self, model, horizon):
        values = self.path[:horizon]
        return ForecastResult(forecasted=values, lower=values, upper=values)


def harness_with(path):
    FixedForecaster.fitted = []
    return BacktestHarness(forecaster_factory=lambda: FixedForecaster(path))


class TestHoldoutHorizon:
    @pytest.mark.parametrize("length,horizon,expected", [
        (90, 14, 9),
        (300, 14, 14),
        (5, 14, 1),
        (40, 2, 2),
    ])
    def test_values(self, length, horizon, expected):
        """Holdout is a tenth of the series, within [1, horizon]."""
        assert holdout_horizon(length, horizon) == expected


class TestRefitConfig:
    def test_clamps_to_training_prefix(self):
        """Sizes shrink so the refit config stays valid on a short prefix."""
        config = BacktestHarness.refit_config(FitConfig(), train_length=50, horizon=5)

        assert config.train_size == 49
        assert config.series_length == 49
        assert config.window_size == 7
        assert config.horizon == 5

    def test_keeps_sizes_on_long_prefix(self):
        config = BacktestHarness.refit_config(FitConfig(), train_length=200, horizon=14)

        assert config.train_size == 90
        assert config.series_length == 60

    def test_minimum_train_size(self):
        config = BacktestHarness.refit_config(FitConfig(), train_length=1, horizon=1)

        assert config.train_size == 2
        assert config.window_size == 2


class TestEvaluate:
    def test_metrics_on_seasonal_series(self, seasonal_series):
        """A real SSA backtest yields small, non-negative errors."""
        metrics = BacktestHarness().evaluate(seasonal_series, FitConfig())

        assert metrics.horizon == 9
        assert 0 <= metrics.mae < 2.0
        assert 0 <= metrics.mape < 0.05

    def test_mape_skips_zero_actuals(self):
        """Zero actual values count toward MAE but not MAPE."""
        series = np.concatenate([np.full(18, 7.0), [0.0, 4.0]])
        metrics = harness_with([1.0, 5.0]).evaluate(series, FitConfig(horizon=14))

        assert metrics.horizon == 2
        assert metrics.mae == pytest.approx(1.0)
        assert metrics.mape == pytest.approx(0.25)

    def test_all_zero_actuals(self):
        series = np.concatenate([np.full(9, 3.0), [0.0]])
        metrics = harness_with([2.0]).evaluate(series, FitConfig())

        assert metrics.mae == pytest.approx(2.0)
        assert metrics.mape == 0.0

    def test_refits_on_prefix(self):
        """The forecaster only sees the training prefix."""
        harness_with(np.zeros(14)).evaluate(np.arange(100.0), FitConfig())
        train_length, config = FixedForecaster.fitted[0]

        assert train_length == 90
        assert config.train_size == 89
        assert config.horizon == 10

    def test_too_short_series(self):
        """A two-point series leaves too little to refit."""
        with pytest.raises(InsufficientDataError):
            BacktestHarness().evaluate(np.array([1.0, 2.0]), FitConfig())
