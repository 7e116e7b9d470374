"""Tests for the spectral residual anomaly scorer."""
import numpy as np
import pandas as pd
import pytest

from smb_insights.analytics.anomaly_scorer import (
    AnomalyScorer,
    magnitude_bar,
    magnitudes,
    raw_scores,
    spectral_residual,
)


class TestHelpers:
    def test_magnitude_bar_decreases_with_sensitivity(self):
        """Higher sensitivity means a lower bar."""
        bars = [magnitude_bar(s) for s in (1, 50, 95, 100)]

        assert bars == sorted(bars, reverse=True)
        assert magnitude_bar(95) == pytest.approx(2.345, abs=2e-3)

    def test_zero_sensitivity_disables_relative_rule(self):
        assert magnitude_bar(0) == np.inf

    @pytest.mark.parametrize("sensitivity", [-1, 101])
    def test_sensitivity_out_of_range(self, sensitivity):
        with pytest.raises(ValueError):
            magnitude_bar(sensitivity)

    def test_spectral_residual_highlights_spike(self):
        """The saliency map peaks at an isolated spike."""
        values = np.full(64, 10.0)
        values[40] = 100.0

        assert np.argmax(spectral_residual(values)) == 40

    def test_constant_window_scores_zero(self):
        np.testing.assert_array_equal(raw_scores(np.full(10, 3.0)), np.zeros(10))

    def test_magnitudes_zero_spread(self):
        """A window with identical raw scores has zero magnitude everywhere."""
        np.testing.assert_array_equal(magnitudes(np.full(5, 0.2)), np.zeros(5))

    def test_magnitudes_are_z_scores(self):
        mag = magnitudes(np.array([1.0, 2.0, 3.0]))

        assert mag.mean() == pytest.approx(0.0)
        assert mag.std() == pytest.approx(1.0)


class TestAnomalyScorer:
    def test_flags_single_spike(self, spike_series):
        """A 10x spike is flagged and the flat points around it are not."""
        records = list(AnomalyScorer().score(spike_series))
        flagged = [r.timestamp for r in records if r.is_anomaly]

        assert flagged == [spike_series.index[100]]

    def test_noisy_neighbours_not_flagged(self):
        """Every batch whose window holds the spike flags only the spike."""
        rng = np.random.default_rng(5)
        values = 100 + rng.normal(0, 1.0, 192)
        values[100] = 1000.0
        records = list(AnomalyScorer().score(values))

        # Batches from position 64 on are scored in windows containing the spike
        flagged = [r.timestamp for r in records if r.is_anomaly and r.timestamp >= 64]
        assert flagged == [100]

    def test_constant_series(self):
        """A constant series yields zero magnitude and no flags."""
        series = pd.Series(np.full(150, 250.0), index=pd.date_range('2024-01-01', periods=150))
        records = list(AnomalyScorer().score(series))

        assert records
        assert all(r.magnitude == 0 for r in records)
        assert all(r.raw_score == 0 for r in records)
        assert not any(r.is_anomaly for r in records)

    def test_warmup(self, spike_series):
        """No record is emitted before batch_size - 1 points of history exist."""
        records = list(AnomalyScorer(batch_size=64).score(spike_series))

        assert len(records) == len(spike_series) - 63
        assert records[0].timestamp == spike_series.index[63]
        assert records[-1].timestamp == spike_series.index[-1]

    def test_one_record_per_point(self, spike_series):
        """Batches never emit the same point twice."""
        records = list(AnomalyScorer(batch_size=16).score(spike_series))
        timestamps = [r.timestamp for r in records]

        assert len(timestamps) == len(set(timestamps))
        assert timestamps == sorted(timestamps)

    def test_short_series_emits_nothing(self):
        assert list(AnomalyScorer(batch_size=64).score(np.arange(30.0))) == []

    def test_deterministic(self, spike_series):
        """Identical input and settings give identical records."""
        first = list(AnomalyScorer().score(spike_series))
        second = list(AnomalyScorer().score(spike_series.copy()))

        assert first == second

    def test_restartable(self, spike_series):
        """The returned stream can be iterated more than once."""
        scores = AnomalyScorer().score(spike_series)

        assert list(scores) == list(scores)

    def test_lazy(self, spike_series):
        """Records are produced on demand."""
        stream = iter(AnomalyScorer().score(spike_series))
        first = next(stream)

        assert first.timestamp == spike_series.index[63]

    def test_threshold_rule(self):
        """A negative threshold flags every point through the absolute rule."""
        records = list(AnomalyScorer(batch_size=8).score(np.full(20, 5.0), threshold=-1.0))

        assert records
        assert all(r.is_anomaly for r in records)

    def test_array_input_uses_positions(self):
        records = list(AnomalyScorer(batch_size=4).score([1.0, 2.0, 3.0, 4.0, 5.0]))

        assert [r.timestamp for r in records] == [3, 4]
        assert [r.value for r in records] == [4.0, 5.0]

    @pytest.mark.parametrize("kwargs", [{"batch_size": 0}, {"sensitivity": 120}])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            AnomalyScorer(**kwargs)
