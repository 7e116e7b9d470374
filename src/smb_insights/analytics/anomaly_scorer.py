"""
Anomaly Scorer Module
=====================

Flags unusual transaction amounts with the spectral residual (SR) method.

The series is processed in non-overlapping batches. Each batch is scored
together with up to ``batch_size - 1`` preceding points so that its first
points are not scored against a cold boundary:

    window -> FFT -> log amplitude -> minus its moving average (residual)
           -> inverse FFT with original phase -> saliency
    saliency -> relative to its trailing mean -> raw score
    raw score -> z-score over the window -> magnitude

A point is an anomaly when its raw score exceeds the fixed threshold or its
magnitude exceeds the sensitivity-derived bar.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator

import numpy as np
import pandas as pd
from scipy.ndimage import uniform_filter1d
from scipy.stats import norm

logger = logging.getLogger(__name__)

MIN_EPS = 1e-8
AVERAGING_WINDOW = 3  # Moving average over the log-amplitude spectrum
SALIENCY_WINDOW = 21  # Trailing points the saliency is compared against


@dataclass(frozen=True)
class AnomalyRecord:
    """Score for a single observation.

    Attributes:
        timestamp: When the observation was made.
        value: The observed amount.
        is_anomaly: Whether either detection rule fired.
        raw_score: Saliency relative to its trailing local mean.
        magnitude: Z-score of the raw score within its scoring window.
    """
    timestamp: Any
    value: float
    is_anomaly: bool
    raw_score: float
    magnitude: float


def magnitude_bar(sensitivity: float) -> float:
    """Magnitude above which the relative rule flags a point.

    ``sensitivity`` (0-100) is the upper-tail mass of a standard normal, in
    hundredths of a percent, that lies above the bar. Higher sensitivity
    means a lower bar; 0 disables the rule.
    """
    if not 0 <= sensitivity <= 100:
        raise ValueError(f"sensitivity ({sensitivity}) must be in [0, 100]")
    return float(norm.isf(sensitivity / 10000.0))


def spectral_residual(values: np.ndarray) -> np.ndarray:
    """Saliency map of a window: the time-domain image of its spectral residual."""
    spectrum = np.fft.fft(values)
    log_amplitude = np.log(np.maximum(np.abs(spectrum), MIN_EPS))
    expected = uniform_filter1d(log_amplitude, size=AVERAGING_WINDOW, mode="wrap")
    residual = log_amplitude - expected
    return np.abs(np.fft.ifft(np.exp(residual + 1j * np.angle(spectrum))))


def raw_scores(values: np.ndarray) -> np.ndarray:
    """Per-point raw anomaly scores for one window.

    A constant window has no spectral content beyond its mean, so every
    point scores zero.
    """
    if np.ptp(values) == 0:
        return np.zeros(len(values))

    saliency = spectral_residual(values)
    local_mean = (
        pd.Series(saliency).rolling(window=SALIENCY_WINDOW, min_periods=1).mean().to_numpy()
    )
    safe_mean = np.maximum(local_mean, MIN_EPS)
    return np.where(local_mean > MIN_EPS, (saliency - local_mean) / safe_mean, 0.0)


def magnitudes(scores: np.ndarray) -> np.ndarray:
    """Z-score normalize raw scores; a degenerate window maps to all zeros."""
    spread = float(np.std(scores))
    if spread <= MIN_EPS or not np.isfinite(spread):
        return np.zeros(len(scores))
    return (scores - scores.mean()) / spread


class AnomalyScores:
    """Lazy stream of AnomalyRecord.

    Iterating starts over from the first batch each time, so the same
    result can be consumed more than once.
    """

    def __init__(
        self,
        timestamps,
        values: np.ndarray,
        batch_size: int,
        threshold: float,
        bar: float,
    ) -> None:
        self._timestamps = timestamps
        self._values = values
        self.batch_size = batch_size
        self.threshold = threshold
        self.bar = bar

    def __iter__(self) -> Iterator[AnomalyRecord]:
        values = self._values
        warmup = self.batch_size - 1

        for start in range(0, len(values), self.batch_size):
            stop = min(start + self.batch_size, len(values))
            if stop - 1 < warmup:
                continue  # Still inside the warm-up

            lookback = max(0, start - warmup)
            raw = raw_scores(values[lookback:stop])
            mag = magnitudes(raw)
            logger.debug("Scored window [%d, %d) for batch [%d, %d)", lookback, stop, start, stop)

            # Emit only this batch's points, never the lookback
            for position in range(max(start, warmup), stop):
                i = position - lookback
                yield AnomalyRecord(
                    timestamp=self._timestamps[position],
                    value=float(values[position]),
                    is_anomaly=bool(mag[i] > self.bar or raw[i] > self.threshold),
                    raw_score=float(raw[i]),
                    magnitude=float(mag[i]),
                )


class AnomalyScorer:
    """Scores a series for anomalous points.

    Example:
        >>> scorer = AnomalyScorer(batch_size=64, threshold=0.35, sensitivity=95)
        >>> flagged = [r for r in scorer.score(amounts) if r.is_anomaly]
    """

    def __init__(
        self,
        batch_size: int = 64,
        threshold: float = 0.35,
        sensitivity: float = 95,
    ) -> None:
        """Initialize the scorer.

        Args:
            batch_size: Points scored per batch; also sets the warm-up and
                lookback length (batch_size - 1).
            threshold: Raw score above which a point is always flagged.
            sensitivity: Percentile knob (0-100) for the relative rule.
        """
        self._validate(batch_size, sensitivity)
        self.batch_size = batch_size
        self.threshold = threshold
        self.sensitivity = sensitivity

    @staticmethod
    def _validate(batch_size: int, sensitivity: float) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size ({batch_size}) must be >= 1")
        if not 0 <= sensitivity <= 100:
            raise ValueError(f"sensitivity ({sensitivity}) must be in [0, 100]")

    def score(
        self,
        series,
        batch_size: int | None = None,
        threshold: float | None = None,
        sensitivity: float | None = None,
    ) -> AnomalyScores:
        """Score every point past the warm-up.

        Args:
            series: pd.Series indexed by timestamp, or a 1-D array-like (in
                which case positions stand in for timestamps).
            batch_size: Overrides the configured batch size.
            threshold: Overrides the configured raw-score threshold.
            sensitivity: Overrides the configured sensitivity.

        Returns:
            AnomalyScores yielding one record per point from index
            batch_size - 1 onward.
        """
        batch_size = self.batch_size if batch_size is None else batch_size
        threshold = self.threshold if threshold is None else threshold
        sensitivity = self.sensitivity if sensitivity is None else sensitivity
        self._validate(batch_size, sensitivity)

        if isinstance(series, pd.Series):
            timestamps = series.index
            values = series.to_numpy(dtype=float)
        else:
            values = np.asarray(series, dtype=float)
            timestamps = np.arange(len(values))

        if len(values) < batch_size:
            logger.warning(
                "Series has %d points, fewer than batch_size=%d; no records will be emitted.",
                len(values), batch_size,
            )

        return AnomalyScores(
            timestamps,
            values,
            batch_size=batch_size,
            threshold=threshold,
            bar=magnitude_bar(sensitivity),
        )
