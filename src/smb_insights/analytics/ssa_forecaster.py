"""
SSA Forecaster Module
=====================

Forecasts a univariate series with Singular Spectrum Analysis (SSA).

The last ``series_length`` observations are embedded into a trajectory
(Hankel) matrix, decomposed with an SVD, and truncated to the leading
components that carry most of the signal energy (trend and seasonality).
The retained subspace defines a linear recurrence which is iterated forward
to produce the forecast.

Data Flow:
    series -> SSAForecaster.fit(series, FitConfig) -> TrainedModel
    TrainedModel + horizon -> SSAForecaster.predict() -> ForecastResult
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import linalg
from scipy.stats import norm

from ..errors import DecompositionError, InsufficientDataError

logger = logging.getLogger(__name__)

# Share of total singular-value mass the retained subspace must cover
ENERGY_RETENTION = 0.95

# A recurrence needs the last basis coordinates to stay away from unit norm
VERTICALITY_TOLERANCE = 1e-9


def _read_only(values: np.ndarray) -> np.ndarray:
    frozen = np.array(values, dtype=float, copy=True)
    frozen.setflags(write=False)
    return frozen


@dataclass(frozen=True)
class FitConfig:
    """SSA model configuration.

    Attributes:
        window_size: Embedding window L (length of each trajectory column).
        series_length: Number of trailing observations N used for the fit.
        train_size: Minimum history T the series must provide.
        horizon: Number of steps H to forecast.
        confidence_level: Two-sided coverage of the forecast interval (0-1).
    """
    window_size: int = 7
    series_length: int = 60
    train_size: int = 90
    horizon: int = 14
    confidence_level: float = 0.95

    def __post_init__(self) -> None:
        if self.window_size < 1:
            raise ValueError(f"window_size ({self.window_size}) must be >= 1")
        if self.window_size > self.series_length:
            raise ValueError(
                f"window_size ({self.window_size}) must be <= series_length ({self.series_length})"
            )
        if self.series_length > self.train_size:
            raise ValueError(
                f"series_length ({self.series_length}) must be <= train_size ({self.train_size})"
            )
        if self.horizon < 1:
            raise ValueError(f"horizon ({self.horizon}) must be >= 1")
        if not 0 < self.confidence_level < 1:
            raise ValueError(f"confidence_level ({self.confidence_level}) must be in (0, 1)")


@dataclass(frozen=True)
class TrainedModel:
    """Immutable result of an SSA fit.

    Attributes:
        config: The configuration the model was fitted with.
        basis: Retained eigenvectors, shape (L, k), one per column.
        singular_values: Singular values of the retained components.
        recurrence: Linear recurrence coefficients, length L - 1, ordered
            oldest to newest lag.
        residual_variance: Variance of in-sample reconstruction residuals.
        reconstruction: Training window projected onto the retained subspace.
    """
    config: FitConfig
    basis: np.ndarray
    singular_values: np.ndarray
    recurrence: np.ndarray
    residual_variance: float
    reconstruction: np.ndarray

    @property
    def rank(self) -> int:
        return self.basis.shape[1]


@dataclass(frozen=True)
class ForecastResult:
    """Point forecast with confidence bounds.

    Attributes:
        forecasted: Predicted value for each step ahead.
        lower: Lower confidence bound for each step.
        upper: Upper confidence bound for each step.
    """
    forecasted: np.ndarray
    lower: np.ndarray
    upper: np.ndarray

    def __len__(self) -> int:
        return len(self.forecasted)

    @property
    def half_width(self) -> np.ndarray:
        return self.upper - self.forecasted


def trajectory_matrix(values: np.ndarray, window_size: int) -> np.ndarray:
    """Embed a series into its (L, N - L + 1) Hankel matrix.

    Column ``i`` is the length-L subsequence starting at offset ``i``.
    """
    return np.lib.stride_tricks.sliding_window_view(values, window_size).T.copy()


def diagonal_average(matrix: np.ndarray) -> np.ndarray:
    """Map an (L, K) matrix back to a series by averaging its anti-diagonals."""
    rows, cols = matrix.shape
    positions = np.add.outer(np.arange(rows), np.arange(cols)).ravel()
    length = rows + cols - 1
    sums = np.bincount(positions, weights=matrix.ravel(), minlength=length)
    counts = np.bincount(positions, minlength=length)
    return sums / counts


class SSAForecaster:
    """Fits SSA models and extrapolates them.

    Each call to ``fit`` produces a fresh ``TrainedModel``; ``predict`` is a
    pure function of the model and the horizon, so one model can be
    forecast repeatedly with different horizons.

    Example:
        >>> forecaster = SSAForecaster()
        >>> model = forecaster.fit(units, FitConfig(train_size=60))
        >>> result = forecaster.predict(model, horizon=14)
    """

    def __init__(self, energy_retention: float = ENERGY_RETENTION) -> None:
        """Initialize the forecaster.

        Args:
            energy_retention: Share of total singular-value mass the
                retained components must cover, in (0, 1].
        """
        if not 0 < energy_retention <= 1:
            raise ValueError(f"energy_retention ({energy_retention}) must be in (0, 1]")
        self.energy_retention = energy_retention
        self.model: TrainedModel | None = None  # Most recent fit

    def _select_rank(self, singular_values: np.ndarray, window_size: int) -> int:
        """Number of leading components needed to reach the retention target."""
        cumulative = np.cumsum(singular_values) / singular_values.sum()
        rank = int(np.searchsorted(cumulative, self.energy_retention)) + 1

        # A full-rank subspace of R^L satisfies no recurrence, so keep at most L - 1
        max_rank = max(1, min(window_size - 1, len(singular_values)))
        return min(max(rank, 1), max_rank)

    def fit(self, series, config: FitConfig) -> TrainedModel:
        """Fit an SSA model on the tail of a series.

        Args:
            series: Observations ordered oldest to newest (pd.Series or
                any 1-D array-like of floats).
            config: Window, length and horizon settings.

        Returns:
            A new TrainedModel.

        Raises:
            InsufficientDataError: If the series is shorter than train_size.
            DecompositionError: If the window is degenerate or the SVD fails.
        """
        values = np.asarray(series, dtype=float)
        if len(values) < config.train_size:
            raise InsufficientDataError(
                f"Series has {len(values)} observations, while {config.train_size} are required.",
                available=len(values),
                required=config.train_size,
            )

        # Step 1: Training window
        window = values[-config.series_length:]
        if not np.all(np.isfinite(window)):
            raise DecompositionError("Training window contains non-finite values.")

        # Step 2: Trajectory matrix
        L = config.window_size
        trajectory = trajectory_matrix(window, L)

        # Step 3: Decomposition, singular values come back in descending order
        try:
            U, s, _ = linalg.svd(trajectory, full_matrices=False)
        except linalg.LinAlgError as exc:
            raise DecompositionError(f"SVD did not converge: {exc}") from exc

        if s[0] <= np.finfo(float).eps * max(1.0, np.abs(window).max()):
            raise DecompositionError("Training window has no signal energy (all zeros).")

        # Canonical sign: largest-magnitude entry of each eigenvector is positive
        pivots = np.argmax(np.abs(U), axis=0)
        signs = np.sign(U[pivots, np.arange(U.shape[1])])
        U = U * np.where(signs == 0, 1.0, signs)

        # Step 4: Retained subspace
        rank = self._select_rank(s, L)
        basis = U[:, :rank]

        # Step 5: Reconstruction and residual variance
        reconstruction = diagonal_average(basis @ (basis.T @ trajectory))
        residual_variance = float(np.var(window - reconstruction))

        # Step 6: Linear recurrence from the last coordinates of the basis
        last_row = basis[-1, :]
        verticality = float(last_row @ last_row)
        if verticality >= 1.0 - VERTICALITY_TOLERANCE:
            raise DecompositionError(
                f"No linear recurrence exists for window_size={L}; retry with a larger window."
            )
        recurrence = (basis[:-1, :] @ last_row) / (1.0 - verticality)

        model = TrainedModel(
            config=config,
            basis=_read_only(basis),
            singular_values=_read_only(s[:rank]),
            recurrence=_read_only(recurrence),
            residual_variance=residual_variance,
            reconstruction=_read_only(reconstruction),
        )
        logger.debug(
            "SSA fit: L=%d N=%d rank=%d residual_variance=%.4f",
            L, len(window), rank, residual_variance,
        )
        self.model = model
        return model

    def predict(self, model: TrainedModel, horizon: int | None = None) -> ForecastResult:
        """Extrapolate a fitted model.

        Args:
            model: Output of ``fit``.
            horizon: Steps to forecast; defaults to the model's configured
                horizon.

        Returns:
            ForecastResult whose half-width at step i is
            z(c) * sqrt(residual_variance * i).
        """
        horizon = model.config.horizon if horizon is None else horizon
        if horizon < 1:
            raise ValueError(f"horizon ({horizon}) must be >= 1")

        lags = len(model.recurrence)
        path = np.empty(lags + horizon)
        path[:lags] = model.reconstruction[len(model.reconstruction) - lags:]
        for step in range(horizon):
            path[lags + step] = model.recurrence @ path[step:step + lags]
        forecasted = path[lags:]

        z = norm.ppf(0.5 + model.config.confidence_level / 2.0)
        half_width = z * np.sqrt(model.residual_variance * np.arange(1, horizon + 1))

        return ForecastResult(
            forecasted=_read_only(forecasted),
            lower=_read_only(forecasted - half_width),
            upper=_read_only(forecasted + half_width),
        )

    def forecast(self, horizon: int | None = None) -> ForecastResult:
        """Predict from the most recent fit.

        Raises:
            ValueError: If the forecaster has not been fitted.
        """
        if self.model is None:
            raise ValueError("Forecaster must be fitted before forecasting. Call .fit() first.")
        return self.predict(self.model, horizon)
