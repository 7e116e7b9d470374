"""Run settings for the forecast and anomaly tools.

Defaults match the reference batch reports; every field can be overridden
from the command line.
"""

from dataclasses import dataclass

from .analytics.ssa_forecaster import FitConfig

DEFAULT_MIN_ROWS = 30


@dataclass(frozen=True)
class ForecastSettings:
    """Settings for the demand forecast report.

    Attributes:
        window_size: SSA embedding window.
        series_length: Trailing observations used for each fit.
        train_size: History a SKU must provide.
        horizon: Days to forecast.
        confidence_level: Coverage of the forecast interval (0-1).
        staff_capacity_per_day: Orders one staff member handles per day.
        min_rows: Floor on the rows required per SKU.
        input_path: Sales CSV (date,sku,units).
        max_workers: Thread pool size when several SKUs are forecast.
    """
    window_size: int = 7
    series_length: int = 60
    train_size: int = 90
    horizon: int = 14
    confidence_level: float = 0.95
    staff_capacity_per_day: int = 40
    min_rows: int = DEFAULT_MIN_ROWS
    input_path: str = "Data/sales.csv"
    max_workers: int = 4

    def __post_init__(self) -> None:
        # FitConfig carries the SSA invariants
        self.to_fit_config()
        if self.staff_capacity_per_day <= 0:
            raise ValueError(
                f"staff_capacity_per_day ({self.staff_capacity_per_day}) must be positive"
            )
        if self.max_workers < 1:
            raise ValueError(f"max_workers ({self.max_workers}) must be >= 1")

    @property
    def required_rows(self) -> int:
        return max(self.train_size, self.min_rows)

    def to_fit_config(self) -> FitConfig:
        return FitConfig(
            window_size=self.window_size,
            series_length=self.series_length,
            train_size=self.train_size,
            horizon=self.horizon,
            confidence_level=self.confidence_level,
        )


@dataclass(frozen=True)
class AnomalySettings:
    """Settings for the transaction anomaly report.

    Attributes:
        threshold: Raw score above which a point is always flagged.
        batch_size: Points scored per batch.
        sensitivity: Percentile knob (0-100) for the relative rule.
        min_rows: Rows required before scoring.
        input_path: Transactions CSV (date,amount).
        output_path: Where the anomaly CSV is written.
    """
    threshold: float = 0.35
    batch_size: int = 64
    sensitivity: float = 95
    min_rows: int = DEFAULT_MIN_ROWS
    input_path: str = "Data/input.csv"
    output_path: str = "Data/anomalies.csv"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size ({self.batch_size}) must be >= 1")
        if not 0 <= self.sensitivity <= 100:
            raise ValueError(f"sensitivity ({self.sensitivity}) must be in [0, 100]")
