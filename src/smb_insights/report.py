"""Console and CSV rendering of analytics results."""

from pathlib import Path

import pandas as pd

from .errors import OutputWriteError

ANOMALY_COLUMNS = ["date", "is_anomaly", "raw_score", "magnitude"]


def format_number(value: float) -> str:
    """Up to two decimals with trailing zeros dropped (95.5, 12, 3.14)."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_forecast_report(result, confidence_level: float = 0.95) -> list[str]:
    """Render a PipelineResult as report lines.

    Args:
        result: PipelineResult for one series.
        confidence_level: Coverage used for the interval label.

    Returns:
        Lines for the forecast, the backtest summary and the staffing plan.
    """
    forecast = result.forecast
    label = f"{confidence_level * 100:g}% CI"
    lines = [f"Forecast for next {len(forecast)} days"]

    for i, date in enumerate(result.dates):
        lines.append(
            f"{date:%Y-%m-%d}: {format_number(forecast.forecasted[i])} "
            f"({label}: {format_number(forecast.lower[i])}–{format_number(forecast.upper[i])})"
        )

    backtest = result.backtest
    lines.append(
        f"Backtest (last {backtest.horizon} days): "
        f"Mean Absolute Error={format_number(backtest.mae)}, "
        f"Mean Absolute Percentage Error={backtest.mape:.2%}"
    )

    for rec in result.staffing:
        lines.append(
            f"{rec.date:%Y-%m-%d}: Expected {format_number(rec.expected_orders)} orders "
            f"→ {rec.staff_needed} staff needed"
        )
    return lines


def anomaly_frame(records) -> pd.DataFrame:
    """Tabulate AnomalyRecords as (date, is_anomaly, raw_score, magnitude)."""
    return pd.DataFrame(
        [(r.timestamp, r.is_anomaly, r.raw_score, r.magnitude) for r in records],
        columns=ANOMALY_COLUMNS,
    )


def write_anomaly_csv(records, path) -> int:
    """Write anomaly records to ``path``, creating parent directories.

    Returns:
        Number of records written.

    Raises:
        OutputWriteError: If the file or its directory cannot be written.
    """
    frame = anomaly_frame(records)
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(path, index=False)
    except OSError as exc:
        raise OutputWriteError(path, exc.strerror or exc) from exc
    return len(frame)
