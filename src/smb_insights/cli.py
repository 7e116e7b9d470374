"""
Command-line entry points.

Usage:
    smb-forecast --sku SKU-001 [--input Data/sales.csv] [--horizon 14]
    smb-forecast --sku SKU-001 --sku SKU-002 --workers 2
    smb-anomalies [--input Data/input.csv] [--output Data/anomalies.csv]

Expected failures (missing file, too little data, bad arguments) print a
message to stderr and return exit status 1.
"""

import argparse
import logging
import sys

from .analytics import AnomalyScorer, ForecastPipeline
from .config import AnomalySettings, ForecastSettings
from .errors import (
    ConfigurationError,
    InsightsError,
    InsufficientDataError,
    MissingRequiredArgumentError,
)
from .report import format_forecast_report, write_anomaly_csv
from .series_store import TRANSACTIONS_KEY, load_sales, load_transactions

_FORECAST_DEFAULTS = ForecastSettings()
_ANOMALY_DEFAULTS = AnomalySettings()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _settings(cls, **kwargs):
    try:
        return cls(**kwargs)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def _add_log_level(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )


def build_forecast_parser() -> argparse.ArgumentParser:
    d = _FORECAST_DEFAULTS
    parser = argparse.ArgumentParser(
        prog="smb-forecast",
        description="Forecast daily unit sales for a SKU and recommend staffing.",
    )
    parser.add_argument("--sku", action="append", default=[], help="SKU to forecast (repeatable)")
    parser.add_argument("--input", default=d.input_path, help="Sales CSV (date,sku,units)")
    parser.add_argument("--horizon", type=int, default=d.horizon, help="Days to forecast")
    parser.add_argument("--window-size", type=int, default=d.window_size, help="SSA window length")
    parser.add_argument("--series-length", type=int, default=d.series_length, help="Observations per fit")
    parser.add_argument("--train-size", type=int, default=d.train_size, help="History required per SKU")
    parser.add_argument("--confidence", type=float, default=d.confidence_level, help="Interval coverage (0-1)")
    parser.add_argument("--capacity", type=int, default=d.staff_capacity_per_day, help="Orders per staff per day")
    parser.add_argument("--workers", type=int, default=d.max_workers, help="Threads for multiple SKUs")
    _add_log_level(parser)
    return parser


def build_anomaly_parser() -> argparse.ArgumentParser:
    d = _ANOMALY_DEFAULTS
    parser = argparse.ArgumentParser(
        prog="smb-anomalies",
        description="Flag unusual transaction amounts with the spectral residual method.",
    )
    parser.add_argument("--input", default=d.input_path, help="Transactions CSV (date,amount)")
    parser.add_argument("--output", default=d.output_path, help="Anomaly CSV to write")
    parser.add_argument("--threshold", type=float, default=d.threshold, help="Raw score threshold")
    parser.add_argument("--batch-size", type=int, default=d.batch_size, help="Points per scoring batch")
    parser.add_argument("--sensitivity", type=float, default=d.sensitivity, help="Sensitivity (0-100)")
    _add_log_level(parser)
    return parser


def _forecast(args: argparse.Namespace) -> int:
    if not args.sku:
        raise MissingRequiredArgumentError("SKU not specified. Use --sku <SKU> to specify the SKU.")

    settings = _settings(
        ForecastSettings,
        window_size=args.window_size,
        series_length=args.series_length,
        train_size=args.train_size,
        horizon=args.horizon,
        confidence_level=args.confidence,
        staff_capacity_per_day=args.capacity,
        input_path=args.input,
        max_workers=args.workers,
    )
    store = load_sales(settings.input_path)

    # Row checks per SKU before any fitting
    required = settings.required_rows
    failures = []
    ready = []
    skus = list(dict.fromkeys(args.sku))
    for sku in skus:
        available = store.row_count(sku)
        if available < required:
            failures.append((sku, InsufficientDataError(
                f"Not enough sales. There are {available} sales available, while {required} are required.",
                available=available,
                required=required,
            )))
        else:
            ready.append(sku)

    if len(skus) == 1 and failures:
        raise failures[0][1]

    outcomes = ForecastPipeline(settings).run_many(store, ready)
    multiple = len(skus) > 1
    for outcome in outcomes:
        if not outcome.ok:
            failures.append((outcome.key, outcome.error))
            continue
        if multiple:
            print(f"SKU {outcome.key}")
        for line in format_forecast_report(outcome.result, settings.confidence_level):
            print(line)

    for sku, error in failures:
        print(f"SKU {sku}: {error}" if multiple else error, file=sys.stderr)
    return 1 if failures else 0


def _anomalies(args: argparse.Namespace) -> int:
    settings = _settings(
        AnomalySettings,
        threshold=args.threshold,
        batch_size=args.batch_size,
        sensitivity=args.sensitivity,
        input_path=args.input,
        output_path=args.output,
    )
    store = load_transactions(settings.input_path)

    available = store.row_count(TRANSACTIONS_KEY)
    if available < settings.min_rows:
        raise InsufficientDataError(
            f"Not enough input. There are {available} rows available, "
            f"while {settings.min_rows} are required.",
            available=available,
            required=settings.min_rows,
        )

    scorer = AnomalyScorer(settings.batch_size, settings.threshold, settings.sensitivity)
    records = list(scorer.score(store.series(TRANSACTIONS_KEY)))
    written = write_anomaly_csv(records, settings.output_path)
    flagged = sum(r.is_anomaly for r in records)
    print(f"Wrote {written} records ({flagged} anomalies) to {settings.output_path}")
    return 0


def _main(parser: argparse.ArgumentParser, command, argv) -> int:
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    try:
        return command(args)
    except InsightsError as exc:
        print(exc, file=sys.stderr)
        return 1


def forecast_main(argv=None) -> int:
    """Entry point for ``smb-forecast``."""
    return _main(build_forecast_parser(), _forecast, argv)


def anomaly_main(argv=None) -> int:
    """Entry point for ``smb-anomalies``."""
    return _main(build_anomaly_parser(), _anomalies, argv)
