"""
Series Store
============

Loads CSV exports into per-key time series.

Two layouts are supported:
    sales:        date,sku,units   (one series per SKU)
    transactions: date,amount      (a single series)

The first line is a header. Blank lines, lines whose first field starts
with ``#`` and rows with an unparsable date or number are skipped.
"""

import csv
import logging
import math
from pathlib import Path

import pandas as pd

from .errors import InputNotFoundError, MalformedRowError

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "amount"


def _parse_row(fields: list[str], value_column: int) -> tuple[pd.Timestamp, float]:
    """Parse the date in column 0 and the number in ``value_column``.

    Raises:
        MalformedRowError: If either field is missing or unparsable.
    """
    if len(fields) <= value_column:
        raise MalformedRowError(f"expected at least {value_column + 1} fields, got {len(fields)}")

    try:
        timestamp = pd.Timestamp(fields[0].strip())
    except (ValueError, TypeError) as exc:
        raise MalformedRowError(f"unparsable date {fields[0]!r}") from exc
    if pd.isna(timestamp):
        raise MalformedRowError(f"unparsable date {fields[0]!r}")
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert(None)  # UTC, naive

    try:
        value = float(fields[value_column])
    except ValueError as exc:
        raise MalformedRowError(f"non-numeric value {fields[value_column]!r}") from exc
    if not math.isfinite(value):
        raise MalformedRowError(f"non-finite value {fields[value_column]!r}")

    return timestamp, value


def _read_rows(path) -> list[list[str]]:
    """Data rows of a CSV file, minus the header, blanks and comments."""
    path = Path(path)
    if not path.is_file():
        raise InputNotFoundError(path)

    # An undecodable byte spoils only its own row, which then fails to parse
    with path.open(newline="", encoding="utf-8-sig", errors="replace") as handle:
        reader = csv.reader(handle)
        next(reader, None)  # header
        return [
            fields for fields in reader
            if fields and any(f.strip() for f in fields) and not fields[0].lstrip().startswith("#")
        ]


class SeriesStore:
    """Ordered (timestamp, value) series grouped by key.

    Series are sorted by timestamp; values sharing a timestamp within a key
    are summed so every series has unique timestamps.
    """

    def __init__(self, frame: pd.DataFrame) -> None:
        """Initialize from a frame with ``key``, ``timestamp`` and ``value`` columns."""
        self._row_counts = frame.groupby("key", sort=False).size().to_dict()
        self._series: dict[str, pd.Series] = {}
        for key, group in frame.groupby("key", sort=False):
            series = (
                group.sort_values("timestamp", kind="stable")
                .groupby("timestamp", sort=True)["value"]
                .sum()
            )
            series.index = pd.DatetimeIndex(series.index, name="timestamp")
            series.name = key
            self._series[key] = series

    def __len__(self) -> int:
        return len(self._series)

    def __contains__(self, key) -> bool:
        return key in self._series

    def keys(self) -> list[str]:
        return list(self._series)

    def row_count(self, key) -> int:
        """Valid rows loaded for ``key`` (0 for an unknown key)."""
        return self._row_counts.get(key, 0)

    def series(self, key) -> pd.Series:
        """The series for ``key``; an empty series if the key is unknown."""
        if key not in self._series:
            return pd.Series(dtype=float, index=pd.DatetimeIndex([], name="timestamp"), name=key)
        return self._series[key]

    @classmethod
    def from_records(cls, records) -> "SeriesStore":
        """Build a store from ``(key, timestamp, value)`` tuples."""
        frame = pd.DataFrame(list(records), columns=["key", "timestamp", "value"])
        frame["value"] = frame["value"].astype(float)
        return cls(frame)


def _load(path, key_of, value_column: int) -> SeriesStore:
    records = []
    skipped = 0
    for row_no, fields in enumerate(_read_rows(path), start=1):
        try:
            timestamp, value = _parse_row(fields, value_column)
        except MalformedRowError as exc:
            skipped += 1
            logger.debug("Skipping data row %d of %s: %s", row_no, path, exc)
            continue
        records.append((key_of(fields), timestamp, value))

    logger.info("Loaded %d rows from %s (%d skipped)", len(records), path, skipped)
    return SeriesStore.from_records(records)


def load_sales(path) -> SeriesStore:
    """Load ``date,sku,units`` rows into one series per SKU.

    Raises:
        InputNotFoundError: If ``path`` does not exist.
    """
    return _load(path, key_of=lambda fields: fields[1].strip(), value_column=2)


def load_transactions(path) -> SeriesStore:
    """Load ``date,amount`` rows into a single series keyed ``TRANSACTIONS_KEY``.

    Raises:
        InputNotFoundError: If ``path`` does not exist.
    """
    return _load(path, key_of=lambda fields: TRANSACTIONS_KEY, value_column=1)
