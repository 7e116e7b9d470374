"""Shared test fixtures for smb_insights tests."""
import numpy as np
import pandas as pd
import pytest

AMPLITUDE = 20.0
LEVEL = 100.0
PERIOD = 7


def weekly_signal(t):
    return LEVEL + AMPLITUDE * np.sin(2 * np.pi * np.asarray(t) / PERIOD)


@pytest.fixture
def seasonal_series():
    """90 daily points: level + weekly sinusoid + small seeded noise."""
    rng = np.random.default_rng(42)
    t = np.arange(90)
    dates = pd.date_range('2024-01-01', periods=90, freq='D')
    values = weekly_signal(t) + rng.normal(0, 0.5, len(t))
    return pd.Series(values, index=dates, name='SKU-001')


@pytest.fixture
def seasonal_truth():
    """Noise-free continuation of ``seasonal_series`` for 14 days."""
    return weekly_signal(np.arange(90, 104))


@pytest.fixture
def spike_series():
    """192 flat points with a single 10x spike at index 100."""
    values = np.full(192, 100.0)
    values[100] = 1000.0
    dates = pd.date_range('2024-01-01', periods=192, freq='D')
    return pd.Series(values, index=dates, name='amount')


@pytest.fixture
def write_csv(tmp_path):
    """Write lines to a CSV file under tmp_path and return its path."""
    def _write(name, lines):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sales_lines():
    """Header plus 100 seasonal days for SKU A and 20 days for SKU B."""
    rng = np.random.default_rng(3)
    dates = pd.date_range('2024-01-01', periods=100, freq='D')
    units = weekly_signal(np.arange(100)) + rng.normal(0, 1.0, 100)
    lines = ["date,sku,units"]
    lines += [f"{d:%Y-%m-%d},A,{u:.1f}" for d, u in zip(dates, units)]
    lines += [f"{d:%Y-%m-%d},B,{10 + i}" for i, d in enumerate(dates[:20])]
    return lines


@pytest.fixture
def transaction_lines():
    """Header plus 128 daily amounts with one spike."""
    rng = np.random.default_rng(11)
    dates = pd.date_range('2024-01-01', periods=128, freq='D')
    amounts = 500 + rng.normal(0, 5, 128)
    amounts[100] = 5000
    return ["date,amount"] + [f"{d:%Y-%m-%d},{a:.2f}" for d, a in zip(dates, amounts)]
