"""
Run both batch reports end to end on the sample data:
  1. Generate Data/sales.csv and Data/input.csv if they are missing
  2. Forecast demand and staffing for every SKU (smb-forecast)
  3. Flag unusual transaction amounts (smb-anomalies)

Usage:
    python scripts/run_pipeline.py
"""

import sys
from pathlib import Path

# Add src to the Python path so smb_insights is importable without installing
_SRC = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(_SRC))

from smb_insights.cli import anomaly_main, forecast_main
from smb_insights.series_store import load_sales

from mock_data import generate_sales_data, generate_transaction_data

DATA_DIR = Path(__file__).resolve().parent.parent / "Data"
SALES_PATH = DATA_DIR / "sales.csv"
INPUT_PATH = DATA_DIR / "input.csv"
OUTPUT_PATH = DATA_DIR / "anomalies.csv"


def main():
    # ---------------------------------------------------------------
    # Sample data
    # ---------------------------------------------------------------
    DATA_DIR.mkdir(exist_ok=True)
    if not SALES_PATH.exists():
        generate_sales_data().to_csv(SALES_PATH, index=False)
    if not INPUT_PATH.exists():
        generate_transaction_data().to_csv(INPUT_PATH, index=False)

    skus = sorted(load_sales(SALES_PATH).keys())

    # ---------------------------------------------------------------
    # Step 1: Demand forecast + staffing
    # ---------------------------------------------------------------
    print("=" * 70)
    print("STEP 1: DEMAND FORECAST AND STAFFING")
    print("=" * 70)

    argv = ["--input", str(SALES_PATH)]
    for sku in skus:
        argv += ["--sku", sku]
    forecast_status = forecast_main(argv)

    # ---------------------------------------------------------------
    # Step 2: Anomaly detection
    # ---------------------------------------------------------------
    print("\n" + "=" * 70)
    print("STEP 2: TRANSACTION ANOMALIES")
    print("=" * 70)

    anomaly_status = anomaly_main(["--input", str(INPUT_PATH), "--output", str(OUTPUT_PATH)])

    return forecast_status or anomaly_status


if __name__ == "__main__":
    sys.exit(main())
