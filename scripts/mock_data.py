import numpy as np
import pandas as pd
from datetime import datetime, timedelta
from pathlib import Path


def generate_sales_data(start_date_str='2024-01-01', days=120, skus=('SKU-001', 'SKU-002', 'SKU-003'), seed=42):
    rng = np.random.default_rng(seed)
    start_date = datetime.strptime(start_date_str, '%Y-%m-%d')
    dates = [start_date + timedelta(days=d) for d in range(days)]
    day_index = np.arange(days)

    frames = []
    for i, sku in enumerate(skus):
        # -- DEMAND LOGIC --
        # Base level grows slowly; weekends are busier than midweek
        base = 80 + 40 * i
        trend = 0.15 * day_index
        weekly = 0.25 * base * np.sin(2 * np.pi * day_index / 7)
        noise = rng.normal(0, 0.05 * base, days)
        units = np.clip(base + trend + weekly + noise, 0, None).round()

        frames.append(pd.DataFrame({
            'date': [d.strftime('%Y-%m-%d') for d in dates],
            'sku': sku,
            'units': units.astype(int),
        }))

    return pd.concat(frames, ignore_index=True).sort_values(['date', 'sku'])


def generate_transaction_data(start_date_str='2024-01-01', days=180, spikes=(70, 131, 160), seed=7):
    rng = np.random.default_rng(seed)
    start_date = datetime.strptime(start_date_str, '%Y-%m-%d')
    day_index = np.arange(days)

    # Daily takings with a weekly rhythm
    amount = 500 + 60 * np.sin(2 * np.pi * day_index / 7) + rng.normal(0, 15, days)

    # Inject a few unusual days (10x the usual takings)
    for idx in spikes:
        if idx < days:
            amount[idx] *= 10

    return pd.DataFrame({
        'date': [(start_date + timedelta(days=int(d))).strftime('%Y-%m-%d') for d in day_index],
        'amount': amount.round(2),
    })


if __name__ == "__main__":
    data_dir = Path('Data')
    data_dir.mkdir(exist_ok=True)

    df_sales = generate_sales_data()
    df_sales.to_csv(data_dir / 'sales.csv', index=False)

    df_transactions = generate_transaction_data()
    df_transactions.to_csv(data_dir / 'input.csv', index=False)

    print(f"Wrote {len(df_sales)} sales rows and {len(df_transactions)} transactions to {data_dir}/")
