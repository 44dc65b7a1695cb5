"""
Report generation utilities.

This module turns a backtest result into human-readable artefacts:
CSV files of trades, the equity curve and daily performance, a JSON
summary of the statistics and a PNG chart of the equity curve.
"""

from __future__ import annotations

import os
from typing import Dict, Optional, Sequence
import pandas as pd
import matplotlib

# Use non-interactive backend for environments without display
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..execution.models import BacktestResult, Candle
from ..strategy.indicators import heikin_ashi_series, obv_series
from ..utils.persistence import save_json


def _summary(result: BacktestResult) -> Dict[str, object]:
    summary = result.to_dict()
    for key in ('equity', 'trades', 'dailyPerformance'):
        summary.pop(key)
    return summary


def _indicator_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    bars = heikin_ashi_series(candles)
    # the first candle only seeds the oscillator
    obv = [float('nan')] + obv_series(candles) if candles else []
    return pd.DataFrame({
        'timestamp': pd.to_datetime([c.time for c in candles], unit='s', utc=True),
        'close': [c.close for c in candles],
        'ha_open': [b.open for b in bars],
        'ha_high': [b.high for b in bars],
        'ha_low': [b.low for b in bars],
        'ha_close': [b.close for b in bars],
        'obv': obv,
    })


def generate_backtest_report(
    result: BacktestResult,
    candles: Optional[Sequence[Candle]] = None,
    out_dir: str = "results",
) -> Dict[str, str]:
    """Generate report files for a backtest run.

    Creates the output directory if it does not exist and writes the
    following files:

    - `trades.csv` – detailed list of trades
    - `equity_curve.csv` – account equity after each candle
    - `daily_performance.csv` – realized P&L per trading day
    - `summary.json` – performance metrics
    - `indicators.csv` – Heikin-Ashi bars and oscillator per candle
      (only when `candles` are given)
    - `equity_curve.png` – line chart of the equity curve

    When `candles` are given the equity curve is indexed by candle time,
    otherwise by bar number.

    Returns
    -------
    dict
        File kind to written path.
    """
    os.makedirs(out_dir, exist_ok=True)
    paths: Dict[str, str] = {}

    # Trades CSV
    trades_data = [
        {
            'timestamp_entry': pd.Timestamp(t.entry_time, unit='s', tz='UTC').isoformat(),
            'timestamp_exit': pd.Timestamp(t.exit_time, unit='s', tz='UTC').isoformat(),
            'type': t.type,
            'entry': t.entry_price,
            'exit': t.exit_price,
            'pnl': t.pnl,
            'reason': t.exit_reason,
        }
        for t in result.trades
    ]
    df_trades = pd.DataFrame(
        trades_data,
        columns=['timestamp_entry', 'timestamp_exit', 'type', 'entry', 'exit', 'pnl', 'reason'],
    )
    paths['trades'] = os.path.join(out_dir, 'trades.csv')
    df_trades.to_csv(paths['trades'], index=False)

    # Equity curve CSV
    if candles is not None and len(candles) == len(result.equity):
        x_values = pd.to_datetime([c.time for c in candles], unit='s', utc=True)
    else:
        x_values = pd.RangeIndex(len(result.equity))
    df_eq = pd.DataFrame({'timestamp': x_values, 'equity': result.equity})
    paths['equity_curve'] = os.path.join(out_dir, 'equity_curve.csv')
    df_eq.to_csv(paths['equity_curve'], index=False)

    df_daily = pd.DataFrame(
        [{'date': d.date, 'gain': d.gain} for d in result.daily_performance],
        columns=['date', 'gain'],
    )
    paths['daily_performance'] = os.path.join(out_dir, 'daily_performance.csv')
    df_daily.to_csv(paths['daily_performance'], index=False)

    if candles is not None:
        paths['indicators'] = os.path.join(out_dir, 'indicators.csv')
        _indicator_frame(candles).to_csv(paths['indicators'], index=False)

    # Summary JSON
    paths['summary'] = os.path.join(out_dir, 'summary.json')
    save_json(paths['summary'], _summary(result))

    # Equity curve plot
    fig, ax = plt.subplots(figsize=(10, 4))
    if not df_eq.empty:
        ax.plot(df_eq['timestamp'], df_eq['equity'], linewidth=1.5)
        ax.set_title('Equity Curve')
        ax.set_xlabel('Time')
        ax.set_ylabel('Equity')
        fig.autofmt_xdate()
    fig.tight_layout()
    paths['plot'] = os.path.join(out_dir, 'equity_curve.png')
    fig.savefig(paths['plot'])
    plt.close(fig)
    return paths
