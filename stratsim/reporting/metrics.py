"""
Performance metrics calculations.

This module provides helpers to compute the summary statistics of a
backtest from its trade ledger and per-candle equity trace.  These
metrics are used both for the `BacktestResult` returned by the engine
and for ranking runs in a parameter sweep.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from ..execution.models import Trade


def max_drawdown(equity: Sequence[float]) -> float:
    """Largest peak-to-trough decline of `equity`, as a number <= 0."""
    if not equity:
        return 0.0
    peak = equity[0]
    worst = 0.0
    for value in equity:
        if value > peak:
            peak = value
        if peak - value > worst:
            worst = peak - value
    return -worst if worst else 0.0


def max_runup(equity: Sequence[float]) -> float:
    """Largest trough-to-peak rise of `equity`, as a number >= 0."""
    if not equity:
        return 0.0
    trough = equity[0]
    best = 0.0
    for value in equity:
        if value < trough:
            trough = value
        if value - trough > best:
            best = value - trough
    return best


def compute_metrics(
    trades: List[Trade],
    equity: Sequence[float],
    initial_capital: float,
    bars_held: int = 0,
    total_bars: int = 0,
    daily_gains: Optional[Mapping[str, float]] = None,
) -> dict:
    """Compute a set of summary statistics for the backtest.

    Parameters
    ----------
    trades : list of Trade
        Completed trades in exit order.
    equity : sequence of float
        Capital after each candle, seed value first.
    initial_capital : float
        Starting balance.
    bars_held : int
        Candles spent holding a position.
    total_bars : int
        Number of candles simulated.
    daily_gains : mapping of str to float
        Realized P&L per UTC date (``YYYY-MM-DD``) with at least one
        closed trade.

    Returns
    -------
    dict
        Dictionary of performance metrics.  `daily_performance` is a list
        of ``(date, gain)`` pairs sorted by date.
    """
    daily_gains = daily_gains or {}
    final_equity = equity[-1] if equity else initial_capital
    total_gain = final_equity - initial_capital

    wins = [t.pnl for t in trades if t.pnl > 0]
    losses = [t.pnl for t in trades if t.pnl < 0]
    neutral = [t.pnl for t in trades if t.pnl == 0]
    total = len(trades)

    win_rate = len(wins) / total * 100 if total else 0.0
    avg_win = sum(wins) / len(wins) if wins else 0.0
    avg_loss = abs(sum(losses) / len(losses)) if losses else 0.0
    # Without losing trades the ratio degenerates to the mean win
    gain_loss_ratio = avg_win / avg_loss if avg_loss else avg_win

    best_trade = 0.0
    worst_trade = 0.0
    for i, trade in enumerate(trades):
        if i == 0 or trade.pnl > best_trade:
            best_trade = trade.pnl
        if i == 0 or trade.pnl < worst_trade:
            worst_trade = trade.pnl

    daily: Dict[str, float] = dict(daily_gains)

    return {
        'total_gain': total_gain,
        'win_rate': win_rate,
        'gain_loss_ratio': gain_loss_ratio,
        'total_trades': total,
        'winning_trades': len(wins),
        'losing_trades': len(losses),
        'neutral_trades': len(neutral),
        'gains_only': float(sum(wins)),
        'losses_only': float(sum(losses)),
        'avg_gain_per_trade': total_gain / total if total else 0.0,
        'best_trade': best_trade,
        'worst_trade': worst_trade,
        'max_drawdown': max_drawdown(equity),
        'max_runup': max_runup(equity),
        'time_in_market': bars_held / total_bars * 100 if total_bars else 0.0,
        'avg_orders_per_day': total / len(daily) if daily else 0.0,
        'daily_performance': sorted(daily.items()),
    }
