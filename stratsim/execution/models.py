"""
Candle, position, trade and result models.

These dataclasses represent the objects passed between the indicator
pipeline, the execution engine and the reporting layer.  Keeping them
in a separate module improves readability and makes unit testing
easier.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from ..utils.timeutils import to_unix_seconds


@dataclass(frozen=True)
class Candle:
    """One OHLC bar; `time` is the bar's unix timestamp in seconds."""
    time: int
    open: float
    high: float
    low: float
    close: float

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> 'Candle':
        return cls(
            time=to_unix_seconds(row['time']),
            open=float(row['open']),
            high=float(row['high']),
            low=float(row['low']),
            close=float(row['close']),
        )


@dataclass
class Position:
    """Represents the single open position of a simulation."""
    type: str  # 'long' or 'short'
    entry_price: float
    entry_time: int


@dataclass(frozen=True)
class Trade:
    """Represents a completed trade.

    `pnl` is the trade's total effect on capital, both order fees and
    the spread included.
    """
    type: str
    entry_price: float
    exit_price: float
    entry_time: int
    exit_time: int
    pnl: float
    exit_reason: str  # 'stop', 'target', 'signal' or 'end'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'entryPrice': self.entry_price,
            'exitPrice': self.exit_price,
            'entryTime': self.entry_time,
            'exitTime': self.exit_time,
            'pnl': self.pnl,
            'exitReason': self.exit_reason,
        }


@dataclass(frozen=True)
class DailyPerformance:
    """Realized P&L of the trades closed on one UTC calendar day."""
    date: str
    gain: float


@dataclass
class BacktestResult:
    """Trade ledger, equity trace and summary statistics of one run."""
    total_gain: float
    win_rate: float
    gain_loss_ratio: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    neutral_trades: int
    gains_only: float
    losses_only: float
    avg_gain_per_trade: float
    best_trade: float
    worst_trade: float
    max_drawdown: float
    max_runup: float
    time_in_market: float
    avg_orders_per_day: float
    daily_performance: List[DailyPerformance] = field(default_factory=list)
    equity: List[float] = field(default_factory=list)
    trades: List[Trade] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Render the result with the camelCase keys of the JSON API."""
        return {
            'totalGain': self.total_gain,
            'winRate': self.win_rate,
            'gainLossRatio': self.gain_loss_ratio,
            'totalTrades': self.total_trades,
            'winningTrades': self.winning_trades,
            'losingTrades': self.losing_trades,
            'neutralTrades': self.neutral_trades,
            'gainsOnly': self.gains_only,
            'lossesOnly': self.losses_only,
            'avgGainPerTrade': self.avg_gain_per_trade,
            'bestTrade': self.best_trade,
            'worstTrade': self.worst_trade,
            'maxDrawdown': self.max_drawdown,
            'maxRunup': self.max_runup,
            'timeInMarket': self.time_in_market,
            'avgOrdersPerDay': self.avg_orders_per_day,
            'dailyPerformance': [{'date': d.date, 'gain': d.gain} for d in self.daily_performance],
            'equity': list(self.equity),
            'trades': [t.to_dict() for t in self.trades],
        }
