"""
Backtest execution engine.

This module contains the `BacktestEngine` class which iterates over a
candle sequence, updates the strategy's indicators, opens and closes a
single simulated position with fees and spread, and records the trade
ledger and equity trace.  `simulate()` is the functional entry point.

A run owns all of its state (capital, position, ledger), so independent
runs may execute concurrently in threads or processes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..config.schema import Settings
from ..errors import InvalidInput
from ..execution.models import BacktestResult, Candle, DailyPerformance, Position, Trade
from ..reporting.metrics import compute_metrics
from ..strategy.signals import HeikinObvStrategy
from ..utils.timeutils import utc_date


logger = logging.getLogger(__name__)

CandleLike = Union[Candle, Mapping[str, Any]]


def _coerce_candles(candles: Optional[Iterable[CandleLike]]) -> List[Candle]:
    if candles is None:
        raise InvalidInput("candles are required")
    try:
        coerced = [c if isinstance(c, Candle) else Candle.from_mapping(c) for c in candles]
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInput(f"malformed candle: {exc}") from exc
    if len(coerced) < 2:
        raise InvalidInput(f"at least 2 candles are required, got {len(coerced)}")
    return coerced


class BacktestEngine:
    """Run the Heikin-Ashi / oscillator strategy over historical candles."""

    def __init__(self, settings: Settings) -> None:
        settings.validate()
        self.settings = settings
        self.strategy = HeikinObvStrategy(settings)
        profile = settings.profile
        self.point_value = profile.point_value
        self.contract_value = profile.contract_value
        self.fee = settings.fee
        self.spread_cost = settings.spread_cost
        self.stop_distance = settings.stop_loss * profile.point_value
        self.target_distance = settings.take_profit * profile.point_value

    def _open(self, side: str, candle: Candle) -> Position:
        if side == 'long':
            entry_price = candle.close + self.spread_cost
        else:
            entry_price = candle.close - self.spread_cost
        logger.debug("Open %s at %.5f (t=%d)", side, entry_price, candle.time)
        return Position(type=side, entry_price=entry_price, entry_time=candle.time)

    def _close(self, position: Position, candle: Candle, reason: str) -> Tuple[float, Trade]:
        """Close `position` at the candle's close.

        Returns
        -------
        capital_change : float
            Amount credited to capital now (exit fee and spread included).
        trade : Trade
            Ledger record; its `pnl` also carries the entry fee that was
            debited when the position opened.
        """
        exit_price = candle.close
        if position.type == 'long':
            delta = exit_price - position.entry_price
        else:
            delta = position.entry_price - exit_price
        size_value = self.settings.trade_size * self.contract_value
        capital_change = delta * size_value - self.spread_cost * size_value - self.fee
        trade = Trade(
            type=position.type,
            entry_price=position.entry_price,
            exit_price=exit_price,
            entry_time=position.entry_time,
            exit_time=candle.time,
            pnl=capital_change - self.fee,
            exit_reason=reason,
        )
        logger.debug("Close %s at %.5f (%s), pnl %.2f", position.type, exit_price, reason, trade.pnl)
        return capital_change, trade

    def _exit_reason(self, position: Position, candle: Candle, state) -> Optional[str]:
        if position.type == 'long':
            move = candle.close - position.entry_price
        else:
            move = position.entry_price - candle.close
        if -move >= self.stop_distance:
            return 'stop'
        if move >= self.target_distance:
            return 'target'
        if self.strategy.should_exit(position, state):
            return 'signal'
        return None

    def run(self, candles: Sequence[CandleLike]) -> BacktestResult:
        """Execute the backtest.

        Parameters
        ----------
        candles : sequence of Candle or mapping
            Bars ordered by time; at least two.

        Returns
        -------
        BacktestResult
            Ledger, equity trace (one value per candle) and statistics.

        Raises
        ------
        InvalidInput
            If fewer than two candles are given or a candle is malformed.
        """
        bars = _coerce_candles(candles)
        initial_capital = float(self.settings.initial_capital)
        capital = initial_capital
        trades: List[Trade] = []
        equity: List[float] = [capital]
        daily_gains: Dict[str, float] = {}
        position: Optional[Position] = None
        bars_held = 0

        _, state = self.strategy.evaluate_bar(bars[0], None)
        last_idx = len(bars) - 1
        for idx in range(1, len(bars)):
            candle = bars[idx]
            signal, state = self.strategy.evaluate_bar(candle, state)

            # Manage the open position first
            if position is not None:
                bars_held += 1
                reason = self._exit_reason(position, candle, state)
                if reason is not None:
                    change, trade = self._close(position, candle, reason)
                    capital += change
                    trades.append(trade)
                    day = utc_date(trade.exit_time)
                    daily_gains[day] = daily_gains.get(day, 0.0) + trade.pnl
                    position = None

            # Only one position at a time
            elif signal is not None:
                capital -= self.fee
                position = self._open(signal, candle)

            if position is not None and idx == last_idx:
                change, trade = self._close(position, candle, 'end')
                capital += change
                trades.append(trade)
                day = utc_date(trade.exit_time)
                daily_gains[day] = daily_gains.get(day, 0.0) + trade.pnl
                position = None

            equity.append(capital)

        metrics = compute_metrics(
            trades,
            equity,
            initial_capital=initial_capital,
            bars_held=bars_held,
            total_bars=len(bars),
            daily_gains=daily_gains,
        )
        logger.info(
            "Backtest of %d candles: %d trades, total gain %.2f, win rate %.1f%%",
            len(bars), metrics['total_trades'], metrics['total_gain'], metrics['win_rate'],
        )
        return BacktestResult(
            total_gain=metrics['total_gain'],
            win_rate=metrics['win_rate'],
            gain_loss_ratio=metrics['gain_loss_ratio'],
            total_trades=metrics['total_trades'],
            winning_trades=metrics['winning_trades'],
            losing_trades=metrics['losing_trades'],
            neutral_trades=metrics['neutral_trades'],
            gains_only=metrics['gains_only'],
            losses_only=metrics['losses_only'],
            avg_gain_per_trade=metrics['avg_gain_per_trade'],
            best_trade=metrics['best_trade'],
            worst_trade=metrics['worst_trade'],
            max_drawdown=metrics['max_drawdown'],
            max_runup=metrics['max_runup'],
            time_in_market=metrics['time_in_market'],
            avg_orders_per_day=metrics['avg_orders_per_day'],
            daily_performance=[
                DailyPerformance(date=d, gain=g) for d, g in metrics['daily_performance']
            ],
            equity=equity,
            trades=trades,
        )


def simulate(
    candles: Sequence[CandleLike],
    settings: Union[Settings, Mapping[str, Any], None] = None,
) -> BacktestResult:
    """Simulate the strategy over `candles` and return the result.

    `settings` may be a `Settings` instance or a mapping with the
    camelCase keys of the JSON API; None uses the defaults.
    """
    if not isinstance(settings, Settings):
        settings = Settings.from_dict(settings)
    return BacktestEngine(settings).run(candles)
