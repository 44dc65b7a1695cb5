"""
Causal indicators used by the strategy.

Two series are derived from raw OHLC bars, one bar at a time and
without ever looking at future bars:

- a cumulative volume-direction oscillator (an OBV-style running total
  of close-to-close moves) together with a recent-vs-older mean signal;
- a Heikin-Ashi smoothed candle whose open carries the previous
  smoothed bar forward.

Both are written as explicit folds: a step function takes the previous
state and the next bar and returns the new state.  The `*_series`
helpers run the folds over a whole candle sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..execution.models import Candle


@dataclass(frozen=True)
class ObvState:
    """Running oscillator total and the close it was last updated with."""
    reference_close: float
    value: float = 0.0


def obv_start(candle: Candle) -> ObvState:
    """Seed the oscillator at 0 with the first candle's close."""
    return ObvState(reference_close=candle.close, value=0.0)


def obv_step(state: ObvState, close: float) -> ObvState:
    """Advance the oscillator by one close."""
    value = state.value
    if close > state.reference_close:
        value += close - state.reference_close
    elif close < state.reference_close:
        value -= state.reference_close - close
    return ObvState(reference_close=close, value=value)


def obv_signal(history: Sequence[float], period: int) -> int:
    """Return +1, -1 or 0 by comparing recent and older oscillator means.

    Parameters
    ----------
    history : sequence of float
        Oscillator values, oldest first.
    period : int
        Window length.  Fewer than ``period + 1`` values yields 0.

    Returns
    -------
    int
        +1 when the mean of the last `period` values is above the mean
        of the (up to) `period` values before them, -1 when below, 0 when
        equal.  With no older values the sign of the latest value
        decides.
    """
    length = len(history)
    if length < period + 1:
        return 0
    recent = history[length - period:]
    older = history[max(0, length - 2 * period):length - period]
    # unreachable for period >= 1; kept for callers passing period 0
    if len(older) == 0:
        return 1 if history[-1] > 0 else -1
    recent_avg = sum(recent) / len(recent)
    older_avg = sum(older) / len(older)
    if recent_avg > older_avg:
        return 1
    if recent_avg < older_avg:
        return -1
    return 0


@dataclass(frozen=True)
class HeikinAshiBar:
    """A smoothed candle."""
    open: float
    high: float
    low: float
    close: float

    @property
    def bullish(self) -> bool:
        return self.close > self.open

    @property
    def bearish(self) -> bool:
        return self.close < self.open


def heikin_ashi_step(previous: Optional[HeikinAshiBar], candle: Candle) -> HeikinAshiBar:
    """Compute the next Heikin-Ashi bar from the previous one and a raw candle.

    For the first bar (`previous` is None) the synthetic open is the
    midpoint of the raw open and close; afterwards it is the midpoint of
    the previous synthetic open and close.
    """
    if previous is None:
        ha_open = (candle.open + candle.close) / 2
    else:
        ha_open = (previous.open + previous.close) / 2
    ha_close = (candle.open + candle.high + candle.low + candle.close) / 4
    return HeikinAshiBar(
        open=ha_open,
        high=max(candle.high, ha_open, ha_close),
        low=min(candle.low, ha_open, ha_close),
        close=ha_close,
    )


def heikin_ashi_series(candles: Sequence[Candle]) -> List[HeikinAshiBar]:
    """Smoothed bars for a whole sequence, one per candle."""
    bars: List[HeikinAshiBar] = []
    previous: Optional[HeikinAshiBar] = None
    for candle in candles:
        previous = heikin_ashi_step(previous, candle)
        bars.append(previous)
    return bars


def obv_series(candles: Sequence[Candle]) -> List[float]:
    """Oscillator history for a sequence.

    The first candle only seeds the reference close, so the result has
    one value fewer than `candles` (empty for an empty input).
    """
    if not candles:
        return []
    state = obv_start(candles[0])
    history: List[float] = []
    for candle in candles[1:]:
        state = obv_step(state, candle.close)
        history.append(state.value)
    return history
