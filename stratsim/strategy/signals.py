"""
Heikin-Ashi / oscillator entry and exit rules.

The strategy combines two optional filters.  Which rule decides an
entry is fixed for the whole run by `SignalMode`, picked once from the
settings:

- ``BOTH``: a bullish smoothed bar confirmed by a positive oscillator
  signal buys, a bearish bar with a negative signal sells;
- ``HEIKIN_ONLY``: the smoothed close rising or falling versus the
  previous smoothed close;
- ``OBV_ONLY``: the sign of the oscillator signal;
- ``RAW_MOMENTUM``: with no filter enabled, a close above both the
  previous close and its own open buys (symmetric for sells).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..config.schema import Settings, SignalConfig
from ..execution.models import Candle, Position
from .indicators import (
    HeikinAshiBar,
    ObvState,
    heikin_ashi_step,
    obv_signal,
    obv_start,
    obv_step,
)


class SignalMode(Enum):
    BOTH = 'both'
    HEIKIN_ONLY = 'heikin_only'
    OBV_ONLY = 'obv_only'
    RAW_MOMENTUM = 'raw_momentum'


def select_signal_mode(signals: SignalConfig) -> SignalMode:
    """Pick the entry rule from the enabled filters."""
    if signals.use_obv and signals.use_heikin_ashi:
        return SignalMode.BOTH
    if signals.use_heikin_ashi:
        return SignalMode.HEIKIN_ONLY
    if signals.use_obv:
        return SignalMode.OBV_ONLY
    return SignalMode.RAW_MOMENTUM


@dataclass(frozen=True)
class IndicatorState:
    """Fold accumulator carried from one bar to the next.

    States are never modified once built; `obv_history` holds only the
    last `2 * obv_period` oscillator values, enough for `obv_signal`.
    """
    candle: Candle
    previous_candle: Optional[Candle]
    obv: ObvState
    obv_history: Tuple[float, ...]
    heikin: HeikinAshiBar
    previous_heikin: Optional[HeikinAshiBar]
    obv_signal: int = 0


class HeikinObvStrategy:
    """Generate entry and exit decisions from the two indicator filters."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.mode = select_signal_mode(settings.signals)
        self.obv_period = int(settings.signals.obv_period)

    def start(self, candle: Candle) -> IndicatorState:
        """Seed the indicators with the first candle."""
        return IndicatorState(
            candle=candle,
            previous_candle=None,
            obv=obv_start(candle),
            obv_history=(),
            heikin=heikin_ashi_step(None, candle),
            previous_heikin=None,
        )

    def update(self, candle: Candle, state: IndicatorState) -> IndicatorState:
        """Advance both indicators by one candle."""
        obv = obv_step(state.obv, candle.close)
        history = (state.obv_history + (obv.value,))[-2 * self.obv_period:]
        return IndicatorState(
            candle=candle,
            previous_candle=state.candle,
            obv=obv,
            obv_history=history,
            heikin=heikin_ashi_step(state.heikin, candle),
            previous_heikin=state.heikin,
            obv_signal=obv_signal(history, self.obv_period),
        )

    def evaluate_bar(
        self,
        candle: Candle,
        state: Optional[IndicatorState],
    ) -> Tuple[Optional[str], IndicatorState]:
        """Update the indicators with `candle` and return the entry signal.

        Parameters
        ----------
        candle : Candle
            The bar just closed.
        state : IndicatorState or None
            State after the previous bar, None for the first bar.

        Returns
        -------
        signal : str or None
            `'long'` to enter a long position, `'short'` for a short, or
            `None`.  Directions excluded by `trade_type` are never
            returned.
        state : IndicatorState
            Updated state for subsequent bars.
        """
        if state is None:
            return None, self.start(candle)
        state = self.update(candle, state)

        should_buy, should_sell = self._entry_flags(state)
        signal: Optional[str] = None
        if should_buy and self.settings.can_long:
            signal = 'long'
        elif should_sell and self.settings.can_short:
            signal = 'short'
        return signal, state

    def _entry_flags(self, state: IndicatorState) -> Tuple[bool, bool]:
        if self.mode is SignalMode.BOTH:
            return (
                state.heikin.bullish and state.obv_signal > 0,
                state.heikin.bearish and state.obv_signal < 0,
            )
        if self.mode is SignalMode.HEIKIN_ONLY:
            prev = state.previous_heikin
            if prev is None:
                return False, False
            return state.heikin.close > prev.close, state.heikin.close < prev.close
        if self.mode is SignalMode.OBV_ONLY:
            return state.obv_signal > 0, state.obv_signal < 0

        bar = state.candle
        prev_bar = state.previous_candle
        if prev_bar is None:
            return False, False
        return (
            bar.close > prev_bar.close and bar.close > bar.open,
            bar.close < prev_bar.close and bar.close < bar.open,
        )

    def should_exit(self, position: Position, state: IndicatorState) -> bool:
        """Signal exit: the smoothed bar turned against the position.

        Always False when the Heikin-Ashi filter is disabled.
        """
        if not self.settings.signals.use_heikin_ashi:
            return False
        if position.type == 'long':
            return state.heikin.bearish
        return state.heikin.bullish
