import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from stratsim.execution.models import Candle
from stratsim.strategy.indicators import (
    heikin_ashi_series,
    heikin_ashi_step,
    obv_series,
    obv_signal,
    obv_start,
    obv_step,
)

import unittest


def candles_from_closes(closes):
    return [Candle(time=i * 60, open=c, high=c, low=c, close=c) for i, c in enumerate(closes)]


class TestVolumeOscillator(unittest.TestCase):
    def test_running_total(self) -> None:
        history = obv_series(candles_from_closes([100, 105, 103, 103, 110]))
        self.assertEqual(history, [5, 3, 3, 10])

    def test_step_is_unchanged_on_equal_close(self) -> None:
        state = obv_step(obv_start(candles_from_closes([50])[0]), 50)
        self.assertEqual(state.value, 0.0)
        self.assertEqual(state.reference_close, 50)

    def test_empty_sequence(self) -> None:
        self.assertEqual(obv_series([]), [])

    def test_signal_needs_period_plus_one_values(self) -> None:
        self.assertEqual(obv_signal([5, 3, 3, 10], 4), 0)
        self.assertEqual(obv_signal([], 1), 0)

    def test_signal_compares_recent_and_older_means(self) -> None:
        self.assertEqual(obv_signal([5, 3, 3, 10], 2), 1)
        self.assertEqual(obv_signal([-1, -2, -3, -4], 2), -1)
        self.assertEqual(obv_signal([1, 1, 1, 1], 2), 0)

    def test_signal_uses_partial_older_window(self) -> None:
        # recent = [3, 3, 10], older = [5]
        self.assertEqual(obv_signal([5, 3, 3, 10], 3), 1)
        # recent = [1, 1, 1], older = [4]
        self.assertEqual(obv_signal([4, 1, 1, 1], 3), -1)

    def test_signal_without_older_values_follows_latest_sign(self) -> None:
        self.assertEqual(obv_signal([-2, 3], 0), 1)
        self.assertEqual(obv_signal([3, -2], 0), -1)
        self.assertEqual(obv_signal([0.0], 0), -1)

    def test_latest_sign_fallback_needs_period_zero(self) -> None:
        # with period 1 the older window always holds a value
        self.assertEqual(obv_signal([0.0, 0.0], 1), 0)
        self.assertEqual(obv_signal([-3.0, -3.0], 1), 0)


class TestHeikinAshi(unittest.TestCase):
    def test_first_bar(self) -> None:
        ha = heikin_ashi_step(None, Candle(time=0, open=10, high=12, low=9, close=11))
        self.assertEqual(ha.open, 10.5)
        self.assertEqual(ha.close, 10.5)
        self.assertEqual(ha.high, 12)
        self.assertEqual(ha.low, 9)
        self.assertFalse(ha.bullish)
        self.assertFalse(ha.bearish)

    def test_open_carries_previous_bar(self) -> None:
        bars = heikin_ashi_series([
            Candle(time=0, open=10, high=12, low=9, close=11),
            Candle(time=60, open=11, high=13, low=10, close=12),
        ])
        self.assertEqual(len(bars), 2)
        second = bars[1]
        self.assertEqual(second.open, 10.5)
        self.assertEqual(second.close, 11.5)
        self.assertEqual(second.high, 13)
        self.assertEqual(second.low, 10)
        self.assertTrue(second.bullish)

    def test_high_low_include_synthetic_values(self) -> None:
        previous = heikin_ashi_step(None, Candle(time=0, open=20, high=20, low=20, close=20))
        ha = heikin_ashi_step(previous, Candle(time=60, open=10, high=11, low=9, close=10))
        # synthetic open 20 lies above the raw high
        self.assertEqual(ha.high, 20)
        self.assertEqual(ha.low, 9)
        self.assertTrue(ha.bearish)

    def test_is_causal(self) -> None:
        candles = candles_from_closes([1, 2, 3, 2, 1, 4])
        full = heikin_ashi_series(candles)
        prefix = heikin_ashi_series(candles[:3])
        self.assertEqual(full[:3], prefix)


if __name__ == '__main__':
    unittest.main()
