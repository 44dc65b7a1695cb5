import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import numpy as np

from stratsim.execution.models import Candle
from stratsim.utils.timeutils import to_unix_seconds, utc_date

import unittest


class TestTimeUtils(unittest.TestCase):
    def test_utc_date(self) -> None:
        self.assertEqual(utc_date(1704067200), '2024-01-01')
        self.assertEqual(utc_date(1704067199), '2023-12-31')

    def test_to_unix_seconds(self) -> None:
        self.assertEqual(to_unix_seconds(1704067200), 1704067200)
        self.assertEqual(to_unix_seconds(np.int64(1704067200)), 1704067200)
        self.assertEqual(to_unix_seconds(1704067200000), 1704067200)
        self.assertEqual(to_unix_seconds('2024-01-01T00:00:00Z'), 1704067200)
        self.assertEqual(to_unix_seconds('2024-01-01 10:00', tz_name='Europe/Brussels'), 1704099600)

    def test_candle_from_mapping_accepts_iso_time(self) -> None:
        candle = Candle.from_mapping({'time': '2024-01-01', 'open': 1, 'high': 2, 'low': 0.5, 'close': 1.5})
        self.assertEqual(candle.time, 1704067200)
        self.assertEqual(candle.close, 1.5)


if __name__ == '__main__':
    unittest.main()
