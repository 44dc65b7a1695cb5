import os
import sys
import tempfile

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from stratsim.data.csv_data import CSVDataLoader
from stratsim.data.synthetic import generate_candles

import unittest


class TestCSVDataLoader(unittest.TestCase):
    def test_standard_csv_sorted_to_unix_seconds(self) -> None:
        content = (
            "time,open,high,low,close,volume\n"
            "2024-01-01 01:00:00,2,3,1,2.5,10\n"
            "2024-01-01 00:00:00,1,2,0.5,1.5,10\n"
        )
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, 'TEST.csv'), 'w', encoding='utf-8') as fh:
                fh.write(content)
            candles = CSVDataLoader(tmp).load('TEST')
        self.assertEqual([c.time for c in candles], [1704067200, 1704070800])
        self.assertEqual(candles[0].close, 1.5)
        self.assertEqual(candles[1].high, 3.0)

    def test_epoch_column(self) -> None:
        content = "time,open,high,low,close\n1704067200,1,2,0.5,1.5\n1704070800,2,3,1,2.5\n"
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, 'EPOCH.csv'), 'w', encoding='utf-8') as fh:
                fh.write(content)
            candles = CSVDataLoader(tmp).load('EPOCH')
        self.assertEqual([c.time for c in candles], [1704067200, 1704070800])

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                CSVDataLoader(tmp).load('NOPE')


class TestSyntheticCandles(unittest.TestCase):
    def test_seeded_and_well_formed(self) -> None:
        first = generate_candles(100.0, 50, 0.02, seed=1)
        self.assertEqual(first, generate_candles(100.0, 50, 0.02, seed=1))
        self.assertEqual(len(first), 50)
        times = [c.time for c in first]
        self.assertEqual(times, sorted(times))
        for candle in first:
            self.assertGreaterEqual(candle.high, max(candle.open, candle.close))
            self.assertLessEqual(candle.low, min(candle.open, candle.close))


if __name__ == '__main__':
    unittest.main()
