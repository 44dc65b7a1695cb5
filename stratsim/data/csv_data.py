"""
CSV data loader.

This module provides a class to load historical OHLC data from CSV
files.  The expected schema for each CSV is:

```
time,open,high,low,close
```

Additional columns are ignored.  The `time` column may contain
ISO-formatted timestamps or UNIX epochs (seconds or milliseconds).
MetaTrader tab-separated exports (`<DATE>`, `<TIME>`, `<OPEN>`, ...)
are accepted as a fallback.  Timestamps are converted to unix seconds.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List
import pandas as pd

from ..execution.models import Candle


logger = logging.getLogger(__name__)

_PRICE_COLUMNS = ["open", "high", "low", "close"]


class CSVDataLoader:
    """Load OHLC candles from CSV files for backtesting.

    Parameters
    ----------
    csv_dir : str
        Directory where the CSV files are located.  Each symbol's file
        must be named `{SYMBOL}.csv`.
    timezone : str
        IANA timezone assumed for naive timestamps.
    """

    def __init__(self, csv_dir: str, timezone: str = "UTC") -> None:
        self.csv_dir = Path(csv_dir)
        self.timezone = timezone

    def load(self, symbol: str) -> List[Candle]:
        file_path = self.csv_dir / f"{symbol}.csv"
        if not file_path.exists():
            raise FileNotFoundError(f"CSV file not found for symbol {symbol}: {file_path}")

        df = self._read_standard(file_path)
        if df is None:
            df = self._read_mt5(file_path, symbol)
        candles = self.to_candles(df)
        logger.info("Loaded %d candles for %s from %s", len(candles), symbol, file_path)
        return candles

    def _read_standard(self, file_path: Path):
        """Comma-separated file with a single `time` column, or None."""
        df = pd.read_csv(file_path)
        df.columns = [str(c).strip().lower() for c in df.columns]
        if "time" not in df.columns:
            return None
        missing = [c for c in _PRICE_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"{file_path} is missing columns: {missing}")
        if pd.api.types.is_numeric_dtype(df["time"]):
            unit = "ms" if df["time"].abs().max() >= 1e11 else "s"
            index = pd.to_datetime(df["time"], unit=unit, utc=True)
        else:
            index = pd.DatetimeIndex(pd.to_datetime(df["time"], errors="raise"))
            if index.tz is None:
                index = index.tz_localize(self.timezone)
        out = df[_PRICE_COLUMNS].astype(float)
        out.index = pd.DatetimeIndex(index)
        return out

    def _read_mt5(self, file_path: Path, symbol: str) -> pd.DataFrame:
        """MetaTrader export format: tab-separated with <DATE> and <TIME>."""
        df = pd.read_csv(file_path, sep="\t", engine="python")
        df.columns = [c.strip() for c in df.columns]

        required = ["<DATE>", "<TIME>", "<OPEN>", "<HIGH>", "<LOW>", "<CLOSE>"]
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise ValueError(
                f"Unrecognized CSV format for {symbol}. Missing columns: {missing}. "
                f"Found columns: {list(df.columns)}"
            )

        dt = df["<DATE>"].astype(str).str.strip() + " " + df["<TIME>"].astype(str).str.strip()
        ts = pd.to_datetime(dt, format="%Y.%m.%d %H:%M:%S", errors="coerce")
        if ts.isna().any():
            # fallback if format differs
            ts = pd.to_datetime(dt, errors="coerce")
        if ts.isna().any():
            bad = dt[ts.isna()].head(5).tolist()
            raise ValueError(f"Could not parse MT5 DATE/TIME for {symbol}. Examples: {bad}")

        out = pd.DataFrame(
            {
                "open": df["<OPEN>"].astype(float),
                "high": df["<HIGH>"].astype(float),
                "low": df["<LOW>"].astype(float),
                "close": df["<CLOSE>"].astype(float),
            },
        )
        # MT5 timestamps are terminal local time
        out.index = pd.DatetimeIndex(ts).tz_localize(self.timezone)
        return out

    @staticmethod
    def to_candles(df: pd.DataFrame) -> List[Candle]:
        """Convert a time-indexed OHLC frame into candles sorted by time."""
        df = df.sort_index()
        seconds = (df.index - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(seconds=1)
        return [
            Candle(time=int(t), open=float(o), high=float(h), low=float(lo), close=float(c))
            for t, o, h, lo, c in zip(seconds, df["open"], df["high"], df["low"], df["close"])
        ]
