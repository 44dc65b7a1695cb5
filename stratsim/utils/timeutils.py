"""
Timestamp utilities.

Candles carry their time as unix seconds.  This module centralises the
conversions between those integers, pandas timestamps and the UTC
calendar dates used to bucket daily performance.
"""

from __future__ import annotations

import numbers
from typing import Any
import pandas as pd


def utc_date(ts: int) -> str:
    """Return the UTC calendar date of a unix timestamp as ``YYYY-MM-DD``.

    Parameters
    ----------
    ts : int
        Seconds since the epoch.
    """
    return pd.Timestamp(int(ts), unit="s", tz="UTC").strftime("%Y-%m-%d")


def to_unix_seconds(value: Any, tz_name: str = "UTC") -> int:
    """Convert a timestamp-like value to unix seconds.

    Numbers are taken as epochs already (milliseconds are detected by
    magnitude).  Strings and datetimes are parsed with pandas; naive
    values are assumed to be in `tz_name`.
    """
    if isinstance(value, numbers.Real):
        seconds = float(value)
        # Epoch milliseconds
        if abs(seconds) >= 1e11:
            seconds /= 1000.0
        return int(seconds)
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        ts = ts.tz_localize(tz_name)
    return int(ts.tz_convert("UTC").timestamp())
