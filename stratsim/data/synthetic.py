"""
Synthetic candle generator.

Used when no historical file is available: a random walk where each
bar's close moves by up to ``volatility * price`` from its open and the
wicks extend by up to half that again.  A seed makes the series
reproducible.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple
import numpy as np

from ..execution.models import Candle


# asset -> (base price, per-bar volatility)
FALLBACK_PRICES: Dict[str, Tuple[float, float]] = {
    'silver': (65.0, 0.02),
    'gold': (2900.0, 0.01),
    'copper': (4.5, 0.025),
    'oil': (59.44, 0.03),
    'natgas': (3.47, 0.04),
    'eurusd': (1.1673, 0.005),
    'gbpusd': (1.344, 0.006),
    'usdjpy': (159.06, 0.004),
    'spx500': (6947.0, 0.012),
    'dax': (24921.0, 0.015),
    'ftse': (10141.0, 0.01),
}


def generate_candles(
    base_price: float,
    num_bars: int,
    volatility: float,
    seed: Optional[int] = None,
    interval: int = 3600,
    end_time: int = 1_700_000_000,
) -> List[Candle]:
    """Generate `num_bars` random-walk candles ending at `end_time`.

    Prices are rounded to four decimals.  Bars are `interval` seconds
    apart.
    """
    rng = np.random.default_rng(seed)
    candles: List[Candle] = []
    price = float(base_price)
    start = end_time - (num_bars - 1) * interval
    for i in range(num_bars):
        change = (rng.random() - 0.5) * 2 * volatility * price
        open_ = price
        close = price + change
        high = max(open_, close) + rng.random() * volatility * price * 0.5
        low = min(open_, close) - rng.random() * volatility * price * 0.5
        candles.append(Candle(
            time=start + i * interval,
            open=round(open_, 4),
            high=round(high, 4),
            low=round(low, 4),
            close=round(close, 4),
        ))
        price = close
    return candles


def fallback_candles(asset: str, num_bars: int = 500, seed: Optional[int] = None, **kwargs) -> List[Candle]:
    """Synthetic candles priced like `asset` (silver for unknown assets)."""
    base_price, volatility = FALLBACK_PRICES.get(asset.lower(), FALLBACK_PRICES['silver'])
    return generate_candles(base_price, num_bars, volatility, seed=seed, **kwargs)
