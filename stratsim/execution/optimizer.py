"""
Parameter sweep over the backtest engine.

The engine itself has no optimisation logic; this module is a caller
that runs one independent `simulate()` per parameter combination and
ranks the results.  Combinations come either from a full grid or from
random sampling rounded to each parameter's step.  Runs share nothing,
so they can be spread over a process pool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import product
from multiprocessing import Pool
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import numpy as np

from ..config.schema import Settings
from ..errors import InvalidInput
from .backtest_exec import simulate
from .models import BacktestResult, Candle


logger = logging.getLogger(__name__)

METRICS = ('totalGain', 'winRate', 'gainLossRatio', 'sharpe')


@dataclass
class SweepResult:
    """One evaluated parameter combination."""
    params: Dict[str, float]
    score: float
    result: BacktestResult

    def to_dict(self) -> Dict[str, Any]:
        return {'params': self.params, 'score': self.score, 'result': self.result.to_dict()}


def _steps(spec: Mapping[str, float]) -> Tuple[float, float, float]:
    low = float(spec['min'])
    high = float(spec['max'])
    step = float(spec.get('step', 1.0))
    if step <= 0 or high < low:
        raise InvalidInput(f"invalid range {dict(spec)}")
    return low, high, step


def parameter_grid(ranges: Mapping[str, Mapping[str, float]]) -> List[Dict[str, float]]:
    """Cartesian product of every parameter's ``min..max`` by ``step``."""
    names = list(ranges)
    axes = []
    for name in names:
        low, high, step = _steps(ranges[name])
        values = np.arange(low, high + step / 2, step)
        axes.append([round(float(v), 10) for v in values])
    return [dict(zip(names, combo)) for combo in product(*axes)]


def random_samples(
    ranges: Mapping[str, Mapping[str, float]],
    iterations: int,
    seed: Optional[int] = None,
) -> List[Dict[str, float]]:
    """Draw `iterations` combinations uniformly, rounded to each step."""
    rng = np.random.default_rng(seed)
    samples: List[Dict[str, float]] = []
    for _ in range(iterations):
        combo: Dict[str, float] = {}
        for name, spec in ranges.items():
            low, high, step = _steps(spec)
            value = low + rng.random() * (high - low)
            combo[name] = round(round(value / step) * step, 10)
        samples.append(combo)
    return samples


def score(result: BacktestResult, metric: str = 'totalGain') -> float:
    """Ranking score of a run; ``sharpe`` is gain over max(1, |drawdown|)."""
    if metric == 'winRate':
        return result.win_rate
    if metric == 'gainLossRatio':
        return result.gain_loss_ratio
    if metric == 'sharpe':
        return result.total_gain / max(1.0, abs(result.max_drawdown))
    if metric == 'totalGain':
        return result.total_gain
    raise InvalidInput(f"unknown metric {metric!r}, expected one of {METRICS}")


def _run_single(args: Tuple[Sequence[Candle], Dict[str, Any], Dict[str, float], str]) -> Optional[SweepResult]:
    """Run one combination (worker function)."""
    candles, base, params, metric = args
    merged = dict(base)
    merged.update(params)
    try:
        result = simulate(candles, Settings.from_dict(merged))
    except InvalidInput as exc:
        logger.warning("Skipping %s: %s", params, exc)
        return None
    return SweepResult(params=params, score=score(result, metric), result=result)


def run_sweep(
    candles: Sequence[Candle],
    base_settings: Settings,
    combos: Sequence[Dict[str, float]],
    metric: str = 'totalGain',
    processes: int = 1,
) -> List[SweepResult]:
    """Evaluate every combination and return them best first.

    Parameters
    ----------
    candles : sequence of Candle
        Shared input of every run.
    base_settings : Settings
        Settings the combinations are applied on top of (camelCase keys).
    combos : sequence of dict
        Parameter overrides, one run each.
    metric : str
        One of `METRICS`.
    processes : int
        Worker processes; 1 runs in the calling process.
    """
    if metric not in METRICS:
        raise InvalidInput(f"unknown metric {metric!r}, expected one of {METRICS}")
    candles = list(candles)
    base = base_settings.to_dict()
    jobs = [(candles, base, dict(combo), metric) for combo in combos]
    logger.info("Running %d backtests on %d process(es)", len(jobs), max(1, processes))
    if processes > 1:
        with Pool(processes) as pool:
            outcomes = pool.map(_run_single, jobs)
    else:
        outcomes = [_run_single(job) for job in jobs]
    results = [r for r in outcomes if r is not None]
    results.sort(key=lambda r: r.score, reverse=True)
    return results
