"""
Application entry point.

This module defines a simple command-line interface for running the
simulator in two modes: a single `backtest` that writes a report, and
an `optimize` sweep that ranks parameter combinations.  Candles come
from CSV files or, when none are configured, from a seeded synthetic
random walk.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from .config.schema import Config, DataConfig, load_config
from .data.csv_data import CSVDataLoader
from .data.synthetic import fallback_candles
from .execution.backtest_exec import simulate
from .execution.models import Candle
from .execution.optimizer import parameter_grid, random_samples, run_sweep
from .reporting.report import generate_backtest_report
from .utils.persistence import save_json


def _setup_logging(verbose: bool) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def load_candles(data: DataConfig, asset: str) -> List[Candle]:
    """Load candles according to the `data` section of the config."""
    if data.source == 'csv':
        return CSVDataLoader(data.csv_dir).load(data.symbol)
    logging.info("Using %d synthetic %s candles (seed %s)", data.bars, asset, data.seed)
    return fallback_candles(asset, num_bars=data.bars, seed=data.seed, interval=data.interval)


def run_backtest(config: Config) -> None:
    candles = load_candles(config.data, config.settings.asset)
    result = simulate(candles, config.settings)
    generate_backtest_report(result, candles, out_dir=config.report.out_dir)
    logging.info(
        "Backtest complete: %d trades, total gain %.2f. Results saved to %r.",
        result.total_trades, result.total_gain, config.report.out_dir,
    )


def run_optimize(config: Config) -> None:
    opt = config.optimize
    if not opt.ranges:
        raise ValueError("optimize.ranges is empty; nothing to sweep")
    candles = load_candles(config.data, config.settings.asset)
    if opt.method == 'grid':
        combos = parameter_grid(opt.ranges)
    else:
        combos = random_samples(opt.ranges, opt.iterations, seed=opt.seed)
    results = run_sweep(candles, config.settings, combos, metric=opt.metric, processes=opt.processes)
    out_path = os.path.join(config.report.out_dir, 'optimization.json')
    save_json(out_path, {
        'metric': opt.metric,
        'baseSettings': config.settings.to_dict(),
        'results': [r.to_dict() for r in results],
    })
    if results:
        best = results[0]
        logging.info("Best %s = %.4f with %s", opt.metric, best.score, best.params)
    logging.info("Optimization complete: %d runs saved to %r.", len(results), out_path)


def main(argv: Optional[List[str]] = None) -> None:
    """Parse command-line arguments and dispatch to the appropriate mode."""
    parser = argparse.ArgumentParser(description="Strategy backtest simulator")
    parser.add_argument('mode', choices=['backtest', 'optimize'], help="Operating mode")
    parser.add_argument('--config', default='config.yaml', help="Path to configuration YAML file")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    config = load_config(args.config) if os.path.exists(args.config) else Config()
    if args.mode == 'backtest':
        logging.info("Running backtest...")
        run_backtest(config)
    else:
        logging.info("Running optimization...")
        run_optimize(config)


if __name__ == '__main__':
    main()
