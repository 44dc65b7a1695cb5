import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from stratsim.execution.models import Trade
from stratsim.reporting.metrics import compute_metrics, max_drawdown, max_runup

import unittest


def trade(pnl: float, exit_time: int = 0) -> Trade:
    return Trade(
        type='long', entry_price=1.0, exit_price=1.0,
        entry_time=exit_time, exit_time=exit_time, pnl=pnl, exit_reason='signal',
    )


class TestDrawdown(unittest.TestCase):
    def test_drawdown_and_runup(self) -> None:
        equity = [100, 120, 90, 130, 125]
        self.assertEqual(max_drawdown(equity), -30)
        self.assertEqual(max_runup(equity), 40)

    def test_flat_curve(self) -> None:
        self.assertEqual(max_drawdown([5, 5, 5]), 0.0)
        self.assertEqual(max_runup([5, 5, 5]), 0.0)
        self.assertEqual(max_drawdown([]), 0.0)


class TestComputeMetrics(unittest.TestCase):
    def test_no_trades(self) -> None:
        metrics = compute_metrics([], [1000.0, 1000.0], initial_capital=1000.0, total_bars=2)
        self.assertEqual(metrics['total_trades'], 0)
        self.assertEqual(metrics['win_rate'], 0.0)
        self.assertEqual(metrics['gain_loss_ratio'], 0.0)
        self.assertEqual(metrics['avg_gain_per_trade'], 0.0)
        self.assertEqual(metrics['best_trade'], 0.0)
        self.assertEqual(metrics['worst_trade'], 0.0)
        self.assertEqual(metrics['avg_orders_per_day'], 0.0)
        self.assertEqual(metrics['daily_performance'], [])

    def test_partition_and_ratios(self) -> None:
        trades = [trade(100), trade(-50), trade(0), trade(300), trade(-150)]
        equity = [1000.0, 1100.0, 1050.0, 1050.0, 1350.0, 1200.0]
        metrics = compute_metrics(
            trades, equity, initial_capital=1000.0, bars_held=3, total_bars=6,
            daily_gains={'2024-01-02': 250.0, '2024-01-01': -50.0},
        )
        self.assertEqual(metrics['winning_trades'], 2)
        self.assertEqual(metrics['losing_trades'], 2)
        self.assertEqual(metrics['neutral_trades'], 1)
        self.assertAlmostEqual(metrics['total_gain'], 200.0)
        self.assertAlmostEqual(metrics['win_rate'], 40.0)
        # mean win 200 / mean loss 100
        self.assertAlmostEqual(metrics['gain_loss_ratio'], 2.0)
        self.assertAlmostEqual(metrics['gains_only'], 400.0)
        self.assertAlmostEqual(metrics['losses_only'], -200.0)
        self.assertAlmostEqual(metrics['avg_gain_per_trade'], 40.0)
        self.assertEqual(metrics['best_trade'], 300)
        self.assertEqual(metrics['worst_trade'], -150)
        self.assertAlmostEqual(metrics['max_drawdown'], -150.0)
        self.assertAlmostEqual(metrics['max_runup'], 350.0)
        self.assertAlmostEqual(metrics['time_in_market'], 50.0)
        self.assertAlmostEqual(metrics['avg_orders_per_day'], 2.5)
        self.assertEqual(
            metrics['daily_performance'],
            [('2024-01-01', -50.0), ('2024-01-02', 250.0)],
        )

    def test_ratio_without_losses_is_mean_win(self) -> None:
        metrics = compute_metrics([trade(10), trade(30)], [0.0, 10.0, 40.0], initial_capital=0.0)
        self.assertAlmostEqual(metrics['gain_loss_ratio'], 20.0)

    def test_only_losses(self) -> None:
        metrics = compute_metrics([trade(-10)], [100.0, 90.0], initial_capital=100.0)
        self.assertEqual(metrics['best_trade'], -10)
        self.assertEqual(metrics['worst_trade'], -10)
        self.assertEqual(metrics['gain_loss_ratio'], 0.0)


if __name__ == '__main__':
    unittest.main()
