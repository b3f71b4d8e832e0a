"""Backtesting package: rebalancing, daily returns and the calendar driver."""

from longshort.backtest.engine import BacktestDriver, BacktestResult, resolve_settings
from longshort.backtest.metrics import PerformanceSummary, SignalAccuracy, signal_accuracy, summarize
from longshort.backtest.rebalance import RebalanceEngine
from longshort.backtest.returns import ReturnCalculator

__all__ = [
    "BacktestDriver",
    "BacktestResult",
    "PerformanceSummary",
    "RebalanceEngine",
    "ReturnCalculator",
    "SignalAccuracy",
    "resolve_settings",
    "signal_accuracy",
    "summarize",
]
