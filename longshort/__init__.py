"""Long/short monthly rebalancing backtest engine."""

from longshort.backtest.engine import BacktestDriver, BacktestResult
from longshort.data.prices import PriceHistory
from longshort.signals import StaticSignalSource

__all__ = ["BacktestDriver", "BacktestResult", "PriceHistory", "StaticSignalSource"]
