"""Pure core contracts for the backtest engine."""

from longshort.core.errors import (
    BacktestError,
    ConfigurationError,
    DataLoadError,
    InvalidTradeError,
    PositionConflictError,
)
from longshort.core.types import Month, Signals

__all__ = [
    "BacktestError",
    "ConfigurationError",
    "DataLoadError",
    "InvalidTradeError",
    "PositionConflictError",
    "Month",
    "Signals",
]
