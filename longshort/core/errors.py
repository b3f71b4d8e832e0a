"""Typed errors for backtest preconditions."""


class BacktestError(Exception):
    """Base class for backtest errors."""


class ConfigurationError(BacktestError):
    """Raised when backtest settings are rejected before a run starts."""


class InvalidTradeError(BacktestError):
    """Raised when a trade primitive is called with non-positive shares or price."""


class PositionConflictError(BacktestError):
    """Raised when opening a side while the symbol is held on the other side."""


class DataLoadError(BacktestError):
    """Raised when an input file is missing required columns."""
