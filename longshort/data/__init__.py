"""Price history and file loaders."""

from longshort.data.prices import PriceHistory

__all__ = ["PriceHistory"]
