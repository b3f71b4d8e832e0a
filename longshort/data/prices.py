"""Read-only per-symbol closing price history."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional


def to_decimal(value: object) -> Decimal:
    """Convert a numeric value to Decimal via its string form."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class PriceHistory:
    """Sorted closing prices per symbol; series may be sparse."""

    def __init__(self, series: Mapping[str, Mapping[date, object]]) -> None:
        self._prices: dict[str, dict[date, Decimal]] = {}
        self._dates: dict[str, list[date]] = {}
        for symbol, points in series.items():
            ordered = sorted(points.items())
            self._prices[symbol] = {day: to_decimal(price) for day, price in ordered}
            self._dates[symbol] = [day for day, _ in ordered]

    def __len__(self) -> int:
        return len(self._prices)

    def trading_dates(self) -> list[date]:
        """Sorted union of every date present in any series."""
        days: set[date] = set()
        for dates in self._dates.values():
            days.update(dates)
        return sorted(days)

    def price_on(self, symbol: str, day: date) -> Optional[Decimal]:
        prices = self._prices.get(symbol)
        if prices is None:
            return None
        return prices.get(day)

    def previous_price(self, symbol: str, day: date) -> Optional[Decimal]:
        """Latest price strictly before ``day``, or None."""
        dates = self._dates.get(symbol)
        if not dates:
            return None
        idx = bisect_left(dates, day)
        if idx == 0:
            return None
        return self._prices[symbol][dates[idx - 1]]

    def next_price(self, symbol: str, day: date) -> Optional[Decimal]:
        """Earliest price strictly after ``day``, or None."""
        dates = self._dates.get(symbol)
        if not dates:
            return None
        idx = bisect_right(dates, day)
        if idx == len(dates):
            return None
        return self._prices[symbol][dates[idx]]

    def prices_on(self, day: date) -> dict[str, Decimal]:
        """Map of symbol to price for every symbol quoted on ``day``."""
        return {
            symbol: prices[day] for symbol, prices in self._prices.items() if day in prices
        }
