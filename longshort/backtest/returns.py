"""Daily value-weighted portfolio return from held positions."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from longshort.data.prices import PriceHistory
from longshort.portfolio.ledger import HoldingsLedger
from longshort.shared.models import Condition

logger = logging.getLogger(__name__)


class ReturnCalculator:
    """Blend each position's price change, weighted by its prior-day exposure.

    Weights divide by the current portfolio value rather than the prior
    day's, and the blend is arithmetic, not logarithmic.
    """

    def __init__(self, prices: PriceHistory) -> None:
        self._prices = prices

    def daily_return(self, day: date, ledger: HoldingsLedger) -> Decimal:
        value = ledger.value
        if value == 0:
            logger.debug(f"{day}: {Condition.DEGENERATE_VALUE.value}, return forced to 0")
            return Decimal("0")

        total = Decimal("0")
        for symbol, shares in ledger.long_holdings.items():
            move = self._move(symbol, day)
            if move is not None:
                price, prev = move
                total += ((price - prev) / prev) * (shares * prev) / value
        for symbol, shares in ledger.short_holdings.items():
            move = self._move(symbol, day)
            if move is not None:
                price, prev = move
                total += ((prev - price) / prev) * (shares * prev) / value
        return total

    def _move(self, symbol: str, day: date) -> tuple[Decimal, Decimal] | None:
        price = self._prices.price_on(symbol, day)
        if price is None:
            return None
        prev = self._prices.previous_price(symbol, day)
        if prev is None or prev <= 0:
            return None
        return price, prev
