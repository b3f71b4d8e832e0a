"""
Rebalance Engine
Moves ledger holdings toward target long/short sets.

Order of operations is fixed, closing first so that freed capital is
available to the opens:
1. Close longs no longer targeted
2. Cover shorts no longer targeted
3. Open new longs
4. Open new shorts
"""

import logging
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from typing import Iterable, List, Mapping, Optional

from longshort.data.prices import to_decimal
from longshort.portfolio.ledger import HoldingsLedger
from longshort.shared.models import Condition, RebalanceReport, TradeAction, TradeEvent

logger = logging.getLogger(__name__)


def _unique(symbols: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(symbols))


class RebalanceEngine:
    """
    Computes and executes the closes and opens needed to reach a target.

    Each open batch sizes positions at ``position_size_fraction`` of the
    portfolio value read when that batch begins, so the short batch is
    sized from the value left after the long batch.
    """

    def __init__(self, ledger: HoldingsLedger, position_size_fraction: Decimal) -> None:
        """
        Initialize rebalance engine.

        Args:
            ledger: Ledger to trade against
            position_size_fraction: Fraction of portfolio value per new position
        """
        self._ledger = ledger
        self._fraction = to_decimal(position_size_fraction)

    def rebalance(
        self,
        target_longs: Iterable[str],
        target_shorts: Iterable[str],
        prices: Mapping[str, Decimal],
        transaction_cost: Decimal,
        trade_date: Optional[date] = None,
    ) -> RebalanceReport:
        """
        Rebalance the ledger toward the targets.

        Symbols without a positive price in ``prices`` are skipped; a
        long or short that cannot be priced stays open.

        Args:
            target_longs: Symbols to hold long
            target_shorts: Symbols to hold short
            prices: Symbol -> price for the rebalance date
            transaction_cost: Fractional cost per trade
            trade_date: Date recorded on the events

        Returns:
            RebalanceReport listing every executed, rejected and skipped trade
        """
        longs = _unique(target_longs)
        shorts = _unique(target_shorts)
        cost = to_decimal(transaction_cost)
        events: List[TradeEvent] = []

        long_set = set(longs)
        for symbol, shares in self._ledger.long_holdings.items():
            if symbol in long_set:
                continue
            price = self._price(prices, symbol)
            if price is None:
                events.append(self._ledger.record_skip(
                    TradeAction.CLOSE_LONG, symbol, shares, Condition.MISSING_PRICE, trade_date
                ))
                continue
            events.append(self._ledger.close_long(symbol, shares, price, cost, trade_date))

        short_set = set(shorts)
        for symbol, shares in self._ledger.short_holdings.items():
            if symbol in short_set:
                continue
            price = self._price(prices, symbol)
            if price is None:
                events.append(self._ledger.record_skip(
                    TradeAction.CLOSE_SHORT, symbol, shares, Condition.MISSING_PRICE, trade_date
                ))
                continue
            events.append(self._ledger.close_short(symbol, shares, price, cost, trade_date))

        if longs:
            events.extend(self._open_batch(TradeAction.OPEN_LONG, longs, prices, cost, trade_date))
        if shorts:
            events.extend(self._open_batch(TradeAction.OPEN_SHORT, shorts, prices, cost, trade_date))

        report = RebalanceReport(trade_date=trade_date, events=events)
        logger.info(
            f"Rebalanced{f' on {trade_date}' if trade_date else ''}: "
            f"executed={len(report.executed)} rejected={len(report.rejected)} "
            f"skipped={len(report.skipped)} value={self._ledger.value:.2f}"
        )
        return report

    def _open_batch(
        self,
        action: TradeAction,
        symbols: List[str],
        prices: Mapping[str, Decimal],
        cost: Decimal,
        trade_date: Optional[date],
    ) -> List[TradeEvent]:
        allocation = self._ledger.value * self._fraction
        events: List[TradeEvent] = []
        for symbol in symbols:
            longs = self._ledger.long_holdings
            shorts = self._ledger.short_holdings
            if symbol in longs or symbol in shorts:
                # Already held: same side needs no trade, opposite side
                # means an earlier cover/sell failed.
                continue
            price = self._price(prices, symbol)
            if price is None:
                events.append(self._ledger.record_skip(
                    action, symbol, 0, Condition.MISSING_PRICE, trade_date
                ))
                continue
            shares = int((allocation / price).to_integral_value(rounding=ROUND_FLOOR))
            if shares < 1:
                continue
            if action == TradeAction.OPEN_LONG:
                events.append(self._ledger.open_long(symbol, shares, price, cost, trade_date))
            else:
                events.append(self._ledger.open_short(symbol, shares, price, cost, trade_date))
        return events

    @staticmethod
    def _price(prices: Mapping[str, Decimal], symbol: str) -> Optional[Decimal]:
        price = prices.get(symbol)
        if price is None:
            return None
        price = to_decimal(price)
        if price <= 0:
            return None
        return price
