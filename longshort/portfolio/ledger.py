"""
Holdings Ledger
Authoritative long/short share counts and portfolio value.

The ledger owns the only mutable state of a backtest run. Holdings
change exclusively through the four trade primitives; every call
returns a TradeEvent and logs it, rejected or not.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from longshort.core.errors import ConfigurationError, InvalidTradeError, PositionConflictError
from longshort.data.prices import to_decimal
from longshort.shared.models import Condition, TradeAction, TradeEvent, TradeStatus

logger = logging.getLogger(__name__)

_ONE = Decimal("1")


class HoldingsLedger:
    """
    Long and short share counts plus the residual portfolio value.

    Portfolio value is not a sum of market values: it moves by trade
    cash flows and by the driver's daily return application.
    """

    def __init__(self, initial_value: Decimal) -> None:
        """
        Initialize ledger.

        Args:
            initial_value: Starting portfolio value (capital)
        """
        initial_value = to_decimal(initial_value)
        if initial_value < 0:
            raise ConfigurationError(f"Initial value must be non-negative, got {initial_value}")
        self._value = initial_value
        self._long: Dict[str, int] = {}  # symbol -> shares
        self._short: Dict[str, int] = {}  # symbol -> shares
        self._events: List[TradeEvent] = []

    @property
    def value(self) -> Decimal:
        """Get current portfolio value."""
        return self._value

    @property
    def long_holdings(self) -> Dict[str, int]:
        """Get current long positions."""
        return self._long.copy()

    @property
    def short_holdings(self) -> Dict[str, int]:
        """Get current short positions."""
        return self._short.copy()

    @property
    def events(self) -> List[TradeEvent]:
        """Get every trade event recorded so far."""
        return self._events.copy()

    @property
    def is_flat(self) -> bool:
        """Check if no positions are open."""
        return not self._long and not self._short

    def held_symbols(self) -> List[str]:
        """Symbols held long, then symbols held short."""
        return list(self._long) + list(self._short)

    def set_value(self, new_value: Decimal) -> None:
        """
        Overwrite portfolio value after a daily mark.

        Args:
            new_value: Marked portfolio value
        """
        new_value = to_decimal(new_value)
        if new_value < 0:
            raise ValueError(f"Portfolio value cannot be negative: {new_value}")
        self._value = new_value

    # ------------------------------------------------------------------
    # Trade primitives
    # ------------------------------------------------------------------

    def open_long(
        self,
        symbol: str,
        shares: int,
        price: Decimal,
        cost: Decimal,
        trade_date: Optional[date] = None,
    ) -> TradeEvent:
        """
        Buy shares (open or add to a long position).

        Args:
            symbol: Symbol to buy
            shares: Number of shares, must be positive
            price: Price per share, must be positive
            cost: Fractional transaction cost
            trade_date: Date recorded on the event

        Returns:
            TradeEvent, rejected with INSUFFICIENT_FUNDS when the total
            cost exceeds portfolio value
        """
        price, cost = self._check_open(TradeAction.OPEN_LONG, symbol, shares, price, cost)
        if symbol in self._short:
            raise PositionConflictError(f"Cannot buy {symbol}: symbol is held short")

        total_cost = shares * price * (_ONE + cost)
        if total_cost > self._value:
            return self._reject(
                TradeAction.OPEN_LONG, symbol, shares, price, total_cost,
                Condition.INSUFFICIENT_FUNDS, trade_date,
                f"Insufficient funds to buy {shares} shares of {symbol}: "
                f"cost {total_cost:.2f}, available {self._value:.2f}",
            )

        self._value -= total_cost
        self._long[symbol] = self._long.get(symbol, 0) + shares
        return self._execute(
            TradeAction.OPEN_LONG, symbol, shares, price, total_cost, trade_date,
            f"Bought {shares} shares of {symbol} @ {price} (total cost incl. fees: {total_cost:.2f})",
        )

    def close_long(
        self,
        symbol: str,
        shares: int,
        price: Decimal,
        cost: Decimal,
        trade_date: Optional[date] = None,
    ) -> TradeEvent:
        """
        Sell shares out of a long position.

        Returns:
            TradeEvent, rejected with INSUFFICIENT_SHARES when fewer than
            ``shares`` are held
        """
        price, cost = self._check_close(symbol, price, cost)
        held = self._long.get(symbol, 0)
        if shares <= 0 or shares > held:
            return self._reject(
                TradeAction.CLOSE_LONG, symbol, shares, price, Decimal("0"),
                Condition.INSUFFICIENT_SHARES, trade_date,
                f"Insufficient shares to sell {shares} shares of {symbol}: held {held}",
            )

        proceeds = shares * price * (_ONE - cost)
        self._value += proceeds
        self._reduce(self._long, symbol, shares)
        return self._execute(
            TradeAction.CLOSE_LONG, symbol, shares, price, proceeds, trade_date,
            f"Sold {shares} shares of {symbol} @ {price} (proceeds after fees: {proceeds:.2f})",
        )

    def open_short(
        self,
        symbol: str,
        shares: int,
        price: Decimal,
        cost: Decimal,
        trade_date: Optional[date] = None,
    ) -> TradeEvent:
        """
        Short sell shares. Proceeds are credited immediately.

        No funds check is applied: proceeds always increase value.
        """
        price, cost = self._check_open(TradeAction.OPEN_SHORT, symbol, shares, price, cost)
        if symbol in self._long:
            raise PositionConflictError(f"Cannot short {symbol}: symbol is held long")

        proceeds = shares * price * (_ONE - cost)
        self._value += proceeds
        self._short[symbol] = self._short.get(symbol, 0) + shares
        return self._execute(
            TradeAction.OPEN_SHORT, symbol, shares, price, proceeds, trade_date,
            f"Shorted {shares} shares of {symbol} @ {price} (proceeds after fees: {proceeds:.2f})",
        )

    def close_short(
        self,
        symbol: str,
        shares: int,
        price: Decimal,
        cost: Decimal,
        trade_date: Optional[date] = None,
    ) -> TradeEvent:
        """
        Cover (buy back) shares of a short position.

        Returns:
            TradeEvent, rejected with INSUFFICIENT_SHARES or
            INSUFFICIENT_FUNDS
        """
        price, cost = self._check_close(symbol, price, cost)
        held = self._short.get(symbol, 0)
        if shares <= 0 or shares > held:
            return self._reject(
                TradeAction.CLOSE_SHORT, symbol, shares, price, Decimal("0"),
                Condition.INSUFFICIENT_SHARES, trade_date,
                f"Insufficient short shares to cover {shares} shares of {symbol}: held {held}",
            )

        total_cost = shares * price * (_ONE + cost)
        if total_cost > self._value:
            return self._reject(
                TradeAction.CLOSE_SHORT, symbol, shares, price, total_cost,
                Condition.INSUFFICIENT_FUNDS, trade_date,
                f"Insufficient funds to cover {shares} shares of {symbol}: "
                f"cost {total_cost:.2f}, available {self._value:.2f}",
            )

        self._value -= total_cost
        self._reduce(self._short, symbol, shares)
        return self._execute(
            TradeAction.CLOSE_SHORT, symbol, shares, price, total_cost, trade_date,
            f"Covered {shares} shares of {symbol} @ {price} (total cost incl. fees: {total_cost:.2f})",
        )

    def record_skip(
        self,
        action: TradeAction,
        symbol: str,
        shares: int,
        reason: Condition,
        trade_date: Optional[date] = None,
    ) -> TradeEvent:
        """Record a trade that was not attempted (e.g. no quote for the date)."""
        event = TradeEvent(
            action=action,
            symbol=symbol,
            shares=shares,
            status=TradeStatus.SKIPPED,
            value_after=self._value,
            reason=reason,
            trade_date=trade_date,
            message=f"Skipped {action.value} {symbol}: {reason.value}",
        )
        self._events.append(event)
        logger.debug(event.message)
        return event

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_open(
        action: TradeAction, symbol: str, shares: int, price: Decimal, cost: Decimal
    ) -> tuple[Decimal, Decimal]:
        price = to_decimal(price)
        if shares <= 0:
            raise InvalidTradeError(f"{action.value} {symbol}: shares must be positive, got {shares}")
        if price <= 0:
            raise InvalidTradeError(f"{action.value} {symbol}: price must be positive, got {price}")
        return price, to_decimal(cost)

    @staticmethod
    def _check_close(symbol: str, price: Decimal, cost: Decimal) -> tuple[Decimal, Decimal]:
        price = to_decimal(price)
        if price <= 0:
            raise InvalidTradeError(f"close {symbol}: price must be positive, got {price}")
        return price, to_decimal(cost)

    @staticmethod
    def _reduce(book: Dict[str, int], symbol: str, shares: int) -> None:
        remaining = book[symbol] - shares
        if remaining == 0:
            del book[symbol]
        else:
            book[symbol] = remaining

    def _execute(
        self,
        action: TradeAction,
        symbol: str,
        shares: int,
        price: Decimal,
        amount: Decimal,
        trade_date: Optional[date],
        message: str,
    ) -> TradeEvent:
        event = TradeEvent(
            action=action,
            symbol=symbol,
            shares=shares,
            price=price,
            status=TradeStatus.EXECUTED,
            amount=amount,
            value_after=self._value,
            trade_date=trade_date,
            message=message,
        )
        self._events.append(event)
        logger.info(message)
        return event

    def _reject(
        self,
        action: TradeAction,
        symbol: str,
        shares: int,
        price: Decimal,
        amount: Decimal,
        reason: Condition,
        trade_date: Optional[date],
        message: str,
    ) -> TradeEvent:
        event = TradeEvent(
            action=action,
            symbol=symbol,
            shares=shares,
            price=price,
            status=TradeStatus.REJECTED,
            amount=amount,
            value_after=self._value,
            reason=reason,
            trade_date=trade_date,
            message=message,
        )
        self._events.append(event)
        logger.warning(message)
        return event
