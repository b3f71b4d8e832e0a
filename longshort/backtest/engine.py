"""
Monthly Rebalancing Backtest Driver
Walks the trading calendar and folds signals into a return series.

Per trading date:
1. On the first date of a new month, rebalance to that date's signals
   and snapshot sector allocation
2. Mark the portfolio to market and record the day's return

On the final date every open position is closed out.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from longshort.backtest.metrics import PerformanceSummary, summarize
from longshort.backtest.rebalance import RebalanceEngine
from longshort.backtest.returns import ReturnCalculator
from longshort.core.errors import BacktestError, ConfigurationError
from longshort.core.ports import SignalSource
from longshort.core.types import Month
from longshort.data.prices import PriceHistory
from longshort.portfolio.allocation import SectorAllocationTracker
from longshort.portfolio.ledger import HoldingsLedger
from longshort.shared.config import BacktestSettings, get_settings
from longshort.shared.models import RebalanceReport, RunState, TradeEvent, TradeStatus

logger = logging.getLogger(__name__)


@dataclass
class BacktestResult:
    """Results of a backtest run."""
    settings: BacktestSettings
    returns: Dict[date, Decimal] = field(default_factory=dict)
    equity_curve: List[Tuple[date, Decimal]] = field(default_factory=list)
    final_value: Decimal = Decimal("0")
    long_holdings: Dict[str, int] = field(default_factory=dict)
    short_holdings: Dict[str, int] = field(default_factory=dict)
    sector_allocation: Dict[Month, Dict[str, Decimal]] = field(default_factory=dict)
    rebalances: List[RebalanceReport] = field(default_factory=list)
    events: List[TradeEvent] = field(default_factory=list)
    summary: PerformanceSummary = field(default_factory=PerformanceSummary)

    @property
    def total_trades(self) -> int:
        return sum(1 for e in self.events if e.status == TradeStatus.EXECUTED)

    @property
    def rejected_trades(self) -> int:
        return sum(1 for e in self.events if e.status == TradeStatus.REJECTED)


def resolve_settings(
    settings: Union[BacktestSettings, Mapping[str, object], None] = None,
) -> BacktestSettings:
    """
    Validate backtest settings before a run.

    Args:
        settings: Settings object, raw overrides, or None for environment defaults

    Raises:
        ConfigurationError: If any value fails validation
    """
    try:
        if settings is None:
            return get_settings().backtest
        if isinstance(settings, BacktestSettings):
            return BacktestSettings(**settings.model_dump())
        return BacktestSettings(**dict(settings))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid backtest settings: {e}") from e


class BacktestDriver:
    """
    Single-pass monthly rebalancing backtest.

    The driver exclusively owns the ledger for the run's duration.
    A driver runs once; build a new one to run again.
    """

    def __init__(
        self,
        prices: PriceHistory,
        signals: SignalSource,
        sector_map: Optional[Mapping[str, str]] = None,
        settings: Union[BacktestSettings, Mapping[str, object], None] = None,
    ) -> None:
        """
        Initialize backtest driver.

        Args:
            prices: Closing price history for the whole universe
            signals: Source of per-date target longs/shorts
            sector_map: Symbol -> sector for every known symbol
            settings: Capital, sizing and cost configuration
        """
        self._settings = resolve_settings(settings)
        self._prices = prices
        self._signals = signals
        self._ledger = HoldingsLedger(self._settings.initial_capital)
        self._rebalancer = RebalanceEngine(self._ledger, self._settings.position_size_fraction)
        self._calculator = ReturnCalculator(prices)
        self._allocation = SectorAllocationTracker(sector_map or {})

        self._state = RunState.PENDING
        self._returns: Dict[date, Decimal] = {}
        self._equity_curve: List[Tuple[date, Decimal]] = []
        self._rebalances: List[RebalanceReport] = []

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def ledger(self) -> HoldingsLedger:
        return self._ledger

    @property
    def settings(self) -> BacktestSettings:
        return self._settings

    def run(self) -> BacktestResult:
        """
        Run the backtest over every date in the price history.

        Returns:
            BacktestResult with the return series and final ledger state
        """
        if self._state != RunState.PENDING:
            raise BacktestError(f"Backtest already {self._state.value}; create a new driver")

        self._state = RunState.RUNNING
        dates = self._prices.trading_dates()
        logger.info(
            f"Starting backtest: {len(self._prices)} symbols, {len(dates)} dates, "
            f"capital={self._settings.initial_capital}"
        )

        current_month: Optional[Month] = None
        for day in dates:
            month = Month.of(day)
            if month != current_month:
                current_month = month
                self._rebalance(day, month)
            self._mark_to_market(day)

        if dates:
            self._state = RunState.LIQUIDATING
            self._liquidate(dates[-1])

        self._state = RunState.DONE
        result = self._build_result()
        logger.info(
            f"Backtest complete: {result.total_trades} trades, "
            f"{result.rejected_trades} rejected, final value={result.final_value:.2f}, "
            f"return={result.summary.total_return * 100:.2f}%"
        )
        return result

    def _rebalance(self, day: date, month: Month) -> None:
        """Rebalance on the first trading date of a month."""
        signals = self._signals.signals_for(day)
        report = self._rebalancer.rebalance(
            signals.longs,
            signals.shorts,
            self._prices.prices_on(day),
            self._settings.transaction_cost,
            trade_date=day,
        )
        self._rebalances.append(report)
        self._allocation.record(month, self._ledger)
        logger.info(f"Rebalanced on {day}. Portfolio value: {self._ledger.value:.2f}")

    def _mark_to_market(self, day: date) -> None:
        """Apply the day's return to portfolio value and record it."""
        previous = self._ledger.value
        daily = self._calculator.daily_return(day, self._ledger)
        new_value = previous * (Decimal("1") + daily)
        if new_value < 0:
            logger.warning(f"{day}: portfolio value marked below zero ({new_value:.2f}), floored at 0")
            new_value = Decimal("0")

        # Recompute from the values actually applied.
        if previous == 0:
            realized = Decimal("0")
        else:
            realized = (new_value - previous) / previous
        self._returns[day] = realized
        self._ledger.set_value(new_value)
        self._equity_curve.append((day, new_value))
        logger.debug(f"{day}: return={realized * 100:.4f}% value={new_value:.2f}")

    def _liquidate(self, day: date) -> None:
        """Close every position that has a price on the final date."""
        cost = self._settings.transaction_cost
        # Every attempted close sets the final return to -cost, whether the
        # ledger executes or rejects it.
        for symbol, shares in self._ledger.long_holdings.items():
            price = self._prices.price_on(symbol, day)
            if price is None or price <= 0:
                logger.warning(f"Cannot close long {symbol} on {day}: no price")
                continue
            self._ledger.close_long(symbol, shares, price, cost, trade_date=day)
            self._returns[day] = -cost
            logger.info(f"Closed long position for {symbol} on {day}")

        for symbol, shares in self._ledger.short_holdings.items():
            price = self._prices.price_on(symbol, day)
            if price is None or price <= 0:
                logger.warning(f"Cannot cover short {symbol} on {day}: no price")
                continue
            self._ledger.close_short(symbol, shares, price, cost, trade_date=day)
            self._returns[day] = -cost
            logger.info(f"Closed short position for {symbol} on {day}")

    def _build_result(self) -> BacktestResult:
        return BacktestResult(
            settings=self._settings,
            returns=dict(self._returns),
            equity_curve=list(self._equity_curve),
            final_value=self._ledger.value,
            long_holdings=self._ledger.long_holdings,
            short_holdings=self._ledger.short_holdings,
            sector_allocation=self._allocation.history,
            rebalances=list(self._rebalances),
            events=self._ledger.events,
            summary=summarize(self._returns),
        )
