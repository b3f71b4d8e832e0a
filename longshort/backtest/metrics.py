"""
Performance Metrics
Summary statistics derived from a daily return series.

All figures are plain fractions (0.05 == 5%). Degenerate inputs
(empty series, zero volatility) produce zeros rather than errors.
"""

import math
import statistics
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Mapping

from longshort.data.prices import PriceHistory
from longshort.signals import StaticSignalSource

TRADING_DAYS_PER_YEAR = 252


@dataclass
class PerformanceSummary:
    """Headline statistics for a return series."""
    trading_days: int = 0
    total_return: float = 0.0
    annualized_return: float = 0.0
    annualized_volatility: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    max_drawdown: float = 0.0  # negative fraction from running peak
    calmar_ratio: float = 0.0
    yearly_returns: Dict[int, float] = field(default_factory=dict)


def cumulative_growth(returns: Mapping[date, Decimal]) -> List[float]:
    """Compounded growth of one unit of capital after each day."""
    curve = []
    growth = 1.0
    for ret in returns.values():
        growth *= 1.0 + float(ret)
        curve.append(growth)
    return curve


def max_drawdown(returns: Mapping[date, Decimal]) -> float:
    """
    Deepest decline from a running peak of the compounded curve.

    Returns:
        Drawdown as a non-positive fraction (e.g. -0.25)
    """
    peak = 1.0
    worst = 0.0
    for growth in cumulative_growth(returns):
        peak = max(peak, growth)
        if peak <= 0:
            continue
        worst = min(worst, (growth - peak) / peak)
    return worst


def yearly_returns(returns: Mapping[date, Decimal]) -> Dict[int, float]:
    """Compounded return per calendar year."""
    growth_by_year: Dict[int, float] = {}
    for day, ret in returns.items():
        growth_by_year[day.year] = growth_by_year.get(day.year, 1.0) * (1.0 + float(ret))
    return {year: growth - 1.0 for year, growth in sorted(growth_by_year.items())}


def summarize(returns: Mapping[date, Decimal]) -> PerformanceSummary:
    """Compute a PerformanceSummary for a date-ordered return series."""
    values = [float(r) for r in returns.values()]
    summary = PerformanceSummary(trading_days=len(values))
    if not values:
        return summary

    curve = cumulative_growth(returns)
    summary.total_return = curve[-1] - 1.0
    summary.max_drawdown = max_drawdown(returns)
    summary.yearly_returns = yearly_returns(returns)

    years = len(values) / TRADING_DAYS_PER_YEAR
    if curve[-1] > 0:
        summary.annualized_return = curve[-1] ** (1.0 / years) - 1.0
    else:
        summary.annualized_return = -1.0

    if len(values) > 1:
        mean = statistics.fmean(values)
        stdev = statistics.stdev(values)
        annualizer = math.sqrt(TRADING_DAYS_PER_YEAR)
        summary.annualized_volatility = stdev * annualizer
        if stdev > 0:
            summary.sharpe_ratio = mean / stdev * annualizer

        downside = math.sqrt(sum(min(v, 0.0) ** 2 for v in values) / len(values))
        if downside > 0:
            summary.sortino_ratio = mean / downside * annualizer

    if summary.max_drawdown < 0:
        summary.calmar_ratio = summary.annualized_return / abs(summary.max_drawdown)

    return summary


@dataclass
class SignalAccuracy:
    """Share of signals whose next-day price move went the signalled way."""
    correct: int = 0
    total: int = 0
    yearly: Dict[int, float] = field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


def signal_accuracy(signals: StaticSignalSource, prices: PriceHistory) -> SignalAccuracy:
    """
    Score every long and short signal against the symbol's next quote.

    A long is correct when the next price is higher, a short when it is
    lower; an unchanged price counts against both. Signals without a
    price on the signal date or a later quote are not scored.

    Args:
        signals: Per-date long and short lists
        prices: Closing price history

    Returns:
        SignalAccuracy with overall counts and per-year accuracy
    """
    correct_by_year: Dict[int, int] = {}
    total_by_year: Dict[int, int] = {}
    for day in signals.dates():
        targets = signals.signals_for(day)
        scored = [(s, 1) for s in targets.longs] + [(s, -1) for s in targets.shorts]
        for symbol, direction in scored:
            today = prices.price_on(symbol, day)
            upcoming = prices.next_price(symbol, day)
            if today is None or upcoming is None:
                continue
            total_by_year[day.year] = total_by_year.get(day.year, 0) + 1
            if (upcoming - today) * direction > 0:
                correct_by_year[day.year] = correct_by_year.get(day.year, 0) + 1

    return SignalAccuracy(
        correct=sum(correct_by_year.values()),
        total=sum(total_by_year.values()),
        yearly={
            year: correct_by_year.get(year, 0) / total
            for year, total in sorted(total_by_year.items())
        },
    )
