"""
Backtest Runner CLI
Command-line interface for running a long/short backtest from CSV files.
"""

import argparse
import logging
import sys

from longshort.backtest.engine import BacktestDriver, BacktestResult
from longshort.backtest.metrics import SignalAccuracy, signal_accuracy
from longshort.core.errors import BacktestError
from longshort.data.csv_source import CsvMarketData, load_signals
from longshort.shared.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from settings."""
    settings = get_settings().logging
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=settings.log_format,
    )


def print_result(result: BacktestResult, accuracy: SignalAccuracy | None = None) -> None:
    """Print backtest results to console."""
    summary = result.summary
    print("\n" + "=" * 60)
    print("BACKTEST RESULTS")
    print("=" * 60)
    print(f"Initial Capital: {result.settings.initial_capital:,.2f}")
    print(f"Final Value: {result.final_value:,.2f}")
    print(f"Trading Days: {summary.trading_days}")
    print("-" * 60)
    print(f"Total Return: {summary.total_return * 100:+.2f}%")
    print(f"Annualized Return: {summary.annualized_return * 100:+.2f}%")
    print(f"Annualized Volatility: {summary.annualized_volatility * 100:.2f}%")
    print(f"Sharpe Ratio: {summary.sharpe_ratio:.4f}")
    print(f"Sortino Ratio: {summary.sortino_ratio:.4f}")
    print(f"Max Drawdown: {summary.max_drawdown * 100:.2f}%")
    print(f"Calmar Ratio: {summary.calmar_ratio:.4f}")
    print("-" * 60)
    print(f"Trades Executed: {result.total_trades}")
    print(f"Trades Rejected: {result.rejected_trades}")
    if accuracy is not None:
        print(f"Signal Accuracy: {accuracy.accuracy * 100:.2f}% ({accuracy.correct}/{accuracy.total})")
        for year, acc in accuracy.yearly.items():
            print(f"  Signals {year}: {acc * 100:.2f}%")
    for year, ret in summary.yearly_returns.items():
        print(f"Year {year}: {ret * 100:+.2f}%")
    print("-" * 60)
    print("Sector Allocation (by position count):")
    for month, snapshot in result.sector_allocation.items():
        parts = ", ".join(f"{sector} {pct:.1f}%" for sector, pct in sorted(snapshot.items()))
        print(f"  {month}: {parts or '(no holdings)'}")
    if result.long_holdings or result.short_holdings:
        print("-" * 60)
        print(f"Unclosed Longs: {result.long_holdings}")
        print(f"Unclosed Shorts: {result.short_holdings}")
    print("=" * 60 + "\n")


def run_backtest(args) -> int:
    """Run a single backtest."""
    overrides = get_settings().backtest.model_dump()
    if args.capital is not None:
        overrides["initial_capital"] = args.capital
    if args.position_size is not None:
        overrides["position_size_fraction"] = args.position_size
    if args.cost is not None:
        overrides["transaction_cost"] = args.cost

    market = CsvMarketData(args.prices).load()
    signals = load_signals(args.signals)

    driver = BacktestDriver(market.prices, signals, market.sectors, settings=overrides)
    result = driver.run()

    print_result(result, signal_accuracy(signals, market.prices))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Long/Short Rebalancing Backtest Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    run_parser = subparsers.add_parser("run", help="Run a backtest")
    run_parser.add_argument("--prices", required=True, help="CSV with sector,symbol,date,close")
    run_parser.add_argument("--signals", required=True, help="CSV with date,side,symbol")
    run_parser.add_argument("--capital", default=None, help="Initial capital")
    run_parser.add_argument("--position-size", default=None, help="Fraction of value per position")
    run_parser.add_argument("--cost", default=None, help="Transaction cost fraction")
    run_parser.set_defaults(func=run_backtest)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.log_level)
    try:
        return args.func(args)
    except BacktestError as e:
        logger.error(f"Backtest failed: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
