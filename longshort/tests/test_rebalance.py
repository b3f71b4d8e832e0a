from __future__ import annotations

from decimal import Decimal

from longshort.backtest.rebalance import RebalanceEngine
from longshort.portfolio.ledger import HoldingsLedger
from longshort.shared.models import Condition, TradeAction, TradeStatus

COST = Decimal("0.001")
ZERO = Decimal("0")


def _engine(capital: str, fraction: str) -> tuple[HoldingsLedger, RebalanceEngine]:
    ledger = HoldingsLedger(Decimal(capital))
    return ledger, RebalanceEngine(ledger, Decimal(fraction))


def test_opens_long_at_fraction_of_value() -> None:
    ledger, engine = _engine("1000000", "0.02")

    report = engine.rebalance(["AAA"], [], {"AAA": Decimal("100")}, COST)

    assert report.trade_count == 1
    assert ledger.long_holdings == {"AAA": 200}
    assert ledger.value == Decimal("979980.00")


def test_second_identical_rebalance_trades_nothing() -> None:
    ledger, engine = _engine("1000000", "0.02")
    prices = {"AAA": Decimal("100"), "BBB": Decimal("50")}

    engine.rebalance(["AAA"], ["BBB"], prices, COST)
    value = ledger.value
    second = engine.rebalance(["AAA"], ["BBB"], prices, COST)

    assert second.trade_count == 0
    assert second.events == []
    assert ledger.value == value


def test_closes_run_before_opens() -> None:
    ledger, engine = _engine("100000", "0.1")
    ledger.open_long("AAA", 10, Decimal("10"), ZERO)
    ledger.open_short("BBB", 10, Decimal("10"), ZERO)
    prices = {"AAA": Decimal("10"), "BBB": Decimal("10"), "CCC": Decimal("10")}

    report = engine.rebalance(["CCC"], [], prices, COST)

    assert [e.action for e in report.executed] == [
        TradeAction.CLOSE_LONG,
        TradeAction.CLOSE_SHORT,
        TradeAction.OPEN_LONG,
    ]
    # 100000 + 99.9 - 100.1 = 99999.8 left to size from.
    assert ledger.long_holdings == {"CCC": 999}
    assert ledger.short_holdings == {}


def test_unpriced_position_is_left_open() -> None:
    ledger, engine = _engine("10000", "0.1")
    ledger.open_long("AAA", 10, Decimal("10"), ZERO)

    report = engine.rebalance([], [], {}, COST)

    assert ledger.long_holdings == {"AAA": 10}
    assert report.trade_count == 0
    assert [e.reason for e in report.skipped] == [Condition.MISSING_PRICE]


def test_non_positive_price_counts_as_missing() -> None:
    ledger, engine = _engine("10000", "0.1")

    report = engine.rebalance(["AAA"], [], {"AAA": Decimal("0")}, COST)

    assert ledger.long_holdings == {}
    assert report.skipped[0].symbol == "AAA"


def test_short_batch_is_sized_from_value_after_long_batch() -> None:
    ledger, engine = _engine("10000", "0.5")

    engine.rebalance(["A"], ["B"], {"A": Decimal("10"), "B": Decimal("10")}, ZERO)

    assert ledger.long_holdings == {"A": 500}
    assert ledger.short_holdings == {"B": 250}


def test_rejected_buy_does_not_stop_remaining_trades() -> None:
    ledger, engine = _engine("10000", "0.6")
    prices = {"A": Decimal("10"), "B": Decimal("10"), "C": Decimal("10")}

    report = engine.rebalance(["A", "B"], ["C"], prices, ZERO)

    assert [e.symbol for e in report.rejected] == ["B"]
    assert ledger.long_holdings == {"A": 600}
    assert ledger.short_holdings == {"C": 240}


def test_position_smaller_than_one_share_is_not_opened() -> None:
    ledger, engine = _engine("1000", "0.02")

    report = engine.rebalance(["PRICEY"], [], {"PRICEY": Decimal("500")}, COST)

    assert report.events == []
    assert ledger.is_flat


def test_duplicate_targets_are_bought_once() -> None:
    ledger, engine = _engine("10000", "0.1")

    engine.rebalance(["A", "A"], [], {"A": Decimal("10")}, ZERO)

    assert ledger.long_holdings == {"A": 100}


def test_symbol_targeted_both_ways_is_only_opened_long() -> None:
    ledger, engine = _engine("10000", "0.1")

    engine.rebalance(["A"], ["A"], {"A": Decimal("10")}, ZERO)

    assert ledger.long_holdings == {"A": 100}
    assert ledger.short_holdings == {}


def test_short_flipped_to_long_is_covered_then_bought() -> None:
    ledger, engine = _engine("10000", "0.1")
    ledger.open_short("A", 10, Decimal("10"), ZERO)

    report = engine.rebalance(["A"], [], {"A": Decimal("10")}, ZERO)

    assert [e.action for e in report.executed] == [TradeAction.CLOSE_SHORT, TradeAction.OPEN_LONG]
    assert ledger.short_holdings == {}
    assert ledger.long_holdings == {"A": 100}
    assert all(e.status == TradeStatus.EXECUTED for e in report.events)
