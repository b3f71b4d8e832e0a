from __future__ import annotations

from datetime import date
from decimal import Decimal

from longshort.backtest.returns import ReturnCalculator
from longshort.data.prices import PriceHistory
from longshort.portfolio.ledger import HoldingsLedger

D1 = date(2024, 3, 1)
D2 = date(2024, 3, 4)
D3 = date(2024, 3, 5)
ZERO = Decimal("0")


def _prices() -> PriceHistory:
    return PriceHistory(
        {
            "AAA": {D2: 110, D1: 100},
            "BBB": {D1: 50, D2: 45},
            "CCC": {D1: 20, D3: 30},
        }
    )


def _ledger_with(value: str) -> HoldingsLedger:
    ledger = HoldingsLedger(Decimal("100000"))
    ledger.open_long("AAA", 5, Decimal("100"), ZERO)
    ledger.open_short("BBB", 10, Decimal("50"), ZERO)
    ledger.set_value(Decimal(value))
    return ledger


def test_long_and_short_contributions_are_weighted_by_prior_exposure() -> None:
    calculator = ReturnCalculator(_prices())

    # long: +10% on 500 of 1000; short: price -10% on 500 of 1000
    assert calculator.daily_return(D2, _ledger_with("1000")) == Decimal("0.1")


def test_zero_value_yields_zero_return_regardless_of_holdings() -> None:
    calculator = ReturnCalculator(_prices())

    assert calculator.daily_return(D2, _ledger_with("0")) == Decimal("0")


def test_first_quote_has_no_previous_price_and_contributes_nothing() -> None:
    calculator = ReturnCalculator(_prices())

    assert calculator.daily_return(D1, _ledger_with("1000")) == Decimal("0")


def test_missing_quote_on_date_contributes_nothing() -> None:
    calculator = ReturnCalculator(_prices())
    ledger = HoldingsLedger(Decimal("1000"))
    ledger.open_long("CCC", 10, Decimal("20"), ZERO)

    assert calculator.daily_return(D2, ledger) == Decimal("0")
    # D3 compares against the last quote before it (D1), skipping the gap
    assert calculator.daily_return(D3, ledger) == Decimal("0.5") * Decimal("200") / Decimal("800")


def test_previous_price_looks_strictly_before_date() -> None:
    prices = _prices()

    assert prices.previous_price("CCC", D1) is None
    assert prices.previous_price("CCC", D2) == Decimal("20")
    assert prices.previous_price("CCC", D3) == Decimal("20")
    assert prices.previous_price("ZZZ", D3) is None
    assert prices.trading_dates() == [D1, D2, D3]
    assert prices.prices_on(D3) == {"CCC": Decimal("30")}


def test_next_price_looks_strictly_after_date() -> None:
    prices = _prices()

    assert prices.next_price("CCC", D1) == Decimal("30")
    assert prices.next_price("CCC", D2) == Decimal("30")
    assert prices.next_price("CCC", D3) is None
    assert prices.next_price("ZZZ", D1) is None
