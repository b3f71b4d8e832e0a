from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from longshort.core.errors import DataLoadError
from longshort.data.csv_source import CsvMarketData, load_signals


class _Frame:
    def __init__(self, rows):
        self._rows = list(rows)
        self.columns = tuple(self._rows[0].keys()) if self._rows else tuple()

    def to_dict(self, orient="records"):
        assert orient == "records"
        return list(self._rows)


def test_market_data_builds_prices_and_sectors() -> None:
    rows = [
        {"Sector": "Tech", "Symbol": "AAA", "Date": "2024-01-03", "Close": "101.5", "EPS": "2"},
        {"Sector": "Tech", "Symbol": "AAA", "Date": "2024-01-02", "Close": "100", "EPS": "2"},
        {"Sector": "Energy", "Symbol": "BBB", "Date": "2024-01-02", "Close": "oops", "EPS": "1"},
        {"Sector": "Energy", "Symbol": "BBB", "Date": "2024-01-03", "Close": "50", "EPS": "1"},
    ]

    data = CsvMarketData("stocks.csv", read_csv=lambda _path: _Frame(rows)).load()

    assert data.sectors == {"AAA": "Tech", "BBB": "Energy"}
    assert data.prices.trading_dates() == [date(2024, 1, 2), date(2024, 1, 3)]
    assert data.prices.price_on("AAA", date(2024, 1, 3)) == Decimal("101.5")
    assert data.prices.price_on("BBB", date(2024, 1, 2)) is None


def test_market_data_requires_columns() -> None:
    rows = [{"symbol": "AAA", "date": "2024-01-02", "close": "1"}]
    source = CsvMarketData("stocks.csv", read_csv=lambda _path: _Frame(rows))

    with pytest.raises(DataLoadError, match="sector"):
        source.load()


def test_signals_are_grouped_by_date_and_side() -> None:
    rows = [
        {"date": "2024-01-02", "side": "long", "symbol": "AAA"},
        {"date": "2024-01-02", "side": "LONG", "symbol": "CCC"},
        {"date": "2024-01-02", "side": "short", "symbol": "BBB"},
        {"date": "2024-02-01", "side": "short", "symbol": "AAA"},
    ]

    source = load_signals("signals.csv", read_csv=lambda _path: _Frame(rows))

    jan = source.signals_for(date(2024, 1, 2))
    assert jan.longs == ("AAA", "CCC")
    assert jan.shorts == ("BBB",)
    assert source.signals_for(date(2024, 2, 1)).longs == ()
    assert source.signals_for(date(2024, 3, 1)).shorts == ()
    assert source.dates() == [date(2024, 1, 2), date(2024, 2, 1)]


def test_signals_reject_unknown_side() -> None:
    rows = [{"date": "2024-01-02", "side": "flat", "symbol": "AAA"}]

    with pytest.raises(DataLoadError, match="flat"):
        load_signals("signals.csv", read_csv=lambda _path: _Frame(rows))


def test_market_data_reads_stock_export_header(tmp_path) -> None:
    path = tmp_path / "stocks.csv"
    path.write_text(
        "Sector,Symbol,Date,ClosePrice,Eps,PeRatio\n"
        "Tech,AAA,2024-01-02,100.25,5.0,20.05\n"
        "Tech,AAA,2024-01-03,101,5.0,20.2\n",
        encoding="utf-8",
    )

    data = CsvMarketData(path).load()

    assert data.sectors == {"AAA": "Tech"}
    assert data.prices.price_on("AAA", date(2024, 1, 2)) == Decimal("100.25")


def test_close_column_wins_over_close_price_alias() -> None:
    rows = [{"sector": "Tech", "symbol": "AAA", "date": "2024-01-02", "ClosePrice": "0", "Close": "7"}]

    data = CsvMarketData("stocks.csv", read_csv=lambda _path: _Frame(rows)).load()

    assert data.prices.price_on("AAA", date(2024, 1, 2)) == Decimal("7")


def test_missing_file_raises_data_load_error(tmp_path) -> None:
    with pytest.raises(DataLoadError, match="nope.csv"):
        CsvMarketData(tmp_path / "nope.csv").load()

    with pytest.raises(DataLoadError):
        load_signals(tmp_path / "nope.csv")
