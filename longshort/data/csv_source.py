"""CSV-backed loaders for daily stock prices, sectors and signal lists."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable

from longshort.core.errors import DataLoadError
from longshort.data.prices import PriceHistory
from longshort.signals import StaticSignalSource

logger = logging.getLogger(__name__)


def _pandas_reader(path: Path) -> object:
    # Lazily import pandas to keep the engine importable without it.
    import pandas as pd

    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataLoadError(f"Cannot read {path}: {e}") from e


def _parse_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if hasattr(value, "to_pydatetime"):
        return value.to_pydatetime().date()
    return date.fromisoformat(str(value).strip())


# Alternative header names, e.g. the ``ClosePrice`` column of stock exports.
COLUMN_ALIASES: dict[str, str] = {"closeprice": "close"}


def _records(frame: object, required: tuple[str, ...], path: Path) -> list[dict]:
    if not hasattr(frame, "columns"):
        raise TypeError("read_csv must return a dataframe-like object with columns")
    columns = {str(c).strip().lower(): c for c in getattr(frame, "columns")}
    for alias, canonical in COLUMN_ALIASES.items():
        if alias in columns and canonical not in columns:
            columns[canonical] = columns[alias]
    missing = [column for column in required if column not in columns]
    if missing:
        raise DataLoadError(f"Missing required columns in {path}: {missing}")
    return [
        {key: row[original] for key, original in columns.items()}
        for row in frame.to_dict(orient="records")
    ]


@dataclass(frozen=True)
class MarketData:
    prices: PriceHistory
    sectors: dict[str, str]


class CsvMarketData:
    """Load ``sector,symbol,date,close`` rows (``closeprice`` accepted, extra columns ignored)."""

    REQUIRED_COLUMNS: tuple[str, ...] = ("sector", "symbol", "date", "close")

    def __init__(
        self,
        path: str | Path,
        *,
        read_csv: Callable[[Path], object] | None = None,
    ) -> None:
        self.path = Path(path)
        self._read_csv = read_csv or _pandas_reader

    def load(self) -> MarketData:
        rows = _records(self._read_csv(self.path), self.REQUIRED_COLUMNS, self.path)
        series: dict[str, dict[date, Decimal]] = {}
        sectors: dict[str, str] = {}
        skipped = 0
        for row in rows:
            symbol = str(row["symbol"]).strip()
            try:
                day = _parse_date(row["date"])
                close = Decimal(str(row["close"]).strip())
            except (ValueError, InvalidOperation):
                close = None
            if close is None or not close.is_finite() or close <= 0:
                logger.warning(f"Skipping row for {symbol}: date={row['date']!r} close={row['close']!r}")
                skipped += 1
                continue
            series.setdefault(symbol, {})[day] = close
            sectors[symbol] = str(row["sector"]).strip()

        logger.info(f"Loaded {len(series)} symbols from {self.path} ({skipped} rows skipped)")
        return MarketData(prices=PriceHistory(series), sectors=sectors)


def load_signals(
    path: str | Path,
    *,
    read_csv: Callable[[Path], object] | None = None,
) -> StaticSignalSource:
    """Load ``date,side,symbol`` rows, side being ``long`` or ``short``."""
    path = Path(path)
    rows = _records((read_csv or _pandas_reader)(path), ("date", "side", "symbol"), path)
    longs: dict[date, list[str]] = {}
    shorts: dict[date, list[str]] = {}
    for row in rows:
        side = str(row["side"]).strip().lower()
        if side == "long":
            book = longs
        elif side == "short":
            book = shorts
        else:
            raise DataLoadError(f"Unknown signal side {row['side']!r} in {path}")
        try:
            day = _parse_date(row["date"])
        except ValueError as e:
            raise DataLoadError(f"Invalid signal date {row['date']!r} in {path}") from e
        book.setdefault(day, []).append(str(row["symbol"]).strip())

    logger.info(f"Loaded signals for {len(set(longs) | set(shorts))} dates from {path}")
    return StaticSignalSource(longs=longs, shorts=shorts)
