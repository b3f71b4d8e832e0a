"""Dict-backed signal source for precomputed strategy output."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping

from longshort.core.ports import SignalSource
from longshort.core.types import Signals


class StaticSignalSource(SignalSource):
    """Precomputed per-date long and short lists, as produced by a strategy run."""

    def __init__(
        self,
        longs: Mapping[date, Iterable[str]] | None = None,
        shorts: Mapping[date, Iterable[str]] | None = None,
    ) -> None:
        self._longs = {day: tuple(symbols) for day, symbols in (longs or {}).items()}
        self._shorts = {day: tuple(symbols) for day, symbols in (shorts or {}).items()}

    def signals_for(self, day: date) -> Signals:
        return Signals(longs=self._longs.get(day, ()), shorts=self._shorts.get(day, ()))

    def dates(self) -> list[date]:
        return sorted(set(self._longs) | set(self._shorts))
