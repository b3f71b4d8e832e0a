"""Core value types shared by the ledger, trackers and driver."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, order=True)
class Month:
    year: int
    month: int

    @classmethod
    def of(cls, day: date) -> Month:
        return cls(day.year, day.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class Signals:
    """Target long and short symbols for one date."""

    longs: tuple[str, ...] = ()
    shorts: tuple[str, ...] = ()
