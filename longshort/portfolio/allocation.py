"""Monthly sector-concentration snapshots by position count."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Mapping, Optional

from longshort.core.errors import BacktestError
from longshort.core.types import Month
from longshort.portfolio.ledger import HoldingsLedger

logger = logging.getLogger(__name__)

UNKNOWN_SECTOR = "Unknown"


class SectorAllocationTracker:
    """Record what share of held positions each sector makes up, once per month.

    Long and short positions each count as one unit; dollar exposure is
    ignored.
    """

    def __init__(self, sector_map: Mapping[str, str]) -> None:
        self._sectors = dict(sector_map)
        self._history: dict[Month, dict[str, Decimal]] = {}

    @property
    def history(self) -> dict[Month, dict[str, Decimal]]:
        return {month: dict(snapshot) for month, snapshot in sorted(self._history.items())}

    def sector_of(self, symbol: str) -> str:
        return self._sectors.get(symbol) or UNKNOWN_SECTOR

    def snapshot_for(self, month: Month) -> Optional[dict[str, Decimal]]:
        snapshot = self._history.get(month)
        return None if snapshot is None else dict(snapshot)

    def record(self, month: Month, ledger: HoldingsLedger) -> dict[str, Decimal]:
        if month in self._history:
            raise BacktestError(f"Sector allocation already recorded for {month}")

        counts: dict[str, int] = {}
        for symbol in ledger.held_symbols():
            sector = self.sector_of(symbol)
            counts[sector] = counts.get(sector, 0) + 1

        total = sum(counts.values())
        snapshot = {
            sector: Decimal(count) * Decimal("100") / Decimal(total)
            for sector, count in counts.items()
        }
        self._history[month] = snapshot
        logger.debug(f"Sector allocation {month}: {len(snapshot)} sectors over {total} positions")
        return dict(snapshot)
