"""Portfolio state: holdings ledger and sector allocation tracking."""

from longshort.portfolio.allocation import SectorAllocationTracker
from longshort.portfolio.ledger import HoldingsLedger

__all__ = ["HoldingsLedger", "SectorAllocationTracker"]
