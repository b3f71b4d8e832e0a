"""
Shared Models for the Backtest Engine
Pydantic schemas for trade events and run states.

Every ledger operation produces a TradeEvent; reporting code consumes
these instead of scraping log output.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Enums
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TradeAction(str, Enum):
    """Trade primitive enum."""
    OPEN_LONG = "open_long"
    CLOSE_LONG = "close_long"
    OPEN_SHORT = "open_short"
    CLOSE_SHORT = "close_short"


class TradeStatus(str, Enum):
    """Trade outcome enum."""
    EXECUTED = "executed"
    REJECTED = "rejected"
    SKIPPED = "skipped"


class Condition(str, Enum):
    """Recoverable conditions recorded instead of aborting the run."""
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_SHARES = "insufficient_shares"
    MISSING_PRICE = "missing_price"
    DEGENERATE_VALUE = "degenerate_value"


class RunState(str, Enum):
    """Backtest driver lifecycle."""
    PENDING = "pending"
    RUNNING = "running"
    LIQUIDATING = "liquidating"
    DONE = "done"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Trade Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TradeEvent(BaseModel):
    """Outcome of a single trade primitive (executed, rejected or skipped)."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    action: TradeAction
    symbol: str
    shares: int
    price: Optional[Decimal] = None
    status: TradeStatus
    amount: Decimal = Decimal("0")  # total cost for buys/covers, proceeds for sells/shorts
    value_after: Decimal
    reason: Optional[Condition] = None
    trade_date: Optional[date] = None
    message: str = ""

    @property
    def executed(self) -> bool:
        """Check if the trade changed the ledger."""
        return self.status == TradeStatus.EXECUTED

    @property
    def cash_flow(self) -> Decimal:
        """Signed change in portfolio value caused by this trade."""
        if not self.executed:
            return Decimal("0")
        if self.action in {TradeAction.OPEN_LONG, TradeAction.CLOSE_SHORT}:
            return -self.amount
        return self.amount


class RebalanceReport(BaseModel):
    """Events produced by one rebalance call, in execution order."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    trade_date: Optional[date] = None
    events: list[TradeEvent] = Field(default_factory=list)

    @property
    def executed(self) -> list[TradeEvent]:
        return [e for e in self.events if e.status == TradeStatus.EXECUTED]

    @property
    def rejected(self) -> list[TradeEvent]:
        return [e for e in self.events if e.status == TradeStatus.REJECTED]

    @property
    def skipped(self) -> list[TradeEvent]:
        return [e for e in self.events if e.status == TradeStatus.SKIPPED]

    @property
    def trade_count(self) -> int:
        """Number of trades that changed the ledger."""
        return len(self.executed)
