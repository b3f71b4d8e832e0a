"""Pure port definitions for backtest collaborators."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from .types import Signals


class SignalSource(Protocol):
    def signals_for(self, day: date) -> Signals:
        """Return target longs/shorts registered for exactly ``day``."""

