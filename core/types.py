from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class OrderRecord:
    """Settled fill as written to the order ledger.

    Amounts are signed: sell fills carry negative base/quote amounts so the
    ledger can be summed without looking at ``kind``.
    """

    id: int
    symbol: str
    kind: str  # buy-market | sell-market | buy-limit | sell-limit
    price: Decimal  # average fill price (quote per base)
    base_amount: Decimal
    quote_amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class StatisticsRecord:
    """Mark-to-market snapshot of a plan."""

    symbol: str
    position: Decimal
    investment: Decimal
    price: Decimal
    equity: Decimal
    created_at: datetime


@dataclass(frozen=True)
class PlanState:
    """Running totals of an investment plan.

    ``equity == price * position`` holds for every instance produced by the
    plan state machine.
    """

    position: Decimal = Decimal("0")  # base currency held
    investment: Decimal = Decimal("0")  # quote currency spent
    price: Decimal = Decimal("0")  # last observed mark
    equity: Decimal = Decimal("0")  # quote currency value of position
    updated: datetime | None = None

    @property
    def profit(self) -> Decimal:
        """Unrealized profit in quote currency (equity minus investment)."""
        return self.equity - self.investment
