from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from core.types import OrderRecord, StatisticsRecord


class OrderStore(Protocol):
    def append_order(self, *, order: OrderRecord) -> None:
        """Append a settled fill to the order ledger."""

    def order_aggregate(self, *, symbol: str | None = None) -> tuple[Decimal, Decimal]:
        """Return (sum of base amounts, sum of quote amounts) over the ledger.

        Both sums are zero when no order has been recorded.
        """


class StatisticsStore(Protocol):
    def append_statistics(self, *, statistics: StatisticsRecord) -> None:
        """Append a mark-to-market snapshot."""


class PlanStore(OrderStore, StatisticsStore, Protocol):
    """Everything an investment plan persists."""
