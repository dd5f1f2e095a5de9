from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional, Protocol

from cex.huobi.api.models import HuobiOrder, HuobiSymbol, TradeKind


class TradingClient(Protocol):
    """Exchange client surface used by the executor and the plan."""

    def symbol(self, name: str) -> HuobiSymbol:
        """Resolve a symbol (precision settings included) by name."""

    def spot_account_id(self) -> int:
        """Return the spot account id."""

    def latest_price(self, symbol: str) -> Decimal:
        """Return the most recent trade price."""

    def place_order(self, params: Mapping[str, str]) -> int:
        """Submit an order body and return the exchange order id."""

    def get_order(self, order_id: int) -> HuobiOrder:
        """Fetch an order by id."""


class TradeExecutor(Protocol):
    """Places one order and returns its settled fill."""

    def trade(
        self,
        *,
        symbol: str,
        kind: TradeKind,
        amount: Decimal,
        price: Optional[Decimal] = None,
    ) -> HuobiOrder:
        """Submit an order and return it once it is considered settled.

        Implementations block (network I/O plus a settlement wait).
        """
