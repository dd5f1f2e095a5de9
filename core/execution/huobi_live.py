from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal
from typing import Callable, Optional

from cex.huobi.api.models import HuobiOrder, TradeKind
from core.execution.interfaces import TradingClient


logger = logging.getLogger(__name__)

SETTLE_DELAY_SECONDS = 5.0


def floor_to_precision(value: Decimal | float | str, precision: int) -> str:
    """Truncate ``value`` to ``precision`` decimal places and format it.

    Always rounds toward negative infinity so an order never commits more
    than requested. The result is the shortest plain decimal string
    (no exponent, no trailing zeros).

    >>> floor_to_precision(Decimal("0.123456"), 4)
    '0.1234'
    >>> floor_to_precision(Decimal("12.9"), 0)
    '12'
    """
    if precision < 0:
        raise ValueError("precision must be >= 0")

    quantum = Decimal(1).scaleb(-precision)
    floored = Decimal(str(value)).quantize(quantum, rounding=ROUND_FLOOR)
    if floored == 0:
        return "0"
    return format(floored.normalize(), "f")


def normalize_fill(order: HuobiOrder) -> tuple[Decimal, Decimal]:
    """Return the fill as signed (base, quote) deltas.

    Buys add to position and investment; sells subtract from both.
    """
    base, quote = order.field_amount, order.field_cash_amount
    if order.type in (TradeKind.SELL_MARKET, TradeKind.SELL_LIMIT):
        return -base, -quote
    if order.type in (TradeKind.BUY_MARKET, TradeKind.BUY_LIMIT):
        return base, quote
    raise ValueError(f"unknown trade kind: {order.type!r}")


@dataclass(frozen=True)
class HuobiTradeExecutor:
    """Places spot orders on Huobi and returns the settled fill.

    Orders are never re-submitted: only the underlying HTTP call retries on
    transport failures.

    The exchange fills orders asynchronously and no fill notification is
    consumed, so after submission the executor waits ``settle_delay`` seconds
    and fetches the order once. The returned order may still be partially
    filled; that case is logged, not resolved.
    """

    client: TradingClient
    settle_delay: float = SETTLE_DELAY_SECONDS
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def trade(
        self,
        *,
        symbol: str,
        kind: TradeKind,
        amount: Decimal,
        price: Optional[Decimal] = None,
    ) -> HuobiOrder:
        """Submit one order and return it after the settlement wait.

        Args:
            symbol: Trading pair, e.g. 'btcusdt'
            kind: Order type
            amount: Limit orders and market sells: base quantity.
                Market buys: quote amount to spend.
            price: Limit price (required for limit kinds, ignored otherwise)

        Raises:
            ValueError: If a limit order has no positive price
            HuobiError: On resolution or exchange errors
        """
        kind = TradeKind(kind)
        s = self.client.symbol(symbol)
        account_id = self.client.spot_account_id()

        params = {
            "account-id": str(account_id),
            "source": "api",
            "symbol": s.symbol,
            "amount": floor_to_precision(amount, s.amount_precision),
            "type": kind.value,
        }
        if kind.is_limit:
            if price is None or price <= 0:
                raise ValueError("limit orders require a positive price")
            params["price"] = floor_to_precision(price, s.price_precision)

        order_id = self.client.place_order(params)
        logger.info(
            "Submitted %s order %s: symbol=%s amount=%s price=%s",
            kind.value,
            order_id,
            s.symbol,
            params["amount"],
            params.get("price", "market"),
        )

        # Coarse stand-in for fill confirmation: submitted => filled.
        self.sleep(self.settle_delay)

        order = self.client.get_order(order_id)
        if order.state != "filled":
            logger.warning(
                "Order %s not filled after %.1fs (state=%s); recording current fill",
                order_id,
                self.settle_delay,
                order.state or "unknown",
            )
        return order
