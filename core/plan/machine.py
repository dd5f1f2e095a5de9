"""Investment plan state machine.

An :class:`InvestmentPlan` buys a fixed quote amount of one symbol every
period and tracks the running position, investment and equity.

The running totals live only in memory. At startup they are rebuilt from the
order ledger (sum of all recorded fills); afterwards every ``invest`` and
``monitor`` call mutates them in place and persists the resulting fact
(an order record or a statistics snapshot).

``invest`` and ``monitor`` are driven by two independent timers, so each body
runs under one lock: at most one of them touches the state at any time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from cex.huobi.api.models import HuobiOrder, TradeKind
from core.execution.huobi_live import HuobiTradeExecutor, normalize_fill
from core.execution.interfaces import TradeExecutor, TradingClient
from core.persistence.interfaces import PlanStore
from core.plan.period import Period
from core.types import OrderRecord, PlanState, StatisticsRecord


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _fill_price(base: Decimal, quote: Decimal) -> Decimal:
    if base == 0:
        return Decimal("0")
    return quote / base


class InvestmentPlan:
    """Dollar-cost averaging plan for a single symbol.

    Construction loads the state (order aggregate plus one price refresh) and
    fails if either step fails; an instance is always in the ready state.
    """

    def __init__(
        self,
        *,
        symbol: str,
        amount: Decimal,
        period: Period,
        client: TradingClient,
        executor: TradeExecutor,
        store: PlanStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Create the plan and load its state.

        Args:
            symbol: Trading pair, e.g. 'btcusdt'
            amount: Quote currency spent per period
            period: Investment cadence
            client: Exchange client (latest price)
            executor: Places the periodic order
            store: Order ledger and statistics log
            clock: Returns the current UTC time

        Raises:
            ValueError: If amount is not positive
            Exception: Whatever the store or the price lookup raises
        """
        if amount <= 0:
            raise ValueError("amount must be positive")

        self.symbol = symbol
        self.amount = Decimal(amount)
        self._period = period
        self._client = client
        self._executor = executor
        self._store = store
        self._clock = clock

        self._lock = threading.Lock()
        self._state = PlanState()

        with self._lock:
            self._load()

    # ---- Public API

    @property
    def state(self) -> PlanState:
        """Snapshot of the running totals."""
        return self._state

    def period(self) -> Period:
        """Investment cadence, for the scheduler."""
        return self._period

    def invest(self) -> OrderRecord:
        """Place one periodic buy and fold the fill into the state.

        The state changes only after the order record has been persisted.
        A persistence failure after a successful trade leaves the exchange and
        the ledger out of sync; it is raised, never retried here.

        Returns:
            The persisted order record
        """
        with self._lock:
            price = self._client.latest_price(self.symbol)
            if price <= 0:
                raise ValueError(f"invalid price {price} for {self.symbol}")

            order = self._executor.trade(
                symbol=self.symbol,
                kind=TradeKind.BUY_LIMIT,
                amount=self.amount / price,
                price=price,
            )

            record = self._order_record(order)
            self._store.append_order(order=record)

            # Equity follows the new position at the old mark until the flush
            # below refreshes the price.
            position = self._state.position + record.base_amount
            self._state = replace(
                self._state,
                position=position,
                investment=self._state.investment + record.quote_amount,
                equity=self._state.price * position,
                updated=self._clock(),
            )
            self._flush()

            logger.info(
                "Invested in %s: order=%s base=%s quote=%s position=%s investment=%s",
                self.symbol,
                record.id,
                record.base_amount,
                record.quote_amount,
                self._state.position,
                self._state.investment,
            )
            return record

    def monitor(self) -> StatisticsRecord:
        """Refresh the mark price and persist a statistics snapshot."""
        with self._lock:
            self._flush()

            stats = StatisticsRecord(
                symbol=self.symbol,
                position=self._state.position,
                investment=self._state.investment,
                price=self._state.price,
                equity=self._state.equity,
                created_at=self._state.updated or self._clock(),
            )
            self._store.append_statistics(statistics=stats)

            logger.info(
                "Monitor %s: price=%s position=%s equity=%s investment=%s",
                self.symbol,
                stats.price,
                stats.position,
                stats.equity,
                stats.investment,
            )
            return stats

    # ---- State transitions (callers hold the lock)

    def _load(self) -> None:
        position, investment = self._store.order_aggregate()
        self._state = PlanState(
            position=Decimal(position),
            investment=Decimal(investment),
            updated=self._clock(),
        )
        logger.info(
            "Loaded plan %s: position=%s investment=%s",
            self.symbol,
            self._state.position,
            self._state.investment,
        )
        self._flush()

    def _flush(self) -> None:
        price = self._client.latest_price(self.symbol)
        self._state = replace(
            self._state,
            price=price,
            equity=price * self._state.position,
            updated=self._clock(),
        )

    def _order_record(self, order: HuobiOrder) -> OrderRecord:
        # Invest only buys; sell fills are still normalized should a sell
        # kind ever come back.
        base, quote = normalize_fill(order)
        return OrderRecord(
            id=order.id,
            symbol=order.symbol,
            kind=order.type.value,
            price=_fill_price(base, quote),
            base_amount=base,
            quote_amount=quote,
            created_at=datetime.fromtimestamp(order.created_at / 1000, tz=timezone.utc)
            if order.created_at
            else self._clock(),
        )


def create_plan(
    *,
    symbol: str,
    amount: Decimal,
    period: Period,
    client: TradingClient,
    store: PlanStore,
    executor: Optional[TradeExecutor] = None,
) -> InvestmentPlan:
    """Convenience factory wiring a :class:`HuobiTradeExecutor` by default."""
    if executor is None:
        executor = HuobiTradeExecutor(client=client)
    return InvestmentPlan(
        symbol=symbol,
        amount=amount,
        period=period,
        client=client,
        executor=executor,
        store=store,
    )
