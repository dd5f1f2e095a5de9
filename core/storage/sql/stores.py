from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import DateTime, bindparam, create_engine, text
from sqlalchemy.engine import Engine

from core.persistence.interfaces import PlanStore
from core.storage.sql.config import SQLConfig
from core.types import OrderRecord, StatisticsRecord


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS orders (
        id            BIGINT PRIMARY KEY,
        symbol        TEXT NOT NULL,
        type          TEXT NOT NULL,
        price         NUMERIC NOT NULL,
        base_amount   NUMERIC NOT NULL,
        quote_amount  NUMERIC NOT NULL,
        created_at    TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS statistics (
        id            INTEGER PRIMARY KEY,
        symbol        TEXT NOT NULL,
        position      NUMERIC NOT NULL,
        investment    NUMERIC NOT NULL,
        price         NUMERIC NOT NULL,
        equity        NUMERIC NOT NULL,
        created_at    TIMESTAMP NOT NULL
    )
    """,
)


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _to_utc(value: Any) -> datetime:
    # SQLite hands back naive datetimes; everything is written as UTC.
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class SQLPlanStore(PlanStore):
    """SQLAlchemy-backed order ledger and statistics log.

    Decimal values are bound as strings so drivers without native decimal
    support (sqlite3) accept them; the NUMERIC column affinity stores numbers.
    Writes run in their own transaction (``engine.begin()``).
    """

    def __init__(self, *, config: SQLConfig, engine: Engine | None = None) -> None:
        self._config = config
        self._engine = engine

    def _get_engine(self) -> Engine:
        if self._engine is None:
            # Do not log the URL (it may contain secrets).
            self._engine = create_engine(self._config.database_url, echo=False, pool_pre_ping=True)
        return self._engine

    def ensure_schema(self) -> None:
        """Create the orders and statistics tables if they do not exist."""
        engine = self._get_engine()
        with engine.begin() as conn:
            for ddl in _SCHEMA:
                conn.execute(text(ddl))

    # ---- OrderStore

    def append_order(self, *, order: OrderRecord) -> None:
        engine = self._get_engine()

        stmt = text(
            """
            INSERT INTO orders (id, symbol, type, price, base_amount, quote_amount, created_at)
            VALUES (:id, :symbol, :type, :price, :base_amount, :quote_amount, :created_at)
            """
        ).bindparams(bindparam("created_at", type_=DateTime()))

        with engine.begin() as conn:
            conn.execute(
                stmt,
                {
                    "id": order.id,
                    "symbol": order.symbol,
                    "type": order.kind,
                    "price": str(order.price),
                    "base_amount": str(order.base_amount),
                    "quote_amount": str(order.quote_amount),
                    "created_at": order.created_at.astimezone(timezone.utc).replace(tzinfo=None),
                },
            )

    def order_aggregate(self, *, symbol: str | None = None) -> tuple[Decimal, Decimal]:
        engine = self._get_engine()

        where_clause = "WHERE symbol = :symbol" if symbol else ""
        params: dict[str, Any] = {"symbol": symbol} if symbol else {}

        stmt = text(
            f"""
            SELECT
                COALESCE(SUM(base_amount), 0) AS position,
                COALESCE(SUM(quote_amount), 0) AS investment
            FROM orders
            {where_clause}
            """
        )

        with engine.begin() as conn:
            row = conn.execute(stmt, params).fetchone()

        if row is None:
            return Decimal("0"), Decimal("0")
        return _to_decimal(row[0]), _to_decimal(row[1])

    def get_orders(self, *, symbol: str | None = None, limit: int = 1000) -> Sequence[OrderRecord]:
        """List ledger entries, newest first."""
        engine = self._get_engine()

        where_clause = "WHERE symbol = :symbol" if symbol else ""
        params: dict[str, Any] = {"limit": limit}
        if symbol:
            params["symbol"] = symbol

        stmt = text(
            f"""
            SELECT id, symbol, type, price, base_amount, quote_amount, created_at
            FROM orders
            {where_clause}
            ORDER BY created_at DESC, id DESC
            LIMIT :limit
            """
        )

        with engine.begin() as conn:
            rows = conn.execute(stmt, params).fetchall()

        return [
            OrderRecord(
                id=int(row[0]),
                symbol=row[1],
                kind=row[2],
                price=_to_decimal(row[3]),
                base_amount=_to_decimal(row[4]),
                quote_amount=_to_decimal(row[5]),
                created_at=_to_utc(row[6]),
            )
            for row in rows
        ]

    # ---- StatisticsStore

    def append_statistics(self, *, statistics: StatisticsRecord) -> None:
        engine = self._get_engine()

        stmt = text(
            """
            INSERT INTO statistics (symbol, position, investment, price, equity, created_at)
            VALUES (:symbol, :position, :investment, :price, :equity, :created_at)
            """
        ).bindparams(bindparam("created_at", type_=DateTime()))

        with engine.begin() as conn:
            conn.execute(
                stmt,
                {
                    "symbol": statistics.symbol,
                    "position": str(statistics.position),
                    "investment": str(statistics.investment),
                    "price": str(statistics.price),
                    "equity": str(statistics.equity),
                    "created_at": statistics.created_at.astimezone(timezone.utc).replace(tzinfo=None),
                },
            )

    def get_statistics(self, *, symbol: str, limit: int = 1000) -> Sequence[StatisticsRecord]:
        """List snapshots for a symbol, newest first."""
        engine = self._get_engine()

        stmt = text(
            """
            SELECT symbol, position, investment, price, equity, created_at
            FROM statistics
            WHERE symbol = :symbol
            ORDER BY created_at DESC, id DESC
            LIMIT :limit
            """
        )

        with engine.begin() as conn:
            rows = conn.execute(stmt, {"symbol": symbol, "limit": limit}).fetchall()

        return [
            StatisticsRecord(
                symbol=row[0],
                position=_to_decimal(row[1]),
                investment=_to_decimal(row[2]),
                price=_to_decimal(row[3]),
                equity=_to_decimal(row[4]),
                created_at=_to_utc(row[5]),
            )
            for row in rows
        ]
