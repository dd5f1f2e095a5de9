"""Typed views over Huobi REST payloads.

Huobi is not consistent about JSON typing (numbers sometimes arrive as
strings and vice versa), so every model validates in pydantic's lax mode and
additionally coerces numbers to strings. Hyphenated wire keys are mapped via
aliases; unknown keys are ignored.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TradeKind(str, Enum):
    """Order type as understood by ``/v1/order/orders/place``."""

    BUY_MARKET = "buy-market"
    SELL_MARKET = "sell-market"
    BUY_LIMIT = "buy-limit"
    SELL_LIMIT = "sell-limit"

    @property
    def is_limit(self) -> bool:
        return self in (TradeKind.BUY_LIMIT, TradeKind.SELL_LIMIT)

    @property
    def is_sell(self) -> bool:
        return self in (TradeKind.SELL_MARKET, TradeKind.SELL_LIMIT)


class HuobiModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        frozen=True,
    )


class HuobiSymbol(HuobiModel):
    """Tradable pair with its precision settings."""

    symbol: str
    base_currency: str = Field(alias="base-currency")
    quote_currency: str = Field(alias="quote-currency")
    price_precision: int = Field(alias="price-precision")
    amount_precision: int = Field(alias="amount-precision")
    symbol_partition: str = Field("", alias="symbol-partition")


class Balance(HuobiModel):
    currency: str
    type: str  # trade | frozen
    balance: Decimal


class HuobiAccount(HuobiModel):
    id: int
    type: str  # spot | margin | otc | point | ...
    subtype: str = ""
    state: str = ""
    balances: tuple[Balance, ...] = Field((), alias="list")


class HuobiOrder(HuobiModel):
    """Order as returned by ``/v1/order/orders/{id}``."""

    id: int
    account_id: int = Field(0, alias="account-id")
    source: str = ""
    type: TradeKind
    state: str = ""
    symbol: str
    amount: Decimal = Decimal("0")
    price: Decimal = Decimal("0")
    field_amount: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("field-amount", "filled-amount", "field_amount"),
    )
    field_cash_amount: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("field-cash-amount", "filled-cash-amount", "field_cash_amount"),
    )
    field_fees: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("field-fees", "filled-fees", "field_fees"),
    )
    created_at: int = Field(0, alias="created-at")
    finished_at: int = Field(0, alias="finished-at")
    canceled_at: Optional[int] = Field(None, alias="canceled-at")


class TradeTick(HuobiModel):
    price: Decimal


class Tick(HuobiModel):
    data: tuple[TradeTick, ...] = ()
