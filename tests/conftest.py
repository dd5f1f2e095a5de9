"""Shared test fixtures for pytest.

Provides canned Huobi payloads, a routed fake HTTP session and a factory for
HuobiClient instances that never touch the network.
"""

import json
from typing import Any, Callable
from unittest.mock import Mock
from urllib.parse import parse_qs, urlsplit

import pytest

from cex.huobi.api.huobi_client import HuobiClient
from cex.huobi.api.models import HuobiSymbol


SYMBOLS_PAYLOAD = {
    "status": "ok",
    "data": [
        {
            "base-currency": "btc",
            "quote-currency": "usdt",
            "price-precision": 2,
            "amount-precision": 6,
            "symbol-partition": "main",
            "symbol": "btcusdt",
        },
        {
            # Huobi occasionally sends numbers as strings
            "base-currency": "eth",
            "quote-currency": "btc",
            "price-precision": "6",
            "amount-precision": "4",
            "symbol-partition": "main",
            "symbol": "ethbtc",
        },
    ],
}

ACCOUNTS_PAYLOAD = {
    "status": "ok",
    "data": [
        {"id": 100009, "type": "margin", "subtype": "btcusdt", "state": "working"},
        {"id": 100001, "type": "spot", "subtype": "", "state": "working"},
    ],
}


def make_response(payload: Any, status_code: int = 200) -> Mock:
    """Fake requests.Response whose json() honors json.loads keyword arguments."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.json.side_effect = lambda **kwargs: json.loads(text, **kwargs)
    return response


class FakeSession:
    """Routes session.request calls to canned payloads keyed by (method, path).

    A route may be a payload, a list of payloads/exceptions consumed in order,
    or an exception instance. Every call is recorded in ``calls``.
    """

    def __init__(self, routes: dict[tuple[str, str], Any] | None = None) -> None:
        self.routes: dict[tuple[str, str], Any] = {
            ("GET", "/v1/common/symbols"): SYMBOLS_PAYLOAD,
            ("GET", "/v1/account/accounts"): ACCOUNTS_PAYLOAD,
        }
        self.routes.update(routes or {})
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> Mock:
        parts = urlsplit(url)
        self.calls.append(
            {
                "method": method,
                "url": url,
                "path": parts.path,
                "query": parse_qs(parts.query),
                **kwargs,
            }
        )

        route = self.routes[(method, parts.path)]
        if isinstance(route, list):
            route = route.pop(0)
        if isinstance(route, BaseException):
            raise route
        return make_response(route)

    def calls_to(self, path: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["path"] == path]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def make_client(fake_session: FakeSession) -> Callable[..., HuobiClient]:
    """Factory building a HuobiClient on the fake session (extra routes allowed)."""

    def _make(routes: dict[tuple[str, str], Any] | None = None) -> HuobiClient:
        fake_session.routes.update(routes or {})
        return HuobiClient(
            api_key="test_key",
            api_secret="test_secret",
            host="https://api.huobi.pro",
            session=fake_session,  # type: ignore[arg-type]
        )

    return _make


@pytest.fixture
def btcusdt() -> HuobiSymbol:
    return HuobiSymbol.model_validate(SYMBOLS_PAYLOAD["data"][0])


def _order_payload(
    *,
    order_id: int = 59378,
    kind: str = "buy-limit",
    field_amount: str = "0.01",
    field_cash_amount: str = "400.0",
    state: str = "filled",
) -> dict[str, Any]:
    """Order as returned by /v1/order/orders/{id}."""
    return {
        "id": order_id,
        "symbol": "btcusdt",
        "account-id": 100001,
        "amount": "0.010000",
        "price": "40000.00",
        "created-at": 1704067200000,
        "type": kind,
        "field-amount": field_amount,
        "field-cash-amount": field_cash_amount,
        "field-fees": "0.00002",
        "finished-at": 1704067201000,
        "source": "api",
        "state": state,
        "canceled-at": 0,
    }


@pytest.fixture
def order_payload() -> Callable[..., dict[str, Any]]:
    return _order_payload
