"""
Huobi Spot REST Client
======================

Authenticated REST client built on requests.

Features:
- Signature v2 authentication on every call (see auth.py)
- Symbol and account metadata fetched once at construction and cached
- In-place retry of transient transport failures (timeouts, connection resets)
- Exchange error envelopes translated into HuobiAPIError
- Lenient decoding of loosely-typed payloads (see models.py)

Usage:
    from cex.huobi.api.huobi_client import HuobiClient

    client = HuobiClient(api_key="...", api_secret="...")
    price = client.latest_price("btcusdt")
    account_id = client.spot_account_id()
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, TypeVar

import requests
from pydantic import TypeAdapter, ValidationError

from cex.huobi.api.auth import build_signed_url
from cex.huobi.api.errors import (
    AccountNotFoundError,
    HuobiAPIError,
    HuobiResponseError,
    PriceUnavailableError,
    SymbolNotFoundError,
)
from cex.huobi.api.models import HuobiAccount, HuobiOrder, HuobiSymbol, Tick

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_transient(exc: requests.RequestException) -> bool:
    if isinstance(exc, requests.Timeout):
        return True
    return "connection reset" in str(exc).lower()


class HuobiClient:
    """
    Huobi spot REST client.

    Construction performs two network calls (symbol list and account list);
    both lists are kept for the lifetime of the client and never refreshed.
    """

    DEFAULT_HOST = "https://api.huobi.pro"
    DEFAULT_TIMEOUT = 3  # seconds
    MAX_ATTEMPTS = 3

    def __init__(
        self,
        *,
        api_key: str,
        api_secret: str,
        host: str = DEFAULT_HOST,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the client and load trading metadata.

        Args:
            api_key: Huobi access key
            api_secret: Huobi secret key (never logged)
            host: API base URL, scheme included
            timeout: Per-attempt HTTP timeout in seconds
            session: Optional pre-configured requests session

        Raises:
            HuobiError: If the symbol or account list cannot be loaded
            requests.RequestException: On non-transient transport failures
        """
        self.host = host.rstrip("/")
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self._session = session or requests.Session()

        self._symbols: tuple[HuobiSymbol, ...] = self._fetch_symbols()
        self._accounts: tuple[HuobiAccount, ...] = self._fetch_accounts()
        logger.info(
            "Huobi client ready: %d symbols, %d accounts",
            len(self._symbols),
            len(self._accounts),
        )

    # ==================== Metadata ====================

    def _fetch_symbols(self) -> tuple[HuobiSymbol, ...]:
        doc = self._request("GET", "/v1/common/symbols")
        return self._decode(tuple[HuobiSymbol, ...], doc.get("data") or (), "/v1/common/symbols")

    def _fetch_accounts(self) -> tuple[HuobiAccount, ...]:
        doc = self._request("GET", "/v1/account/accounts")
        return self._decode(tuple[HuobiAccount, ...], doc.get("data") or (), "/v1/account/accounts")

    def symbols(self) -> tuple[HuobiSymbol, ...]:
        """All tradable symbols, as loaded at construction."""
        return self._symbols

    def accounts(self) -> tuple[HuobiAccount, ...]:
        """All accounts of the key owner (spot, margin, ...), as loaded at construction."""
        return self._accounts

    def symbol(self, name: str) -> HuobiSymbol:
        """
        Look up a symbol by name (e.g. 'btcusdt').

        Raises:
            SymbolNotFoundError: If the exchange does not list the symbol
        """
        for s in self._symbols:
            if s.symbol == name:
                return s
        raise SymbolNotFoundError(f"symbol not found: {name}")

    def spot_account_id(self) -> int:
        """
        Return the id of the spot account.

        Raises:
            AccountNotFoundError: If the key owner has no spot account
        """
        for account in self._accounts:
            if account.type == "spot":
                return account.id
        raise AccountNotFoundError("spot account not found")

    # ==================== Market data ====================

    def latest_price(self, symbol: str) -> Decimal:
        """
        Get the price of the most recent trade for a symbol.

        Raises:
            PriceUnavailableError: If the trade tick carries no data
        """
        doc = self._request("GET", "/market/trade", {"symbol": symbol})
        tick = self._decode(Tick, doc.get("tick") or {}, "/market/trade")
        if not tick.data:
            raise PriceUnavailableError(f"no trade data for symbol {symbol}")
        return tick.data[0].price

    # ==================== Account ====================

    def spot_account(self) -> HuobiAccount:
        """Fetch the spot account together with its currency balances."""
        account_id = self.spot_account_id()
        path = f"/v1/account/accounts/{account_id}/balance"
        doc = self._request("GET", path)
        return self._decode(HuobiAccount, doc.get("data") or {}, path)

    def spot_account_balance(self, currency: str) -> Decimal:
        """
        Tradable balance of a currency in the spot account.

        Returns Decimal("0") when the account holds no such currency.
        """
        account = self.spot_account()
        for balance in account.balances:
            if balance.currency == currency and balance.type == "trade":
                return balance.balance
        return Decimal("0")

    # ==================== Orders ====================

    def place_order(self, params: Mapping[str, str]) -> int:
        """
        Submit an order and return the exchange order id.

        Args:
            params: Order body ('account-id', 'symbol', 'type', 'amount', ...)
                with every value already formatted as a string
        """
        doc = self._request("POST", "/v1/order/orders/place", params)
        return self._decode(int, doc.get("data"), "/v1/order/orders/place")

    def get_order(self, order_id: int) -> HuobiOrder:
        """Fetch an order by id, whatever its state."""
        path = f"/v1/order/orders/{order_id}"
        doc = self._request("GET", path)
        return self._decode(HuobiOrder, doc.get("data") or {}, path)

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    # ==================== Transport ====================

    def _request(self, method: str, path: str, params: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
        """
        Sign and send a request, returning the decoded JSON document.

        GET parameters travel in the signed query string; other methods send
        them as a JSON body outside the signature.

        Raises:
            HuobiAPIError: If the response status is not "ok"
            HuobiResponseError: If the body is not a JSON object
            requests.RequestException: On transport failure after retries
        """
        method = method.upper()
        url = build_signed_url(self.api_key, self.api_secret, method, self.host + path, params)

        if method == "GET":
            headers = {"Content-Type": "application/x-www-form-urlencoded"}
            body = None
        else:
            headers = {"Content-Type": "application/json"}
            body = json.dumps(dict(params or {}))

        response = self._send(method, url, path, headers=headers, body=body)

        try:
            doc = response.json(parse_float=Decimal)
        except ValueError as exc:
            raise HuobiResponseError(
                f"{method} {path}: invalid JSON response (HTTP {response.status_code})"
            ) from exc
        if not isinstance(doc, dict):
            raise HuobiResponseError(f"{method} {path}: unexpected response type {type(doc).__name__}")

        if doc.get("status") != "ok":
            raise HuobiAPIError(
                str(doc.get("err-code", "")),
                str(doc.get("err-msg", "")),
                path=path,
            )

        return doc

    def _send(
        self,
        method: str,
        url: str,
        path: str,
        *,
        headers: dict[str, str],
        body: Optional[str],
    ) -> requests.Response:
        # A POST that timed out after connecting may already have been accepted
        # by the exchange, so only connect timeouts are safe to resend.
        idempotent = method == "GET"

        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            try:
                return self._session.request(method, url, data=body, headers=headers, timeout=self.timeout)
            except requests.RequestException as exc:
                retryable = _is_transient(exc) if idempotent else isinstance(exc, requests.ConnectTimeout)
                if not retryable or attempt >= self.MAX_ATTEMPTS:
                    raise
                logger.warning(
                    "Transient error on %s %s (attempt %d/%d): %s. Retrying",
                    method,
                    path,
                    attempt,
                    self.MAX_ATTEMPTS,
                    exc,
                )

        # Should not reach here, but just in case
        raise RuntimeError(f"{method} {path}: retry loop exhausted")  # pragma: no cover

    @staticmethod
    def _decode(shape: type[T] | Any, value: Any, path: str) -> T:
        try:
            return TypeAdapter(shape).validate_python(value)
        except ValidationError as exc:
            raise HuobiResponseError(f"{path}: unexpected payload: {exc}") from exc
