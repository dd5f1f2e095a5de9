"""Exceptions raised by the Huobi REST client."""

from __future__ import annotations


class HuobiError(Exception):
    """Base exception for Huobi client errors."""


class HuobiAPIError(HuobiError):
    """The exchange answered with a non-ok status.

    Common codes: ``order-accountbalance-error``, ``api-signature-not-valid``,
    ``order-orderamount-precision-error``, ``base-symbol-error``.
    """

    def __init__(self, code: str, message: str, *, path: str | None = None) -> None:
        self.code = code
        self.message = message
        self.path = path
        where = f" ({path})" if path else ""
        super().__init__(f"Huobi API error{where}: code={code}, {message}")


class HuobiResponseError(HuobiError):
    """The response body could not be decoded into the expected shape."""


class SymbolNotFoundError(HuobiError):
    """Requested symbol is not in the exchange symbol list."""


class AccountNotFoundError(HuobiError):
    """No account of the requested type exists."""


class PriceUnavailableError(HuobiError):
    """The latest trade tick carried no price data."""
