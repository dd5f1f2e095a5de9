"""
Huobi API Authentication Helper
===============================

HMAC-SHA256 signature generation (signature version 2) for Huobi private
REST endpoints.

Security:
- Never logs API keys/secrets

Reference:
- https://huobiapi.github.io/docs/spot/v1/en/#authentication
"""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Mapping, Optional
from urllib.parse import quote_plus, urlsplit

SIGNATURE_METHOD = "HmacSHA256"
SIGNATURE_VERSION = "2"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_timestamp(now: Optional[datetime] = None) -> str:
    """
    Format a UTC timestamp the way Huobi expects it.

    Naive datetimes are assumed to already be UTC.

    Example:
        >>> format_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678, tzinfo=timezone.utc))
        '2024-01-02T03:04:05'
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def canonical_query(params: Mapping[str, str]) -> str:
    """
    Build the canonical query string: keys sorted, form-escaped, joined by '&'.

    Example:
        >>> canonical_query({"b": "2", "a": "x y"})
        'a=x+y&b=2'
    """
    return "&".join(
        f"{quote_plus(key, safe='')}={quote_plus(str(params[key]), safe='')}"
        for key in sorted(params)
    )


def generate_signature(api_secret: str, method: str, host: str, path: str, query: str) -> str:
    """
    Generate the Base64 HMAC-SHA256 signature for a Huobi request.

    Args:
        api_secret: API secret key (must not be logged)
        method: HTTP method, upper case (e.g., "GET")
        host: Request host name without scheme or port (e.g., "api.huobi.pro")
        path: Escaped request path (e.g., "/v1/account/accounts")
        query: Canonical query string (see canonical_query)

    Returns:
        Base64-encoded signature (not yet URL-escaped)
    """
    # Signature payload format for Huobi v2:
    # METHOD\nHOST\nPATH\nQUERY
    payload = "\n".join([method.upper(), host, path, query])

    digest = hmac.new(
        api_secret.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).digest()

    return base64.b64encode(digest).decode("ascii")


def build_auth_params(api_key: str, now: Optional[datetime] = None) -> dict[str, str]:
    """Return the authentication parameters every signed request carries."""
    return {
        "AccessKeyId": api_key,
        "SignatureMethod": SIGNATURE_METHOD,
        "SignatureVersion": SIGNATURE_VERSION,
        "Timestamp": format_timestamp(now),
    }


def build_signed_url(
    api_key: str,
    api_secret: str,
    method: str,
    url: str,
    params: Optional[Mapping[str, str]] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Build a fully signed request URL.

    For GET requests the request parameters are merged into the signed set and
    travel in the query string. For any other method they are expected in the
    JSON body and are left out of the signature.

    Example:
        >>> signed = build_signed_url("key", "secret", "GET", "https://api.huobi.pro/v1/account/accounts")
        >>> "&Signature=" in signed
        True
    """
    compute = build_auth_params(api_key, now)
    if method.upper() == "GET" and params:
        compute.update({k: str(v) for k, v in params.items()})

    parts = urlsplit(url)
    query = canonical_query(compute)
    signature = generate_signature(api_secret, method, parts.hostname or "", parts.path or "/", query)

    return f"{url}?{query}&Signature={quote_plus(signature, safe='')}"
