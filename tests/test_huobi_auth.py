"""
Unit tests for the Huobi authentication helper.

Tests signature generation deterministically with fixed inputs.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, unquote_plus, urlsplit

from cex.huobi.api.auth import (
    build_auth_params,
    build_signed_url,
    canonical_query,
    format_timestamp,
    generate_signature,
)


FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 987654, tzinfo=timezone.utc)


class TestFormatTimestamp:
    def test_utc_without_fraction_or_offset(self) -> None:
        assert format_timestamp(FIXED_NOW) == "2024-01-02T03:04:05"

    def test_converts_aware_datetimes_to_utc(self) -> None:
        cst = timezone(timedelta(hours=8))
        assert format_timestamp(datetime(2024, 1, 2, 11, 4, 5, tzinfo=cst)) == "2024-01-02T03:04:05"

    def test_defaults_to_now(self) -> None:
        value = format_timestamp()
        assert len(value) == 19
        assert value[10] == "T"


class TestCanonicalQuery:
    def test_keys_are_sorted(self) -> None:
        assert canonical_query({"b": "2", "a": "1", "C": "3"}) == "C=3&a=1&b=2"

    def test_values_are_form_escaped(self) -> None:
        query = canonical_query({"Timestamp": "2024-01-02T03:04:05", "note": "a b/c"})
        assert query == "Timestamp=2024-01-02T03%3A04%3A05&note=a+b%2Fc"

    def test_empty(self) -> None:
        assert canonical_query({}) == ""


class TestGenerateSignature:
    """Test HMAC-SHA256 signature generation with fixed inputs."""

    ARGS = ("secret", "GET", "api.huobi.pro", "/v1/account/accounts", "AccessKeyId=key&SignatureMethod=HmacSHA256")

    def test_signature_deterministic_with_fixed_inputs(self) -> None:
        assert generate_signature(*self.ARGS) == generate_signature(*self.ARGS)

    def test_signature_matches_reference_computation(self) -> None:
        secret, method, host, path, query = self.ARGS
        payload = f"{method}\n{host}\n{path}\n{query}".encode("utf-8")
        expected = base64.b64encode(hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()).decode()

        assert generate_signature(*self.ARGS) == expected

    def test_signature_is_base64_of_sha256(self) -> None:
        raw = base64.b64decode(generate_signature(*self.ARGS))
        assert len(raw) == 32

    def test_changing_any_input_changes_signature(self) -> None:
        baseline = generate_signature(*self.ARGS)
        variants = [
            ("other", *self.ARGS[1:]),
            (self.ARGS[0], "POST", *self.ARGS[2:]),
            (*self.ARGS[:2], "api-aws.huobi.pro", *self.ARGS[3:]),
            (*self.ARGS[:3], "/v1/common/symbols", self.ARGS[4]),
            (*self.ARGS[:4], "AccessKeyId=other&SignatureMethod=HmacSHA256"),
        ]
        for args in variants:
            assert generate_signature(*args) != baseline


class TestBuildSignedUrl:
    def test_auth_params(self) -> None:
        params = build_auth_params("my_key", FIXED_NOW)
        assert params == {
            "AccessKeyId": "my_key",
            "SignatureMethod": "HmacSHA256",
            "SignatureVersion": "2",
            "Timestamp": "2024-01-02T03:04:05",
        }

    def test_get_params_are_signed_into_query(self) -> None:
        url = build_signed_url(
            "my_key", "my_secret", "GET", "https://api.huobi.pro/market/trade", {"symbol": "btcusdt"}, now=FIXED_NOW
        )
        parts = urlsplit(url)
        query = parse_qs(parts.query)

        assert parts.path == "/market/trade"
        assert query["symbol"] == ["btcusdt"]
        assert query["AccessKeyId"] == ["my_key"]
        assert query["Timestamp"] == ["2024-01-02T03:04:05"]

        unsigned, _, signature = parts.query.rpartition("&Signature=")
        assert unsigned == canonical_query({**build_auth_params("my_key", FIXED_NOW), "symbol": "btcusdt"})
        assert unquote_plus(signature) == generate_signature(
            "my_secret", "GET", "api.huobi.pro", "/market/trade", unsigned
        )

    def test_post_params_are_left_out_of_signature(self) -> None:
        url = build_signed_url(
            "my_key",
            "my_secret",
            "POST",
            "https://api.huobi.pro/v1/order/orders/place",
            {"symbol": "btcusdt", "amount": "1"},
            now=FIXED_NOW,
        )
        query = parse_qs(urlsplit(url).query)

        assert "symbol" not in query
        assert "amount" not in query
        assert set(query) == {"AccessKeyId", "SignatureMethod", "SignatureVersion", "Timestamp", "Signature"}

    def test_signature_is_url_escaped(self) -> None:
        url = build_signed_url("k", "s", "GET", "https://api.huobi.pro/v1/account/accounts", now=FIXED_NOW)
        raw_signature = url.rpartition("&Signature=")[2]

        assert "+" not in raw_signature
        assert "/" not in raw_signature
        assert "=" not in raw_signature
