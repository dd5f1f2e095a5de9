"""Runtime configuration of the investment plan process.

Every setting can be passed as a command-line flag or through an ``AIP_``
environment variable; flags win.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cex.huobi.api.huobi_client import HuobiClient
from core.plan.period import PERIODS
from core.storage.sql.config import DEFAULT_DATABASE_URL

ENV_PREFIX = "AIP_"
DEFAULT_SYMBOL = "btcusdt"
DEFAULT_PERIOD = "daily"
DEFAULT_TIMEZONE = "Asia/Chongqing"


@dataclass(frozen=True)
class PlanConfig:
    """Configuration for one investment plan process.

    `api_secret` and `database_url` must never be logged.
    """

    api_key: str
    api_secret: str = field(repr=False)
    amount: Decimal
    api_host: str = HuobiClient.DEFAULT_HOST
    symbol: str = DEFAULT_SYMBOL
    period: str = DEFAULT_PERIOD
    database_url: str = field(default=DEFAULT_DATABASE_URL, repr=False)
    timezone: str = DEFAULT_TIMEZONE
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.api_key.strip() or not self.api_secret.strip():
            raise ValueError(
                "Huobi API credentials are required. Provide --api-key/--api-secret or set "
                f"{ENV_PREFIX}API_KEY/{ENV_PREFIX}API_SECRET in the environment."
            )
        if self.amount <= 0:
            raise ValueError("amount must be positive")
        if self.period not in PERIODS:
            raise ValueError(f"unknown period: {self.period!r} (available: {', '.join(PERIODS)})")
        if not self.symbol:
            raise ValueError("symbol is required")

    @property
    def tzinfo(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"unknown timezone: {self.timezone!r}") from exc


def _env(environ: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    return environ.get(ENV_PREFIX + name, default)


def build_arg_parser(environ: Optional[Mapping[str, str]] = None) -> argparse.ArgumentParser:
    env = os.environ if environ is None else environ

    parser = argparse.ArgumentParser(
        prog="aip",
        description="aip - automatic investment plan for digital currency",
    )
    parser.add_argument(
        "--database-url",
        default=_env(env, "DATABASE_URL", DEFAULT_DATABASE_URL),
        help=f"SQLAlchemy database URL (default: {DEFAULT_DATABASE_URL})",
    )
    parser.add_argument("--api-key", default=_env(env, "API_KEY", ""), help="Huobi API key")
    parser.add_argument("--api-secret", default=_env(env, "API_SECRET", ""), help="Huobi API secret")
    parser.add_argument(
        "--api-host",
        default=_env(env, "API_HOST", HuobiClient.DEFAULT_HOST),
        help=f"Huobi API host (default: {HuobiClient.DEFAULT_HOST})",
    )
    parser.add_argument("--symbol", default=_env(env, "SYMBOL", DEFAULT_SYMBOL), help="Symbol name, e.g. btcusdt")
    parser.add_argument(
        "--amount",
        default=_env(env, "AMOUNT", "0"),
        help="Quote currency amount invested per period",
    )
    parser.add_argument(
        "--period",
        default=_env(env, "PERIOD", DEFAULT_PERIOD),
        choices=sorted(PERIODS),
        help="Period of automatic investment (default: daily)",
    )
    parser.add_argument(
        "--timezone",
        default=_env(env, "TIMEZONE", DEFAULT_TIMEZONE),
        help=f"Timezone the schedule is evaluated in (default: {DEFAULT_TIMEZONE})",
    )
    parser.add_argument(
        "--log-level",
        default=_env(env, "LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def parse_config(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> PlanConfig:
    """Parse flags (falling back to environment variables) into a PlanConfig.

    Raises:
        ValueError: If a setting is missing or invalid
    """
    args = build_arg_parser(environ).parse_args(argv)

    try:
        amount = Decimal(str(args.amount))
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {args.amount!r}") from exc

    return PlanConfig(
        api_key=args.api_key,
        api_secret=args.api_secret,
        amount=amount,
        api_host=args.api_host,
        symbol=args.symbol.strip().lower(),
        period=args.period,
        database_url=args.database_url,
        timezone=args.timezone,
        log_level=args.log_level,
    )
