"""Process entry point: build the plan and run it on its schedule.

Usage:
    python -m core.plan.runner --api-key ... --api-secret ... --amount 100 --period weekly

Initialization failures (database, exchange metadata, first state load) end
the process with a non-zero exit code; failures of scheduled jobs are logged
and the process keeps running.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from cex.huobi.api.huobi_client import HuobiClient
from core.plan.config import PlanConfig, parse_config
from core.plan.machine import InvestmentPlan, create_plan
from core.plan.period import period_from_name
from core.plan.scheduler import PlanScheduler
from core.storage.sql import SQLConfig, SQLPlanStore


logger = logging.getLogger(__name__)


def build_plan(config: PlanConfig) -> InvestmentPlan:
    """Wire store, exchange client and plan from configuration."""
    store = SQLPlanStore(config=SQLConfig(database_url=config.database_url))
    store.ensure_schema()

    client = HuobiClient(
        api_key=config.api_key,
        api_secret=config.api_secret,
        host=config.api_host,
    )

    return create_plan(
        symbol=config.symbol,
        amount=config.amount,
        period=period_from_name(config.period),
        client=client,
        store=store,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        config = parse_config(argv)
    except ValueError as exc:
        print(f"aip: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        tz = config.tzinfo
        plan = build_plan(config)
    except Exception:
        logger.exception("Failed to start investment plan for %s", config.symbol)
        return 1

    state = plan.state
    logger.info(
        "Plan %s ready: amount=%s period=%s position=%s investment=%s equity=%s",
        config.symbol,
        config.amount,
        config.period,
        state.position,
        state.investment,
        state.equity,
    )

    scheduler = PlanScheduler(plan=plan, tz=tz)
    scheduler.start()
    try:
        scheduler.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping scheduler")
    finally:
        scheduler.stop(timeout=5)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
