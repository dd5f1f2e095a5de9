"""
Tests for the process entry point.

Plan construction and the scheduler are patched; nothing touches the network.
"""

from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from core.plan import runner
from core.plan.config import PlanConfig
from core.plan.period import MonthlyPeriod
from core.types import PlanState


ARGV = ["--api-key", "k", "--api-secret", "s", "--amount", "100", "--timezone", "UTC"]


@pytest.fixture
def plan() -> Mock:
    plan = Mock()
    plan.state = PlanState(position=Decimal("1"), investment=Decimal("2"), price=Decimal("3"), equity=Decimal("3"))
    return plan


def test_invalid_config_exits_with_2(capsys) -> None:
    assert runner.main(["--amount", "10"]) == 2
    assert "credentials" in capsys.readouterr().err


def test_startup_failure_exits_with_1(caplog) -> None:
    with patch.object(runner, "build_plan", side_effect=RuntimeError("symbols unavailable")):
        assert runner.main(ARGV) == 1

    assert "Failed to start investment plan" in caplog.text


def test_runs_scheduler_until_interrupted(plan) -> None:
    scheduler = Mock()
    scheduler.wait.side_effect = KeyboardInterrupt

    with patch.object(runner, "build_plan", return_value=plan), patch.object(
        runner, "PlanScheduler", return_value=scheduler
    ) as scheduler_cls:
        assert runner.main(ARGV) == 0

    assert scheduler_cls.call_args.kwargs["plan"] is plan
    scheduler.start.assert_called_once_with()
    scheduler.stop.assert_called_once_with(timeout=5)


def test_build_plan_wires_store_client_and_period(tmp_path) -> None:
    config = PlanConfig(
        api_key="k",
        api_secret="s",
        amount=Decimal("10"),
        period="monthly",
        database_url=f"sqlite:///{tmp_path / 'aip.sqlite3'}",
    )
    client = Mock()
    client.latest_price.return_value = Decimal("100")

    with patch.object(runner, "HuobiClient", return_value=client) as client_cls:
        plan = runner.build_plan(config)

    client_cls.assert_called_once_with(api_key="k", api_secret="s", host="https://api.huobi.pro")
    assert plan.period() == MonthlyPeriod()
    assert plan.amount == Decimal("10")
    assert plan.state.position == 0
    assert plan.state.price == Decimal("100")
    assert (tmp_path / "aip.sqlite3").exists()
