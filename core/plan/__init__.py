"""Investment plan: periods, state machine, scheduling and process entry point."""

from .machine import InvestmentPlan, create_plan
from .period import DailyPeriod, MonthlyPeriod, Period, WeeklyPeriod, period_from_name

__all__ = [
    "InvestmentPlan",
    "create_plan",
    "Period",
    "DailyPeriod",
    "WeeklyPeriod",
    "MonthlyPeriod",
    "period_from_name",
]
