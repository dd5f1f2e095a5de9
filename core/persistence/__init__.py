"""Persistence boundary of an investment plan.

These protocols define what a plan writes and reads back. The SQL
implementation lives in core.storage.sql.
"""

from .interfaces import OrderStore, PlanStore, StatisticsStore
