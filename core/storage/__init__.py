"""Storage implementations of the plan persistence interfaces.

The SQL store works with any SQLAlchemy URL; SQLite is the default.
"""

from .sql import SQLConfig, SQLPlanStore
