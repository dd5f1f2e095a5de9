"""SQL storage for investment plans (SQLAlchemy Core).

Notes
- We avoid logging connection URLs to prevent accidental secret leakage.
"""

from .config import SQLConfig
from .stores import SQLPlanStore
