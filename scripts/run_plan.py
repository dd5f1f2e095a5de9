#!/usr/bin/env python
"""CLI runner for the automatic investment plan."""

import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.plan.runner import main


if __name__ == "__main__":
    raise SystemExit(main())
