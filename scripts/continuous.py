#!/usr/bin/env python3
"""Long-running collector entry point.

Runs a collection tick immediately and then every
``COLLECT_INTERVAL_MINUTES`` until interrupted (Ctrl+C / SIGTERM).

Usage::

    python scripts/continuous.py
    python scripts/continuous.py --interval-minutes 5 --json-logs
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path so ``pizzint.*`` imports work when this
# script is invoked directly (e.g. ``python scripts/continuous.py``).
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pizzint.cli import continuous_main

if __name__ == "__main__":
    sys.exit(continuous_main())
