#!/usr/bin/env python3
"""Single-tick collector entry point.

Fetches the live dashboard payload once, stores the reading (and a spike,
if one is detected) and prints the tick result as JSON.

Usage::

    python scripts/collect.py                                   # backend from .env
    python scripts/collect.py --backend file                    # JSON data file
    python scripts/collect.py --backend file --data-file /tmp/readings.json
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path so ``pizzint.*`` imports work when this
# script is invoked directly (e.g. ``python scripts/collect.py``).
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pizzint.cli import collect_main

if __name__ == "__main__":
    sys.exit(collect_main())
