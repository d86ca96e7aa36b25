"""Run the insider-pulse CLI from a source checkout.

Usage:
  python scripts/lookup.py AAPL
  python scripts/lookup.py --recent 3
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from insider_pulse.cli import main


if __name__ == "__main__":
    sys.exit(main())
