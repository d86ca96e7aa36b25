from __future__ import annotations

from datetime import date, datetime, timezone


def utc_today() -> date:
    """Current UTC calendar day (EDGAR dates are US/Eastern but the search window is day-granular)."""
    return datetime.now(timezone.utc).date()
