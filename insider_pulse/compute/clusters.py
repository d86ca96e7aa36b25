from __future__ import annotations

import sys
from typing import Dict, Iterable, List

from insider_pulse.config import debug_enabled
from insider_pulse.models import BUY, Cluster, Transaction


def _debug(msg: str) -> None:
    if debug_enabled():
        print(f"[clusters] {msg}", file=sys.stderr)


DEFAULT_WINDOW_DAYS = 7


def detect_clusters(transactions: Iterable[Transaction], window_days: int = DEFAULT_WINDOW_DAYS) -> List[Cluster]:
    """Find cluster buys: >=2 distinct insiders buying one ticker within `window_days`.

    Rule (per ticker, BUY rows only):
    - Sort buys by trade date ascending (undated rows count as the oldest day).
    - Need at least 2 distinct insider names.
    - The span from the earliest to the latest buy must be <= window_days (inclusive).

    The span test covers the ticker's whole buy group, not a sliding window: buys on
    day 0, day 2 and day 20 produce no cluster even though the first two are close.

    Clusters are returned in order of each ticker's first BUY in `transactions`.
    """
    by_ticker: Dict[str, List[Transaction]] = {}
    for t in transactions:
        if t.type != BUY:
            continue
        by_ticker.setdefault(t.ticker, []).append(t)

    clusters: List[Cluster] = []
    for ticker, buys in by_ticker.items():
        if len(buys) < 2:
            continue

        buys_sorted = sorted(buys, key=lambda t: t.sort_day)

        # unique but stable order
        insiders: List[str] = []
        for b in buys_sorted:
            if b.insider not in insiders:
                insiders.append(b.insider)
        if len(insiders) < 2:
            continue

        span_days = (buys_sorted[-1].sort_day - buys_sorted[0].sort_day).days
        if span_days > window_days:
            _debug(f"ticker={ticker} buys={len(buys_sorted)} span={span_days}d exceeds window={window_days}d")
            continue

        clusters.append(
            Cluster(
                ticker=ticker,
                count=len(insiders),
                insiders=insiders,
                buys=buys_sorted,
            )
        )
        _debug(f"Cluster ticker={ticker} insiders={len(insiders)} buys={len(buys_sorted)} span={span_days}d")

    return clusters
