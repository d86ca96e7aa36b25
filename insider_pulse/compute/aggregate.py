from __future__ import annotations

import sys
from typing import Iterable, List

from insider_pulse.config import debug_enabled
from insider_pulse.models import Transaction
from insider_pulse.sec.parser import parse_form4_transactions


def _debug(msg: str) -> None:
    if debug_enabled():
        print(f"[aggregate] {msg}", file=sys.stderr)


def collect_transactions(documents: Iterable[str]) -> List[Transaction]:
    """Parse each document in order and concatenate the results.

    No deduplication: a trade reported in two filings appears twice.
    """
    out: List[Transaction] = []
    n_docs = 0
    for doc in documents:
        n_docs += 1
        out.extend(parse_form4_transactions(doc))
    _debug(f"Collected {len(out)} transactions from {n_docs} documents")
    return out


def _tiebreak_key(t: Transaction) -> tuple:
    return (t.ticker, t.insider, t.type, t.date or "", t.shares, t.price, t.title)


def sort_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Most recent first. Undated rows sort as the oldest and sink to the bottom.

    Same-day rows are ordered by their own fields, so the result does not depend on the
    order the filings were fetched in.
    """
    by_fields = sorted(transactions, key=_tiebreak_key)
    return sorted(by_fields, key=lambda t: t.sort_day, reverse=True)
