from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from insider_pulse.compute.aggregate import collect_transactions, sort_transactions
from insider_pulse.compute.clusters import detect_clusters
from insider_pulse.config import Config, debug_enabled
from insider_pulse.models import Cluster, Transaction
from insider_pulse.sec.edgar import (
    fetch_company_filings,
    fetch_filing_document,
    filing_urls_from_search,
    search_recent_filings,
    search_total,
)
from insider_pulse.util.normalization import normalize_ticker


def _debug(msg: str) -> None:
    if debug_enabled():
        print(f"[ingest] {msg}", file=sys.stderr)


# progress(processed, total)
ProgressFn = Callable[[int, int], None]


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one lookup: what was found upstream and what was extracted from it."""

    filings_found: int
    filings_processed: int
    transactions: List[Transaction] = field(default_factory=list)
    clusters: List[Cluster] = field(default_factory=list)
    window_days: int = 7


def _fetch_documents(cfg: Config, urls: List[str], progress: Optional[ProgressFn]) -> List[str]:
    """Fetch filings one at a time (throttled in the SEC client), in the given order."""
    documents: List[str] = []
    for i, url in enumerate(urls, start=1):
        doc = fetch_filing_document(cfg, url)
        if doc:
            documents.append(doc)
        if progress is not None:
            progress(i, len(urls))
    return documents


def _analyze(cfg: Config, documents: List[str], filings_found: int, filings_processed: int, window_days: int) -> LookupResult:
    transactions = sort_transactions(collect_transactions(documents))
    clusters = detect_clusters(transactions, window_days=window_days)
    _debug(
        f"filings_found={filings_found} processed={filings_processed} docs={len(documents)} "
        f"txs={len(transactions)} clusters={len(clusters)}"
    )
    return LookupResult(
        filings_found=filings_found,
        filings_processed=filings_processed,
        transactions=transactions,
        clusters=clusters,
        window_days=window_days,
    )


def lookup_ticker(
    cfg: Config,
    ticker: str,
    *,
    limit: int | None = None,
    window_days: int | None = None,
    progress: Optional[ProgressFn] = None,
) -> LookupResult:
    """Recent Form 4 trades for one ticker, from the company's EDGAR filing feed."""
    t = normalize_ticker(ticker)
    if not t:
        raise ValueError("ticker is blank")
    cap = cfg.MAX_FILINGS_PER_RUN if limit is None else max(int(limit), 0)
    window = cfg.CLUSTER_WINDOW_DAYS if window_days is None else int(window_days)

    entries = fetch_company_filings(cfg, t)
    urls = [e.link for e in entries[:cap] if e.link]
    documents = _fetch_documents(cfg, urls, progress)
    return _analyze(cfg, documents, filings_found=len(entries), filings_processed=len(urls), window_days=window)


def lookup_recent(
    cfg: Config,
    days: int,
    *,
    limit: int | None = None,
    window_days: int | None = None,
    today: date | None = None,
    progress: Optional[ProgressFn] = None,
) -> LookupResult:
    """Form 4 trades filed across EDGAR in the last `days` days (full-text search)."""
    cap = cfg.MAX_FILINGS_PER_RUN if limit is None else max(int(limit), 0)
    window = cfg.CLUSTER_WINDOW_DAYS if window_days is None else int(window_days)

    data = search_recent_filings(cfg, days, today=today)
    urls = filing_urls_from_search(cfg, data, limit=cap)
    total = search_total(data)
    filings_found = total if total is not None else len(urls)

    documents = _fetch_documents(cfg, urls, progress)
    return _analyze(cfg, documents, filings_found=filings_found, filings_processed=len(urls), window_days=window)
