from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import requests
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from insider_pulse import __version__
from insider_pulse.config import Config, debug_enabled, load_config
from insider_pulse.models import Cluster, Transaction
from insider_pulse.report import format_cluster
from insider_pulse.sec.edgar import SecRequestError
from insider_pulse.sec.ingest import LookupResult, lookup_recent, lookup_ticker


def _debug(msg: str) -> None:
    if debug_enabled():
        print(f"[api] {msg}", file=sys.stderr)


class TransactionOut(BaseModel):
    ticker: str
    insider: str
    title: str
    type: str
    shares: float
    price: float
    value: Optional[float] = None
    date: Optional[str] = None


class ClusterOut(BaseModel):
    ticker: str
    count: int
    insiders: List[str]
    summary: str
    buys: List[TransactionOut]


class LookupOut(BaseModel):
    filings_found: int
    filings_processed: int
    window_days: int
    transactions: List[TransactionOut]
    clusters: List[ClusterOut]


app = FastAPI(title="insider-pulse", version=__version__)
cfg: Config = load_config()

# CORS only matters when a browser frontend runs on another origin.
_cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
if _cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )


def _tx_out(t: Transaction) -> TransactionOut:
    return TransactionOut(
        ticker=t.ticker,
        insider=t.insider,
        title=t.title,
        type=t.type,
        shares=t.shares,
        price=t.price,
        value=t.value,
        date=t.date,
    )


def _cluster_out(c: Cluster, window_days: int) -> ClusterOut:
    return ClusterOut(
        ticker=c.ticker,
        count=c.count,
        insiders=list(c.insiders),
        summary=format_cluster(c, window_days),
        buys=[_tx_out(b) for b in c.buys],
    )


def _lookup_out(result: LookupResult) -> LookupOut:
    return LookupOut(
        filings_found=result.filings_found,
        filings_processed=result.filings_processed,
        window_days=result.window_days,
        transactions=[_tx_out(t) for t in result.transactions],
        clusters=[_cluster_out(c, result.window_days) for c in result.clusters],
    )


def _upstream_error(e: Exception) -> HTTPException:
    _debug(f"Upstream error: {e}")
    return HTTPException(status_code=502, detail=str(e))


# -----------------------------
# Health
# -----------------------------


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "version": __version__}


# -----------------------------
# Lookups
# -----------------------------


@app.get("/ticker/{ticker}/trades", response_model=LookupOut)
def ticker_trades(
    ticker: str,
    limit: int = Query(default=cfg.MAX_FILINGS_PER_RUN, ge=0, le=100),
    window_days: int = Query(default=cfg.CLUSTER_WINDOW_DAYS, ge=0),
) -> LookupOut:
    t = (ticker or "").strip().upper()
    if not t:
        raise HTTPException(status_code=400, detail="ticker is blank")
    try:
        result = lookup_ticker(cfg, t, limit=limit, window_days=window_days)
    except (SecRequestError, requests.RequestException) as e:
        raise _upstream_error(e) from e
    _debug(f"ticker={t} txs={len(result.transactions)} clusters={len(result.clusters)}")
    return _lookup_out(result)


@app.get("/recent", response_model=LookupOut)
def recent_trades(
    days: int = Query(default=cfg.RECENT_DEFAULT_DAYS, ge=0, le=365),
    limit: int = Query(default=cfg.MAX_FILINGS_PER_RUN, ge=0, le=100),
    window_days: int = Query(default=cfg.CLUSTER_WINDOW_DAYS, ge=0),
) -> LookupOut:
    try:
        result = lookup_recent(cfg, days, limit=limit, window_days=window_days)
    except (SecRequestError, requests.RequestException) as e:
        raise _upstream_error(e) from e
    _debug(f"recent days={days} txs={len(result.transactions)} clusters={len(result.clusters)}")
    return _lookup_out(result)
