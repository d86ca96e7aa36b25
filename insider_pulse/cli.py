"""insider-pulse command line.

Usage:
  insider-pulse AAPL          Look up recent insider trades for a ticker
  insider-pulse --recent 7    Show insider trades from the last N days
  insider-pulse --help        Show this help
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import requests

from insider_pulse import __version__
from insider_pulse.config import Config, load_config
from insider_pulse.report import render_clusters, render_table
from insider_pulse.sec.edgar import SecRequestError
from insider_pulse.sec.ingest import LookupResult, lookup_recent, lookup_ticker


def _build_parser(cfg: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="insider-pulse",
        description="insider-pulse - Track SEC Form 4 insider trades (open-market buys and sells).",
    )
    parser.add_argument("ticker", nargs="?", help="Look up recent insider trades for a ticker (e.g. AAPL)")
    parser.add_argument(
        "--recent",
        nargs="?",
        type=int,
        const=cfg.RECENT_DEFAULT_DAYS,
        default=None,
        metavar="DAYS",
        help=f"Show insider trades filed in the last DAYS days (default: {cfg.RECENT_DEFAULT_DAYS})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=cfg.MAX_FILINGS_PER_RUN,
        help=f"Maximum filings to fetch (default: {cfg.MAX_FILINGS_PER_RUN})",
    )
    parser.add_argument(
        "--window",
        type=int,
        default=cfg.CLUSTER_WINDOW_DAYS,
        metavar="DAYS",
        help=f"Cluster-buy window in days (default: {cfg.CLUSTER_WINDOW_DAYS})",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _progress(processed: int, total: int) -> None:
    sys.stderr.write(f"\r  Processing filing {processed}/{total}...")
    sys.stderr.flush()


def _clear_progress() -> None:
    sys.stderr.write("\r" + " " * 50 + "\r")
    sys.stderr.flush()


def _print_result(result: LookupResult, no_trades_lines: List[str]) -> None:
    if not result.transactions:
        for line in no_trades_lines:
            print(line)
        return

    print(render_table(result.transactions))
    clusters = render_clusters(result.clusters, result.window_days)
    if clusters:
        print()
        print(clusters)
    print()


def _run_ticker(cfg: Config, ticker: str, limit: int, window: int) -> None:
    print(f"\n  Fetching Form 4 filings for {ticker}...\n")
    try:
        result = lookup_ticker(cfg, ticker, limit=limit, window_days=window, progress=_progress)
    finally:
        _clear_progress()

    if result.filings_found == 0:
        print("  No Form 4 filings found for this ticker.")
        return
    _print_result(
        result,
        [
            "  No non-derivative buy/sell transactions found.",
            "  (Option exercises and grants are filtered out)",
        ],
    )


def _run_recent(cfg: Config, days: int, limit: int, window: int) -> None:
    print(f"\n  Fetching recent Form 4 filings (last {days} days)...\n")
    try:
        result = lookup_recent(cfg, days, limit=limit, window_days=window, progress=_progress)
    finally:
        _clear_progress()

    if result.filings_found == 0:
        print("  No recent filings found.")
        return
    _print_result(result, ["  No non-derivative buy/sell transactions found in recent filings."])


def main(argv: Optional[List[str]] = None) -> int:
    cfg = load_config()
    parser = _build_parser(cfg)
    args_list = sys.argv[1:] if argv is None else list(argv)

    if not args_list:
        parser.print_help()
        return 0

    args = parser.parse_args(args_list)

    if args.recent is not None and args.ticker:
        parser.error("give either a ticker or --recent, not both")
    if args.recent is None and not args.ticker:
        parser.print_help()
        return 0
    if args.recent is not None and args.recent < 0:
        parser.error("--recent DAYS must be >= 0")
    if args.limit < 0:
        parser.error("--limit must be >= 0")
    if args.window < 0:
        parser.error("--window must be >= 0")

    try:
        if args.recent is not None:
            _run_recent(cfg, args.recent, args.limit, args.window)
        else:
            _run_ticker(cfg, args.ticker.strip().upper(), args.limit, args.window)
    except (SecRequestError, requests.RequestException, ValueError) as e:
        print(f"\n  Error: {e}\n", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
