"""Console rendering for transactions and cluster buys."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence

from insider_pulse.models import Cluster, Transaction

MISSING = "—"
MAX_COLUMN_WIDTH = 30
TITLE_WIDTH = 20
INDENT = "  "


def fmt_date(d: str | None) -> str:
    if not d:
        return MISSING
    return str(d)[:10]


def fmt_num(n: float | None) -> str:
    """Thousands-grouped, integers without decimals, fractions with up to three places."""
    if n is None:
        return MISSING
    if float(n).is_integer():
        return f"{int(n):,}"
    return f"{n:,.3f}".rstrip("0").rstrip(".")


def fmt_money(n: float | None) -> str:
    if n is None:
        return MISSING
    return f"${n:,.0f}"


@dataclass(frozen=True)
class Column:
    label: str
    fn: Callable[[Transaction], str]


COLUMNS: List[Column] = [
    Column("Date", lambda r: fmt_date(r.date)),
    Column("Insider", lambda r: r.insider or MISSING),
    Column("Title", lambda r: (r.title or MISSING)[:TITLE_WIDTH]),
    Column("Type", lambda r: r.type or MISSING),
    Column("Shares", lambda r: fmt_num(r.shares)),
    Column("Value", lambda r: fmt_money(r.value)),
    Column("Ticker", lambda r: r.ticker or MISSING),
]


def render_table(rows: Sequence[Transaction], columns: Sequence[Column] = COLUMNS) -> str:
    if not rows:
        return f"{INDENT}No trades found."

    widths = [len(c.label) for c in columns]
    formatted: List[List[str]] = []
    for r in rows:
        cells = [str(c.fn(r)) for c in columns]
        for i, v in enumerate(cells):
            widths[i] = max(widths[i], len(v))
        formatted.append(cells)
    widths = [min(w, MAX_COLUMN_WIDTH) for w in widths]

    lines = [
        INDENT + "  ".join(c.label.ljust(widths[i]) for i, c in enumerate(columns)),
        INDENT + "──".join("─" * w for w in widths),
    ]
    for cells in formatted:
        lines.append(INDENT + "  ".join(v[: widths[i]].ljust(widths[i]) for i, v in enumerate(cells)))
    return "\n".join(lines)


def format_cluster(cluster: Cluster, window_days: int = 7) -> str:
    return (
        f"{cluster.ticker}: {cluster.count} insiders bought within {window_days} days "
        f"({', '.join(cluster.insiders)})"
    )


def render_clusters(clusters: Sequence[Cluster], window_days: int = 7) -> str:
    """Cluster section, or "" when there is nothing to flag."""
    if not clusters:
        return ""
    lines = [f"{INDENT}🔥 CLUSTER BUYS DETECTED:"]
    for c in clusters:
        lines.append(f"{INDENT}► {format_cluster(c, window_days)}")
    return "\n".join(lines)
