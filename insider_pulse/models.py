from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

BUY = "BUY"
SELL = "SELL"

# Form 4 transaction codes we keep. Everything else (A=grant, M=exercise,
# G=gift, F=tax withholding, ...) never becomes a Transaction.
TRADE_CODES = {"P": BUY, "S": SELL}


def parse_day(value: str | None) -> date | None:
    """ISO day from the first ten characters of a date string, or None."""
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class Transaction:
    ticker: str
    insider: str
    title: str
    type: str
    shares: float
    price: float
    value: float | None
    date: str | None

    @property
    def trade_day(self) -> date | None:
        return parse_day(self.date)

    @property
    def sort_day(self) -> date:
        """Day used for ordering. Missing/unparseable dates count as the oldest possible day."""
        return self.trade_day or date.min


@dataclass(frozen=True)
class Cluster:
    ticker: str
    count: int
    insiders: List[str]
    buys: List[Transaction]
