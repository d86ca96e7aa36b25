from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest

from insider_pulse.config import Config
from insider_pulse.models import BUY, Transaction


def nd_tx(
    code: str = "P",
    shares: Optional[str] = "100",
    price: Optional[str] = "10",
    tx_date: Optional[str] = "2024-01-05",
) -> str:
    """One <nonDerivativeTransaction> block in the EDGAR layout."""
    shares_xml = f"<transactionShares><value>{shares}</value></transactionShares>" if shares is not None else ""
    price_xml = (
        f"<transactionPricePerShare><value>{price}</value></transactionPricePerShare>" if price is not None else ""
    )
    date_xml = f"<transactionDate><value>{tx_date}</value></transactionDate>" if tx_date is not None else ""
    return f"""
    <nonDerivativeTransaction>
      <securityTitle><value>Common Stock</value></securityTitle>
      {date_xml}
      <transactionCoding>
        <transactionFormType>4</transactionFormType>
        <transactionCode>{code}</transactionCode>
        <equitySwapInvolved>0</equitySwapInvolved>
      </transactionCoding>
      <transactionAmounts>
        {shares_xml}
        {price_xml}
        <transactionAcquiredDisposedCode><value>A</value></transactionAcquiredDisposedCode>
      </transactionAmounts>
    </nonDerivativeTransaction>"""


def form4_xml(
    *transactions: str,
    ticker: str = "acme",
    owner: str = "DOE JANE Q",
    relationship: str = "<isDirector>1</isDirector>",
) -> str:
    return f"""<?xml version="1.0"?>
<ownershipDocument>
  <schemaVersion>X0508</schemaVersion>
  <documentType>4</documentType>
  <periodOfReport>2024-01-05</periodOfReport>
  <issuer>
    <issuerCik>0000012345</issuerCik>
    <issuerName>Acme Corp</issuerName>
    <issuerTradingSymbol>{ticker}</issuerTradingSymbol>
  </issuer>
  <reportingOwner>
    <reportingOwnerId>
      <rptOwnerCik>0000099999</rptOwnerCik>
      <rptOwnerName>{owner}</rptOwnerName>
    </reportingOwnerId>
    <reportingOwnerRelationship>
      {relationship}
    </reportingOwnerRelationship>
  </reportingOwner>
  <nonDerivativeTable>
    {"".join(transactions)}
  </nonDerivativeTable>
</ownershipDocument>
"""


def make_tx(
    ticker: str = "X",
    insider: str = "A",
    date: Optional[str] = "2024-01-01",
    type: str = BUY,
    shares: float = 100.0,
    price: float = 10.0,
) -> Transaction:
    value = shares * price if shares > 0 and price > 0 else None
    return Transaction(
        ticker=ticker,
        insider=insider,
        title="",
        type=type,
        shares=shares,
        price=price,
        value=value,
        date=date,
    )


@pytest.fixture
def cfg() -> Config:
    return Config(
        SEC_USER_AGENT="insider-pulse-tests (tests@example.com)",
        SEC_MIN_INTERVAL_SECONDS=0.0,
        MAX_FILINGS_PER_RUN=15,
        CLUSTER_WINDOW_DAYS=7,
    )


@dataclass
class FakeResponse:
    status_code: int = 200
    text: str = ""
    payload: Any = None

    def json(self) -> Any:
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSec:
    """Stand-in for requests.get: serves canned responses by URL prefix and records calls."""

    def __init__(self, routes: Dict[str, FakeResponse]):
        self.routes = routes
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url: str, params: Any = None, headers: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        # Longest matching prefix wins.
        for prefix in sorted(self.routes, key=len, reverse=True):
            if url.startswith(prefix):
                return self.routes[prefix]
        return FakeResponse(status_code=404, text="not found")


@pytest.fixture
def fake_sec(monkeypatch) -> Callable[[Dict[str, FakeResponse]], FakeSec]:
    def install(routes: Dict[str, FakeResponse]) -> FakeSec:
        fake = FakeSec(routes)
        monkeypatch.setattr("insider_pulse.sec.edgar.requests.get", fake)
        return fake

    return install
