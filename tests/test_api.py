from fastapi.testclient import TestClient

from conftest import make_tx
from insider_pulse.api import server
from insider_pulse.compute.clusters import detect_clusters
from insider_pulse.sec.edgar import SecRequestError
from insider_pulse.sec.ingest import LookupResult

client = TestClient(server.app)


def _result(transactions, window_days=7):
    return LookupResult(
        filings_found=2,
        filings_processed=2,
        transactions=transactions,
        clusters=detect_clusters(transactions, window_days=window_days),
        window_days=window_days,
    )


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_ticker_trades(monkeypatch):
    seen = {}

    def fake_lookup(cfg, ticker, *, limit=None, window_days=None, progress=None):
        seen.update(ticker=ticker, limit=limit, window_days=window_days)
        return _result(
            [
                make_tx(ticker="ACME", insider="B", date="2024-01-05"),
                make_tx(ticker="ACME", insider="A", date="2024-01-01", price=0),
            ]
        )

    monkeypatch.setattr(server, "lookup_ticker", fake_lookup)

    r = client.get("/ticker/acme/trades", params={"limit": 5})

    assert r.status_code == 200
    body = r.json()
    assert seen == {"ticker": "ACME", "limit": 5, "window_days": 7}
    assert body["filings_found"] == 2
    assert [t["insider"] for t in body["transactions"]] == ["B", "A"]
    assert body["transactions"][0]["value"] == 1000
    assert body["transactions"][1]["value"] is None
    assert body["clusters"][0]["count"] == 2
    assert body["clusters"][0]["insiders"] == ["A", "B"]
    assert body["clusters"][0]["summary"] == "ACME: 2 insiders bought within 7 days (A, B)"


def test_recent_trades(monkeypatch):
    seen = {}

    def fake_recent(cfg, days, *, limit=None, window_days=None, progress=None):
        seen.update(days=days, window_days=window_days)
        return _result([], window_days=window_days)

    monkeypatch.setattr(server, "lookup_recent", fake_recent)

    r = client.get("/recent", params={"days": 3, "window_days": 14})

    assert r.status_code == 200
    assert seen == {"days": 3, "window_days": 14}
    assert r.json()["transactions"] == []
    assert r.json()["window_days"] == 14


def test_upstream_failure_is_bad_gateway(monkeypatch):
    def failing(cfg, ticker, **kw):
        raise SecRequestError("SEC request failed 503")

    monkeypatch.setattr(server, "lookup_ticker", failing)

    r = client.get("/ticker/ACME/trades")

    assert r.status_code == 502
    assert "503" in r.json()["detail"]


def test_query_validation():
    assert client.get("/recent", params={"days": -1}).status_code == 422
