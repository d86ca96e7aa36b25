from __future__ import annotations

import re
import sys
import threading
import time
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urljoin

import requests
from lxml import etree

from insider_pulse.config import Config, debug_enabled
from insider_pulse.sec.parser import extract_ownership_document, looks_like_ownership_document
from insider_pulse.util.time import utc_today


def _debug(msg: str) -> None:
    if debug_enabled():
        print(f"[sec] {msg}", file=sys.stderr)


class SecRequestError(RuntimeError):
    """An EDGAR feed or search request failed (network, HTTP status or undecodable body)."""


@dataclass(frozen=True)
class FeedEntry:
    title: str
    updated: str
    summary: str
    link: str


_ATOM_NS = "http://www.w3.org/2005/Atom"
_XML_HREF = re.compile(r"""href=["']([^"']*\.xml)["']""", flags=re.IGNORECASE)

# Per-process polite throttling for SEC endpoints.
_SEC_LAST_REQUEST_MONO: float = 0.0
_SEC_LOCK = threading.Lock()


def _throttle(min_interval_seconds: float | None) -> None:
    if not min_interval_seconds or min_interval_seconds <= 0:
        return
    global _SEC_LAST_REQUEST_MONO
    with _SEC_LOCK:
        now = time.monotonic()
        dt = now - _SEC_LAST_REQUEST_MONO
        if dt < min_interval_seconds:
            time.sleep(min_interval_seconds - dt)
        _SEC_LAST_REQUEST_MONO = time.monotonic()


def _get(cfg: Config, url: str, params: Dict[str, Any] | None = None, accept: str | None = None) -> requests.Response:
    _debug(f"GET {url}")
    _throttle(cfg.SEC_MIN_INTERVAL_SECONDS)
    headers = {"User-Agent": cfg.SEC_USER_AGENT}
    if accept:
        headers["Accept"] = accept
    try:
        r = requests.get(url, params=params, headers=headers, timeout=cfg.SEC_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise SecRequestError(f"SEC request failed for {url}: {e}") from e
    if r.status_code != 200:
        raise SecRequestError(f"SEC request failed {r.status_code}: {url}")
    return r


def _get_text(cfg: Config, url: str, accept: str | None = None) -> str:
    return _get(cfg, url, accept=accept).text


def _get_json(cfg: Config, url: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
    r = _get(cfg, url, params=params, accept="application/json")
    try:
        data = r.json()
    except ValueError as e:
        raise SecRequestError(f"SEC returned invalid JSON for {url}: {e}") from e
    if not isinstance(data, dict):
        raise SecRequestError(f"SEC returned unexpected JSON for {url}")
    return data


# -----------------------------
# Ticker mode: company Atom feed
# -----------------------------


def company_feed_url(cfg: Config, ticker: str) -> str:
    return cfg.EDGAR_COMPANY_FEED_URL.replace("{ticker}", quote(ticker, safe=""))


def parse_atom_entries(xml_text: str) -> List[FeedEntry]:
    """Entries (title, updated, summary, first link href) of an EDGAR Atom feed."""
    try:
        root = etree.fromstring(xml_text.encode("utf-8"), parser=etree.XMLParser(recover=True, encoding="utf-8"))
    except etree.LxmlError as e:
        raise SecRequestError(f"EDGAR feed is not valid Atom: {e}") from e
    if root is None:
        return []

    def text_of(entry: etree._Element, tag: str) -> str:
        el = entry.find(f"{{{_ATOM_NS}}}{tag}")
        if el is None:
            el = entry.find(tag)
        return "".join(el.itertext()).strip() if el is not None else ""

    entries: List[FeedEntry] = []
    for entry in root.iter(f"{{{_ATOM_NS}}}entry", "entry"):
        link = entry.find(f"{{{_ATOM_NS}}}link")
        if link is None:
            link = entry.find("link")
        entries.append(
            FeedEntry(
                title=text_of(entry, "title"),
                updated=text_of(entry, "updated"),
                summary=text_of(entry, "summary"),
                link=(link.get("href") or "").strip() if link is not None else "",
            )
        )
    return entries


def fetch_company_filings(cfg: Config, ticker: str) -> List[FeedEntry]:
    url = company_feed_url(cfg, ticker)
    text = _get_text(cfg, url, accept="application/atom+xml,application/xml,text/xml")
    entries = parse_atom_entries(text)
    _debug(f"Company feed ticker={ticker} entries={len(entries)}")
    return entries


# -----------------------------
# Recent mode: EDGAR full-text search
# -----------------------------


def search_recent_filings(cfg: Config, days: int, today: date | None = None) -> Dict[str, Any]:
    """Raw EFTS response for Form 4 filings filed in [today - days, today]."""
    end = today or utc_today()
    start = end - timedelta(days=max(int(days), 0))
    params = {
        "q": '"4"',
        "forms": "4",
        "dateRange": "custom",
        "startdt": start.isoformat(),
        "enddt": end.isoformat(),
    }
    return _get_json(cfg, cfg.EDGAR_SEARCH_URL, params=params)


def _absolute(cfg: Config, url: str) -> str:
    return url if url.startswith("http") else urljoin(cfg.SEC_ARCHIVES_BASE_URL, url)


def _hit_url(cfg: Config, hit: Dict[str, Any]) -> Optional[str]:
    src = hit.get("_source") or {}
    file_url = str(src.get("file_url") or "").strip()
    if file_url:
        return _absolute(cfg, file_url)

    # EFTS ids look like "0000950170-24-012345:form4.xml"
    hit_id = str(hit.get("_id") or "").strip()
    if not hit_id:
        return None
    if hit_id.startswith(("http", "/")):
        return _absolute(cfg, hit_id)
    if ":" not in hit_id:
        return None
    adsh, filename = hit_id.split(":", 1)
    ciks = src.get("ciks") or []
    cik_digits = "".join(ch for ch in str(ciks[0] if ciks else "") if ch.isdigit())
    if not (cik_digits and adsh and filename):
        return None
    return _absolute(cfg, f"/Archives/edgar/data/{int(cik_digits)}/{adsh.replace('-', '')}/{filename}")


def filing_urls_from_search(cfg: Config, data: Dict[str, Any], limit: int) -> List[str]:
    """Document URLs from an EFTS response (or a {"filings": [...]} style payload), capped at `limit`."""
    urls: List[str] = []
    hits_obj = data.get("hits")
    if isinstance(hits_obj, dict) and hits_obj.get("hits"):
        for hit in hits_obj.get("hits")[:limit]:
            url = _hit_url(cfg, hit or {})
            if url:
                urls.append(url)
    elif data.get("filings"):
        for f in data.get("filings")[:limit]:
            url = str((f or {}).get("linkToFilingDetails") or (f or {}).get("primaryDocUrl") or "").strip()
            if url:
                urls.append(_absolute(cfg, url))
    return urls


def search_total(data: Dict[str, Any]) -> Optional[int]:
    hits_obj = data.get("hits")
    if not isinstance(hits_obj, dict):
        return None
    total = hits_obj.get("total")
    if isinstance(total, dict):
        total = total.get("value")
    try:
        return int(total) if total is not None else None
    except (TypeError, ValueError):
        return None


# -----------------------------
# Filing documents
# -----------------------------


def find_xml_link(html: str, page_url: str) -> Optional[str]:
    """First raw .xml document linked from a filing index page.

    Index pages also link the XSL-rendered copy (".../xslF345X05/form4.xml"), which is HTML; skip it.
    """
    fallback: Optional[str] = None
    for m in _XML_HREF.finditer(html or ""):
        href = m.group(1)
        if "/xsl" in href.lower():
            fallback = fallback or href
            continue
        return urljoin(page_url, href)
    return urljoin(page_url, fallback) if fallback else None


def fetch_filing_document(cfg: Config, url: str) -> Optional[str]:
    """Raw ownership document text behind a filing URL (index page, .txt or .xml), or None.

    Failures for a single filing are logged and reported as None so one bad filing does
    not abort the batch.
    """
    try:
        text = _get_text(cfg, url)
        if looks_like_ownership_document(text):
            return extract_ownership_document(text) or text

        xml_url = find_xml_link(text, url)
        if not xml_url:
            _debug(f"No XML document linked from {url}")
            return None
        xml_text = _get_text(cfg, xml_url)
        return extract_ownership_document(xml_text) or xml_text
    except SecRequestError as e:
        _debug(f"Skipping filing {url}: {e}")
        return None
