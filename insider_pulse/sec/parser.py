from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from lxml import etree

from insider_pulse.config import debug_enabled
from insider_pulse.models import TRADE_CODES, Transaction
from insider_pulse.util.normalization import normalize_insider_name, normalize_ticker


def _debug(msg: str) -> None:
    if debug_enabled():
        print(f"[parser] {msg}", file=sys.stderr)


_OWNERSHIP_START = re.compile(r"<ownershipdocument\b", flags=re.IGNORECASE)
_OWNERSHIP_END = re.compile(r"</ownershipdocument>", flags=re.IGNORECASE)

_TRUTHY = ("1", "true")


@dataclass(frozen=True)
class ReportingOwner:
    name: str
    title: str


def _xml_parser() -> etree.XMLParser:
    # Recovery mode keeps whatever structure it can out of truncated or sloppy markup.
    return etree.XMLParser(recover=True, encoding="utf-8", resolve_entities=False, no_network=True)


def _strip_ns(tag: object) -> str:
    # Comments and processing instructions have non-string tags.
    if not isinstance(tag, str):
        return ""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _iter_named(parent: etree._Element | None, name: str) -> Iterator[etree._Element]:
    """`parent` and its descendants, in document order, whose local tag is `name`."""
    if parent is None:
        return
    for el in parent.iter():
        if _strip_ns(el.tag) == name:
            yield el


def _find_first(parent: etree._Element | None, name: str) -> Optional[etree._Element]:
    return next(_iter_named(parent, name), None)


def _element_text(el: etree._Element | None) -> Optional[str]:
    if el is None:
        return None
    text = (el.text or "").strip()
    return text if text else None


def _find_text(parent: etree._Element | None, name: str) -> Optional[str]:
    return _element_text(_find_first(parent, name))


def _find_value_text(parent: etree._Element | None, name: str) -> Optional[str]:
    """Common SEC pattern: <foo><value>TEXT</value></foo>, with flat <foo>TEXT</foo> accepted too."""
    el = _find_first(parent, name)
    if el is None:
        return None
    return _element_text(_find_first(el, "value")) or _element_text(el)


def _parse_float(s: Optional[str]) -> Optional[float]:
    if s is None:
        return None
    t = str(s).strip().replace(",", "")
    if not t:
        return None
    try:
        n = float(t)
    except ValueError:
        return None
    if not math.isfinite(n) or n < 0:
        return None
    return n


def read_optional_number(parent: etree._Element | None, names: Sequence[str]) -> Optional[float]:
    """First parseable non-negative number among the given field names, else None."""
    for name in names:
        n = _parse_float(_find_value_text(parent, name))
        if n is not None:
            return n
    return None


def read_optional_date(parent: etree._Element | None, name: str) -> Optional[str]:
    """Date text for a field (nested <value> preferred, flat text accepted), else None."""
    return _find_value_text(parent, name)


def _is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def extract_ownership_document(text: str) -> Optional[str]:
    """Cut the <ownershipDocument>...</ownershipDocument> fragment out of a .txt/.htm wrapper."""
    if not isinstance(text, str):
        return None
    m_start = _OWNERSHIP_START.search(text)
    if not m_start:
        return None
    m_end = _OWNERSHIP_END.search(text, m_start.end())
    if not m_end:
        return text[m_start.start() :]
    return text[m_start.start() : m_end.end()]


def looks_like_ownership_document(text: str) -> bool:
    return "<ownershipDocument" in text or "<nonDerivativeTransaction" in text


def _parse_root(document: str) -> Optional[etree._Element]:
    if not isinstance(document, str) or not document.strip():
        return None
    # SGML submissions (.txt) carry the XML inside other markup.
    fragment = extract_ownership_document(document) or document
    try:
        return etree.fromstring(fragment.encode("utf-8", errors="replace"), parser=_xml_parser())
    except etree.LxmlError as e:
        _debug(f"Unrecoverable markup: {e}")
        return None


def _reporting_owner(root: etree._Element) -> ReportingOwner:
    owner_el = _find_first(root, "reportingOwner")
    if owner_el is None:
        return ReportingOwner(name="", title="")

    name = normalize_insider_name(_find_text(owner_el, "rptOwnerName"))

    rel = _find_first(owner_el, "reportingOwnerRelationship")
    title = ""
    if rel is not None:
        officer_title = _find_text(rel, "officerTitle")
        if officer_title:
            title = officer_title
        elif _is_truthy(_find_text(rel, "isDirector")):
            title = "Director"
        elif _is_truthy(_find_text(rel, "isTenPercentOwner")):
            title = "10% Owner"

    return ReportingOwner(name=name, title=title)


def _parse_transaction(tx_el: etree._Element, ticker: str, owner: ReportingOwner) -> Optional[Transaction]:
    code = (_find_text(tx_el, "transactionCode") or "").strip()
    trade_type = TRADE_CODES.get(code)
    if trade_type is None:
        return None

    shares = read_optional_number(tx_el, ("transactionShares", "sharesAmount")) or 0.0
    price = read_optional_number(tx_el, ("transactionPricePerShare", "pricePerShare")) or 0.0
    value = shares * price if shares > 0 and price > 0 else None

    return Transaction(
        ticker=ticker,
        insider=owner.name,
        title=owner.title,
        type=trade_type,
        shares=shares,
        price=price,
        value=value,
        date=read_optional_date(tx_el, "transactionDate"),
    )


def parse_form4_transactions(document: str) -> List[Transaction]:
    """Open-market buys/sells (codes P and S) from one Form 4 ownership document.

    Never raises for textual input: missing fields fall back to "", 0 or None and a
    document without qualifying nonDerivativeTransaction blocks yields [].

    The first reportingOwner's name and title are applied to every transaction.
    """
    root = _parse_root(document)
    if root is None:
        return []

    ticker = normalize_ticker(_find_text(root, "issuerTradingSymbol"))
    owner = _reporting_owner(root)

    trades: List[Transaction] = []
    blocks = list(_iter_named(root, "nonDerivativeTransaction"))
    for tx_el in blocks:
        tx = _parse_transaction(tx_el, ticker, owner)
        if tx is not None:
            trades.append(tx)

    _debug(f"Parsed Form4: symbol={ticker or '-'} owner={owner.name or '-'} blocks={len(blocks)} trades={len(trades)}")
    return trades
