from __future__ import annotations


def normalize_insider_name(raw_name: str | None) -> str:
    """Display form of a reporting owner name: collapsed whitespace, each word title-cased.

    SEC names are usually "LAST FIRST MIDDLE"; word order is left alone.
    """
    if raw_name is None:
        return ""
    tokens = str(raw_name).split()
    return " ".join(_title_token(t) for t in tokens)


def normalize_ticker(raw: str | None) -> str:
    return (raw or "").strip().upper()


def _title_token(token: str) -> str:
    # First character only: "O'NEIL" -> "O'neil", "SMITH-JONES" -> "Smith-jones"
    return token[:1].upper() + token[1:].lower()
