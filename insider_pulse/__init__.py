"""insider-pulse - track SEC Form 4 insider trades.

Looks up recent Form 4 filings for a ticker (or for the last N days across
EDGAR), extracts open-market purchases and sales, prints them as a table and
flags cluster buys.

Core concepts:
- A *transaction* is one non-derivative P (buy) or S (sell) line of a filing.
- A *cluster* is two or more distinct insiders buying the same ticker within
  a short window.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
