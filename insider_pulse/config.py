import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load a local .env file if present (no-op otherwise).
load_dotenv()


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def debug_enabled() -> bool:
    return _env_bool("INSIDER_PULSE_DEBUG", False) is True


@dataclass(frozen=True)
class Config:
    """Runtime configuration, read from the environment (or a .env file)."""

    # -----------------
    # SEC / EDGAR
    # -----------------
    # EDGAR requires a descriptive User-Agent.
    SEC_USER_AGENT: str = os.environ.get(
        "SEC_USER_AGENT",
        "insider-pulse/0.1 (personal research tool)",
    )

    # SEC asks for at most 10 requests/second.
    SEC_MIN_INTERVAL_SECONDS: float = float(os.environ.get("SEC_MIN_INTERVAL_SECONDS", "0.15"))
    SEC_TIMEOUT_SECONDS: float = float(os.environ.get("SEC_TIMEOUT_SECONDS", "30"))

    # Company Form 4 feed. {ticker} is substituted (EDGAR accepts a ticker in the CIK param).
    EDGAR_COMPANY_FEED_URL: str = os.environ.get(
        "EDGAR_COMPANY_FEED_URL",
        "https://www.sec.gov/cgi-bin/browse-edgar?action=getcompany&type=4&dateb=&owner=include"
        "&count=40&CIK={ticker}&output=atom",
    )

    # EDGAR full-text search (EFTS).
    EDGAR_SEARCH_URL: str = os.environ.get("EDGAR_SEARCH_URL", "https://efts.sec.gov/LATEST/search-index")
    SEC_ARCHIVES_BASE_URL: str = os.environ.get("SEC_ARCHIVES_BASE_URL", "https://www.sec.gov")

    # -----------------
    # Run limits
    # -----------------
    MAX_FILINGS_PER_RUN: int = int(os.environ.get("MAX_FILINGS_PER_RUN", "15"))
    CLUSTER_WINDOW_DAYS: int = int(os.environ.get("CLUSTER_WINDOW_DAYS", "7"))
    RECENT_DEFAULT_DAYS: int = int(os.environ.get("RECENT_DEFAULT_DAYS", "7"))

    DEBUG: bool = _env_bool("INSIDER_PULSE_DEBUG", False) is True

    # -----------------
    # HTTP API
    # -----------------
    API_HOST: str = os.environ.get("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.environ.get("API_PORT", "8000"))

    # Comma-separated; empty disables CORS.
    CORS_ALLOW_ORIGINS: str = os.environ.get("CORS_ALLOW_ORIGINS", "")


def load_config() -> Config:
    return Config()
