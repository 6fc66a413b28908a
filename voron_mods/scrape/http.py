# voron_mods/scrape/http.py
from __future__ import annotations

import logging
from typing import Optional

import cloudscraper
import requests
from cloudscraper.exceptions import CaptchaException, CloudflareException

from voron_mods.config import HTTP_TIMEOUT_S, UA

log = logging.getLogger(__name__)

# cloudscraper raises its own exceptions (not RequestException) for
# challenges it cannot solve
SCRAPER_ERRORS = (requests.RequestException, CloudflareException, CaptchaException)


class FetchError(RuntimeError):
    """A required document could not be fetched (non-2xx or network error)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


def create_session() -> requests.Session:
    """
    cloudscraper session with a desktop Chrome profile.

    raw.githubusercontent.com does not need the challenge solver, but the
    session is the same one used for every other host we talk to, and it is
    a plain requests.Session underneath.
    """
    scraper = cloudscraper.create_scraper(
        browser={"browser": "chrome", "platform": "linux", "mobile": False}
    )
    scraper.headers["User-Agent"] = UA
    return scraper


def _get(session: requests.Session, url: str, timeout: float) -> requests.Response:
    resp = session.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp


def fetch_text(
    url: str,
    *,
    session: requests.Session,
    timeout: float = HTTP_TIMEOUT_S,
    required: bool = False,
) -> Optional[str]:
    """
    GET a text document.

    required=False (per-mod READMEs): failures are logged and None returned.
    required=True (the upstream table): failures raise FetchError.
    """
    try:
        resp = _get(session, url, timeout)
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        reason = f"HTTP {status}"
    except SCRAPER_ERRORS as e:
        reason = f"{type(e).__name__}: {e}"
    else:
        # text/plain without a charset would otherwise decode as latin-1
        if "charset" not in resp.headers.get("Content-Type", "").lower():
            resp.encoding = "utf-8"
        return resp.text

    if required:
        raise FetchError(url, reason)
    log.warning("fetch failed: %s (%s)", url, reason)
    return None


def fetch_bytes(
    url: str,
    *,
    session: requests.Session,
    timeout: float = HTTP_TIMEOUT_S,
) -> Optional[bytes]:
    """GET a binary resource, None on any failure (logged)."""
    try:
        return _get(session, url, timeout).content
    except SCRAPER_ERRORS as e:
        log.warning("download failed: %s (%s)", url, e)
        return None
