# voron_mods/scrape/images.py
from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from requests.utils import requote_uri

from voron_mods.config import HTTP_TIMEOUT_S, RAW_BASE_URL, README_FILENAME
from voron_mods.scrape.http import fetch_text
from voron_mods.utils import has_image_extension, is_http_url, strip_dot_slash, strip_link_title

log = logging.getLogger(__name__)

_MARKDOWN_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")


def readme_url_for(source_path: str) -> str:
    return f"{RAW_BASE_URL}/{source_path}/{README_FILENAME}"


def _markdown_image_targets(markdown: str) -> List[str]:
    return [m.group(1) for m in _MARKDOWN_IMAGE_RE.finditer(markdown)]


def _html_image_targets(markdown: str) -> List[str]:
    soup = BeautifulSoup(markdown, "html.parser")
    out: List[str] = []
    for img in soup.find_all("img"):
        src = (img.get("src") or "").strip()
        if src:
            out.append(src)
    return out


# First rule with a valid candidate wins; within a rule, document order.
IMAGE_RULES: tuple[Callable[[str], List[str]], ...] = (
    _markdown_image_targets,
    _html_image_targets,
)


def resolve_image_url(raw: str, source_path: str) -> Optional[str]:
    """
    Turn an image reference from a mod README into an absolute URL.

    Returns None if the reference doesn't look like an image file.
    """
    cleaned = strip_link_title(raw)
    if not cleaned or not has_image_extension(cleaned):
        return None

    if is_http_url(cleaned):
        return cleaned
    if cleaned.startswith("//"):
        return f"https:{cleaned}"

    relative = strip_dot_slash(cleaned)
    base = requote_uri(f"{RAW_BASE_URL}/{source_path}/")
    return urljoin(base, requote_uri(relative))


def _first_valid(candidates: Iterable[str], source_path: str) -> Optional[str]:
    for raw in candidates:
        url = resolve_image_url(raw, source_path)
        if url:
            return url
    return None


def extract_first_image(markdown: str, source_path: str) -> Optional[str]:
    for rule in IMAGE_RULES:
        url = _first_valid(rule(markdown), source_path)
        if url:
            return url
    return None


def fetch_preview_image(
    source_path: str,
    *,
    session: requests.Session,
    timeout: float = HTTP_TIMEOUT_S,
) -> Optional[str]:
    """
    Fetch the mod's own README and return its first usable image URL.

    Any failure (HTTP error, network error, no image) yields None; nothing
    here raises into the caller's batch.
    """
    markdown = fetch_text(readme_url_for(source_path), session=session, timeout=timeout)
    if markdown is None:
        return None

    url = extract_first_image(markdown, source_path)
    if url is None:
        log.warning("no preview image in %s", source_path)
    return url
