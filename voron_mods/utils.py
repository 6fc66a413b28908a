# voron_mods/utils.py
from __future__ import annotations

import hashlib
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import IMAGE_EXTENSIONS


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _now_iso_z() -> str:
    return _now_utc().strftime("%Y-%m-%dT%H:%M:%SZ")


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write JSON via a sibling .tmp file + rename so readers never see a
    half-written document.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    tmp.replace(path)


def is_http_url(url: str) -> bool:
    return re.match(r"^https?://", url or "", flags=re.IGNORECASE) is not None


def strip_dot_slash(path: str) -> str:
    return path[2:] if path.startswith("./") else path


def strip_query(url: str) -> str:
    """Drop ?query and #fragment, lowercased, for extension checks."""
    return re.split(r"[?#]", (url or "").lower(), maxsplit=1)[0]


def strip_link_title(url: str) -> str:
    """
    `![x](pic.png "A title")` -> "pic.png"
    """
    parts = (url or "").strip().split()
    return parts[0] if parts else ""


def has_image_extension(url: str) -> bool:
    return strip_query(url).endswith(IMAGE_EXTENSIONS)


def url_digest(url: str) -> str:
    """Deterministic filename stem for a source URL."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


def sanitize_description(text: str) -> str:
    """
    Table cells carry literal "\\n" sequences for line breaks; the catalog
    shows a single line.
    """
    text = (text or "").replace("\\n", " ")
    return re.sub(r"\s+", " ", text).strip()
