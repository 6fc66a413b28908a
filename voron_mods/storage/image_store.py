# voron_mods/storage/image_store.py
from __future__ import annotations

import io
import logging
import os
import threading
from pathlib import Path
from typing import Iterable, Optional

import requests
from PIL import Image

from voron_mods.config import (
    HTTP_TIMEOUT_S,
    JPEG_QUALITY,
    MATERIALIZE_EXTENSIONS,
    MATERIALIZED_SUFFIX,
    PUBLIC_IMAGE_PREFIX,
)
from voron_mods.scrape.http import fetch_bytes
from voron_mods.utils import strip_query, url_digest

log = logging.getLogger(__name__)


def needs_materialization(url: str) -> bool:
    return strip_query(url).endswith(MATERIALIZE_EXTENSIONS)


def materialized_name(url: str) -> str:
    return f"{url_digest(url)}{MATERIALIZED_SUFFIX}"


def public_path(filename: str) -> str:
    return f"{PUBLIC_IMAGE_PREFIX}{filename}"


def local_file_for(image: str, image_dir: Path) -> Optional[Path]:
    """
    Map a public "/mod-images/<name>" reference back to its file.

    Remote URLs (and anything else) -> None.
    """
    if not image.startswith(PUBLIC_IMAGE_PREFIX):
        return None
    name = image[len(PUBLIC_IMAGE_PREFIX):]
    if not name or "/" in name:
        return None
    return image_dir / name


def transcode_first_frame(data: bytes) -> bytes:
    """First frame of an (animated) image as a JPEG."""
    with Image.open(io.BytesIO(data)) as img:
        img.seek(0)
        frame = img.convert("RGB")
    out = io.BytesIO()
    frame.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()


def _write_bytes_atomic(path: Path, data: bytes) -> None:
    # Unique tmp per writer; two tasks materializing the same URL write the
    # same bytes, so the last rename winning is fine.
    tmp = path.with_name(f".{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
    tmp.write_bytes(data)
    tmp.replace(path)


def maybe_materialize_image(
    url: str,
    *,
    image_dir: Path,
    session: requests.Session,
    timeout: float = HTTP_TIMEOUT_S,
) -> str:
    """
    Replace animated previews with a local still frame.

    Returns:
      - url unchanged for non-gif images
      - "/mod-images/<md5>.jpg" once the still is on disk
      - url unchanged if the download or transcode fails
    """
    if not needs_materialization(url):
        return url

    filename = materialized_name(url)
    path = image_dir / filename
    if path.exists():
        return public_path(filename)

    data = fetch_bytes(url, session=session, timeout=timeout)
    if data is None:
        return url

    try:
        frame = transcode_first_frame(data)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        log.warning("failed to convert GIF preview %s: %s", url, e)
        return url

    try:
        image_dir.mkdir(parents=True, exist_ok=True)
        _write_bytes_atomic(path, frame)
    except OSError as e:
        log.warning("failed to write %s: %s", path, e)
        return url

    return public_path(filename)


def remove_orphan_images(image_dir: Path, referenced: Iterable[Optional[str]]) -> list[Path]:
    """
    Delete every file in image_dir that no mod image points at.

    Returns the removed paths.
    """
    if not image_dir.is_dir():
        return []

    keep = set()
    for image in referenced:
        if not image:
            continue
        p = local_file_for(image, image_dir)
        if p is not None:
            keep.add(p.name)

    removed: list[Path] = []
    for p in sorted(image_dir.iterdir()):
        if not p.is_file() or p.name in keep:
            continue
        try:
            p.unlink()
        except FileNotFoundError:
            continue
        removed.append(p)

    if removed:
        log.info("removed %d unused image(s) from %s", len(removed), image_dir)
    return removed
