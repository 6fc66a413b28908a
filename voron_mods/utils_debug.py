# voron_mods/utils_debug.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .utils import _now_iso_z

_TRACE = os.getenv("VORON_MODS_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}
_TRACE_PATH = os.getenv("VORON_MODS_DEBUG_LOG", "").strip()

_trace_log = logging.getLogger("voron_mods.trace")

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # urllib3 is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def dbg(tag: str, **kv: Any) -> None:
    """
    Per-mod trace (cache hits, resolve outcomes).

    Off unless VORON_MODS_DEBUG is set. With VORON_MODS_DEBUG_LOG the lines
    are appended to that file, otherwise they go to the "voron_mods.trace"
    logger at WARNING so they show without --verbose.
    """
    if not _TRACE:
        return

    fields = " ".join(f"{k}={v!r}" for k, v in kv.items())
    line = f"[{tag}] {fields}".rstrip()

    if _TRACE_PATH:
        try:
            p = Path(_TRACE_PATH)
            p.parent.mkdir(parents=True, exist_ok=True)
            with p.open("a", encoding="utf-8") as f:
                f.write(f"{_now_iso_z()} {line}\n")
            return
        except OSError:
            pass

    _trace_log.warning(line)
