# voron_mods/storage/snapshot.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from voron_mods.models import Mod, ModsSnapshot
from voron_mods.utils import _now_iso_z, write_json_atomic

log = logging.getLogger(__name__)


def title_sort_key(mod: Mod) -> tuple[str, str, str]:
    # casefold for case-insensitive order; raw title + link keep ties stable
    return (mod.title.casefold(), mod.title, mod.link)


def build_snapshot(mods: Iterable[Mod], *, now: Optional[str] = None) -> ModsSnapshot:
    """
    Mods in title order, stamped with now (UTC) unless given.

    The order is case-insensitive (casefold) but not locale-collated:
    accented titles sort by code point, not as localeCompare would.
    """
    return ModsSnapshot(
        mods=sorted(mods, key=title_sort_key),
        last_updated=now or _now_iso_z(),
    )


def write_snapshot(snapshot: ModsSnapshot, path: Path) -> None:
    """Replace the snapshot at path in one rename."""
    write_json_atomic(path, snapshot.to_dict())
    log.info("wrote %d mods to %s", len(snapshot.mods), path)


def load_snapshot(path: Path) -> Optional[ModsSnapshot]:
    """Previously written snapshot, or None if absent / unreadable."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("unreadable snapshot %s: %s", path, e)
        return None

    mods = [Mod.from_dict(m) for m in data.get("mods") or [] if isinstance(m, dict)]
    return ModsSnapshot(mods=mods, last_updated=str(data.get("lastUpdated", "")))
