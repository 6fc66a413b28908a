# voron_mods/storage/image_cache.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from voron_mods.models import ImageCacheEntry
from voron_mods.storage.image_store import local_file_for
from voron_mods.utils import write_json_atomic

log = logging.getLogger(__name__)

_MISS = object()


class ImageCache:
    """
    sourcePath -> last resolution outcome, persisted as JSON between runs.

    File shape:
      { "alice/cool-mod": {"image": "https://..." | null, "lastChanged": "2024-01-01" | null} }

    The change token is the upstream "Last Changed" cell. Equal tokens are
    taken to mean "README unchanged"; this is a heuristic (the cell is edited
    by hand) and not a content hash.
    """

    def __init__(self, path: Optional[Path] = None, entries: Optional[Dict[str, ImageCacheEntry]] = None):
        self.path = path
        self.entries: Dict[str, ImageCacheEntry] = dict(entries or {})

    @classmethod
    def load(cls, path: Path) -> "ImageCache":
        """Missing or unreadable cache file -> empty cache."""
        if not path.exists():
            return cls(path)

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("ignoring unreadable image cache %s: %s", path, e)
            return cls(path)

        if not isinstance(raw, dict):
            log.warning("ignoring image cache %s: expected an object", path)
            return cls(path)

        entries: Dict[str, ImageCacheEntry] = {}
        for key, value in raw.items():
            if not isinstance(value, dict):
                continue
            image = value.get("image")
            token = value.get("lastChanged")
            entries[str(key)] = ImageCacheEntry(
                image=str(image) if image else None,
                last_changed=str(token) if token is not None else None,
            )
        return cls(path, entries)

    def save(self) -> None:
        if self.path is None:
            return
        data = {
            key: {"image": entry.image, "lastChanged": entry.last_changed}
            for key, entry in sorted(self.entries.items())
        }
        write_json_atomic(self.path, data)

    def lookup(self, source_path: str, last_changed: Optional[str], image_dir: Path):
        """
        Reusable cached outcome for this draft, or the module-level miss
        sentinel (use `is_miss`).

        Reuse requires:
        - an entry for source_path
        - the draft's change token equal to the stored one (two absent
          tokens count as equal)
        - for locally materialized images, the file still on disk
        """
        entry = self.entries.get(source_path)
        if entry is None:
            return _MISS
        if entry.last_changed != last_changed:
            return _MISS

        if entry.image is None:
            return None

        local = local_file_for(entry.image, image_dir)
        if local is not None and not local.exists():
            return _MISS

        return entry.image

    def store(self, source_path: str, image: Optional[str], last_changed: Optional[str]) -> None:
        self.entries[source_path] = ImageCacheEntry(image=image, last_changed=last_changed)

    def prune(self, active_paths: Iterable[str]) -> int:
        """Drop entries for mods no longer in the table. Returns how many."""
        active = set(active_paths)
        stale = [k for k in self.entries if k not in active]
        for k in stale:
            del self.entries[k]
        return len(stale)

    def __contains__(self, source_path: str) -> bool:
        return source_path in self.entries

    def __len__(self) -> int:
        return len(self.entries)


def is_miss(value) -> bool:
    return value is _MISS
