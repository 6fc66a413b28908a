# voron_mods/storage/csv_export.py
from __future__ import annotations

from pathlib import Path

import pandas as pd

from voron_mods.config import CSV_COLUMNS
from voron_mods.models import ModsSnapshot


def snapshot_frame(snapshot: ModsSnapshot) -> pd.DataFrame:
    """One row per mod, compatibility flattened into one column per family."""
    rows = []
    for mod in snapshot.mods:
        row = {
            "creator": mod.creator,
            "title": mod.title,
            "description": mod.description,
            "link": mod.link,
            "last_changed": mod.last_changed or "",
            "image": mod.image or "",
            "repo_path": mod.repo_path or "",
            "readme_url": mod.readme_url or "",
        }
        row.update(mod.compatibility.to_dict())
        rows.append(row)

    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def write_csv(snapshot: ModsSnapshot, csv_file: Path) -> None:
    """
    Write the snapshot as CSV in a stable column order, snapshot (title) row
    order.
    """
    csv_file.parent.mkdir(parents=True, exist_ok=True)
    snapshot_frame(snapshot).to_csv(csv_file, index=False)
