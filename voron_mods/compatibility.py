# voron_mods/compatibility.py
from __future__ import annotations

import re

from .config import PRINTER_SYNONYMS, SUPPORTED
from .models import Compatibility


def split_tokens(cell: str) -> list[str]:
    """Split a compatibility cell on commas and slashes, dropping empties."""
    tokens = (t.strip() for t in re.split(r"[,/]", cell or ""))
    return [t for t in tokens if t]


def build_compatibility(cell: str) -> Compatibility:
    """
    Map a free-text compatibility cell to one flag per printer family.

    Rules:
    - a family is supported if any of its synonyms appears verbatim
      (case-sensitive) among the cell's tokens
    - every other family is unsupported
    - a single token may mark several families ("V0.1" -> v0 and v0_1)
    """
    tokens = set(split_tokens(cell))

    flags: dict[str, str] = {}
    for family, synonyms in PRINTER_SYNONYMS.items():
        if any(s in tokens for s in synonyms):
            flags[family] = SUPPORTED

    return Compatibility(**flags)
