# voron_mods/scrape/table.py
from __future__ import annotations

import enum
import re
from typing import Iterable, List, Optional, Tuple

from voron_mods.compatibility import build_compatibility
from voron_mods.config import MOD_BASE_URL
from voron_mods.models import DraftMod
from voron_mods.utils import is_http_url, sanitize_description, strip_dot_slash

HEADER_PREFIX = "| Creator"
SEPARATOR_PREFIX = "| ---"
MIN_CELLS = 5

_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")


class _State(enum.Enum):
    OUTSIDE = "outside"
    IN_TABLE = "in_table"
    AFTER = "after"


def extract_link(cell: str) -> Tuple[str, str, Optional[str]]:
    """
    Parse the title cell.

    Returns:
      (title, link, source_path)

    - "[Cool Mod](./alice/cool)"        -> ("Cool Mod", MOD_BASE_URL/alice/cool, "alice/cool")
    - "[Ext](https://example.com/x)"    -> ("Ext", "https://example.com/x", None)
    - "plain text" or "[T]()"           -> (cell, MOD_BASE_URL, None)
    """
    m = _LINK_RE.search(cell)
    if not m:
        return cell, MOD_BASE_URL, None

    title, target = m.group(1).strip(), strip_dot_slash(m.group(2).strip())
    if is_http_url(target):
        return title, target, None
    return title, f"{MOD_BASE_URL}/{target}", target


def split_cells(line: str) -> List[str]:
    """
    "| a | b \\| c | d |" -> ["a", "b | c", "d"]

    Only the empty boundary cells produced by the outer pipes are dropped.
    """
    cells = _CELL_SPLIT_RE.split(line.strip())
    if cells and not cells[0].strip():
        cells = cells[1:]
    if cells and not cells[-1].strip():
        cells = cells[:-1]
    return [c.strip().replace("\\|", "|") for c in cells]


def parse_row(cells: List[str], last_creator: str) -> Tuple[DraftMod, str]:
    """
    Build one draft from a >= 5 cell row.

    last_creator is the running "creator of the previous rows" value; a blank
    creator cell inherits it (merged cells in the upstream table). Returns
    the draft and the updated running value.
    """
    creator, title_cell, description, compat_cell, last_changed = cells[:MIN_CELLS]

    if creator:
        last_creator = creator
    else:
        creator = last_creator

    title, link, source_path = extract_link(title_cell)

    draft = DraftMod(
        creator=creator,
        title=title,
        description=sanitize_description(description),
        link=link,
        compatibility=build_compatibility(compat_cell),
        last_changed=last_changed or None,
        source_path=source_path,
    )
    return draft, last_creator


def iter_table_rows(lines: Iterable[str]) -> Iterable[List[str]]:
    """
    Yield the cell lists of the first "| Creator ..." table's body rows.

    outside -> in_table on the header line; in_table -> after on the first
    non-empty line that doesn't start with "|". Separator and blank lines
    inside the table are skipped.
    """
    state = _State.OUTSIDE

    for raw in lines:
        line = raw.strip()

        if state is _State.OUTSIDE:
            if line.startswith(HEADER_PREFIX):
                state = _State.IN_TABLE
            continue

        if state is _State.AFTER:
            break

        if not line or line.startswith(SEPARATOR_PREFIX):
            continue

        if not line.startswith("|"):
            state = _State.AFTER
            continue

        yield split_cells(line)


def parse_mods(markdown: str) -> List[DraftMod]:
    """Parse the upstream printer_mods README table into drafts, in table order."""
    drafts: List[DraftMod] = []
    last_creator = ""

    for cells in iter_table_rows(markdown.splitlines()):
        if len(cells) < MIN_CELLS:
            continue  # malformed row
        draft, last_creator = parse_row(cells, last_creator)
        drafts.append(draft)

    return drafts
