from __future__ import annotations

import io
from pathlib import Path

import pytest
import requests
from PIL import Image

from voron_mods.config import IngestSettings

TABLE_URL = "https://example.test/printer_mods/README.md"

SAMPLE_TABLE = """\
# Printer mods

Community mods for Voron printers. Pipes in prose | are not table rows.

| Creator | Mod | Description | Printer compatibility | Last Changed |
| --- | --- | --- | --- | --- |
| Alice | [Cool Mod](./cool-mod) | A nice mod. | V2.4, Trident | 2024-01-01 |
|  | [Another](./another) | Second\\nline   here | V0 | 2024-02-02 |
| Bob | [Broken](./broken) | only four cells | V1.8 |
| Bob | [External](https://example.com/ext) | Lives elsewhere | V0.1 / V1.8 |  |

Footer after the table.

| Creator | Mod | Description | Printer compatibility | Last Changed |
| Mallory | [Ignored](./ignored) | second table | V0 | 2024-05-05 |
"""


def gif_bytes() -> bytes:
    buf = io.BytesIO()
    frames = [Image.new("RGB", (8, 8), color) for color in ((255, 0, 0), (0, 0, 255))]
    frames[0].save(buf, format="GIF", save_all=True, append_images=frames[1:], duration=100, loop=0)
    return buf.getvalue()


@pytest.fixture
def session() -> requests.Session:
    return requests.Session()


@pytest.fixture
def settings(tmp_path: Path) -> IngestSettings:
    return IngestSettings(
        readme_url=TABLE_URL,
        output_file=tmp_path / "public" / "mods.json",
        image_dir=tmp_path / "public" / "mod-images",
        cache_file=tmp_path / ".cache" / "image-cache.json",
        concurrency=2,
        timeout_s=5.0,
    )
