# voron_mods/config.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# -----------------------------
# Upstream endpoints
# -----------------------------

README_URL_ENV = "VORON_USERS_README_URL"

DEFAULT_README_URL = (
    "https://raw.githubusercontent.com/VoronDesign/VoronUsers/master/printer_mods/README.md"
)

MOD_BASE_URL = "https://github.com/VoronDesign/VoronUsers/tree/master/printer_mods"
RAW_BASE_URL = "https://raw.githubusercontent.com/VoronDesign/VoronUsers/master/printer_mods"
README_BLOB_BASE_URL = "https://github.com/VoronDesign/VoronUsers/blob/master/printer_mods"
REPO_PATH_PREFIX = "printer_mods"
README_FILENAME = "README.md"


# -----------------------------
# Defaults (CLI)
# -----------------------------

DEFAULT_OUTPUT_FILE = "public/mods.json"
DEFAULT_IMAGE_DIR = "public/mod-images"
DEFAULT_CACHE_FILE = ".cache/image-cache.json"

# Public URL prefix the presentation layer serves DEFAULT_IMAGE_DIR under
PUBLIC_IMAGE_PREFIX = "/mod-images/"


# -----------------------------
# HTTP / scraping
# -----------------------------

UA = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

HTTP_TIMEOUT_S = 30.0

# Batch width for README/image fetches (batch barrier between batches)
IMAGE_FETCH_CONCURRENCY = 8


# -----------------------------
# Images
# -----------------------------

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".svg")

# Only animated sources are materialized locally
MATERIALIZE_EXTENSIONS = (".gif",)
MATERIALIZED_SUFFIX = ".jpg"
JPEG_QUALITY = 85


# -----------------------------
# Compatibility
# -----------------------------

SUPPORTED = "✓"
UNSUPPORTED = "✗"
UNKNOWN = "?"

# Tokens are matched verbatim (case-sensitive). "V0.1" is listed under both
# v0 and v0_1: the V0.1 is a revision of the V0.
PRINTER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "v0": ("V0", "V0.0", "V0.1", "V0.2", "V0.2r1"),
    "v0_1": ("V0.1",),
    "v1_8": ("V1.8", "V1"),
    "v2_4": ("V2.4", "V2.4r2"),
    "trident": ("VT", "Trident", "Voron Trident"),
}


# -----------------------------
# CSV schema
# -----------------------------

CSV_COLUMNS = [
    "creator",
    "title",
    "description",
    "link",
    "v0",
    "v0_1",
    "v1_8",
    "v2_4",
    "trident",
    "last_changed",
    "image",
    "repo_path",
    "readme_url",
]


@dataclass(frozen=True)
class IngestSettings:
    """
    Everything a single ingestion run needs.

    Built by the CLI (or the Textual monitor) from arguments + environment.
    """
    readme_url: str = DEFAULT_README_URL
    output_file: Path = Path(DEFAULT_OUTPUT_FILE)
    image_dir: Path = Path(DEFAULT_IMAGE_DIR)
    cache_file: Path = Path(DEFAULT_CACHE_FILE)
    csv_file: Optional[Path] = None
    concurrency: int = IMAGE_FETCH_CONCURRENCY
    timeout_s: float = HTTP_TIMEOUT_S
    image_deadline_s: Optional[float] = None  # None = no overall deadline
    resolve_images: bool = True
