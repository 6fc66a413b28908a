# voron_mods/cli.py
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from voron_mods.config import (
    DEFAULT_CACHE_FILE,
    DEFAULT_IMAGE_DIR,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_README_URL,
    HTTP_TIMEOUT_S,
    IMAGE_FETCH_CONCURRENCY,
    README_URL_ENV,
    IngestSettings,
)
from voron_mods.scrape.http import FetchError
from voron_mods.scrape.orchestrator import run_ingest
from voron_mods.utils_debug import configure_logging

log = logging.getLogger("voron_mods.cli")


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return n


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Build the Voron mods catalog snapshot (mods.json) from the VoronUsers README table."
    )
    p.add_argument(
        "--readme-url",
        default=os.environ.get(README_URL_ENV, "") or DEFAULT_README_URL,
        help=f"Upstream printer_mods README (env: {README_URL_ENV})",
    )
    p.add_argument("--output", default=DEFAULT_OUTPUT_FILE, help=f"Snapshot output (default: {DEFAULT_OUTPUT_FILE})")
    p.add_argument("--image-dir", default=DEFAULT_IMAGE_DIR, help=f"Materialized previews (default: {DEFAULT_IMAGE_DIR})")
    p.add_argument("--cache", default=DEFAULT_CACHE_FILE, help=f"Image cache file (default: {DEFAULT_CACHE_FILE})")
    p.add_argument("--csv", default="", help="Also export the snapshot as CSV to this path")
    p.add_argument(
        "--concurrency",
        type=_positive_int,
        default=IMAGE_FETCH_CONCURRENCY,
        help=f"README/image fetches per batch (default: {IMAGE_FETCH_CONCURRENCY})",
    )
    p.add_argument("--timeout", type=float, default=HTTP_TIMEOUT_S, help="Per-request timeout in seconds")
    p.add_argument(
        "--image-deadline",
        type=float,
        default=None,
        help="Stop starting new image batches after this many seconds",
    )
    p.add_argument("--no-images", action="store_true", help="Skip preview image resolution")
    p.add_argument("--ui", action="store_true", help="Launch the Textual run monitor")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> IngestSettings:
    return IngestSettings(
        readme_url=args.readme_url.strip(),
        output_file=Path(args.output).expanduser().resolve(),
        image_dir=Path(args.image_dir).expanduser().resolve(),
        cache_file=Path(args.cache).expanduser().resolve(),
        csv_file=Path(args.csv).expanduser().resolve() if args.csv else None,
        concurrency=args.concurrency,
        timeout_s=args.timeout,
        image_deadline_s=args.image_deadline,
        resolve_images=not args.no_images,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    settings = settings_from_args(args)

    if args.ui:
        # UI mode
        from voron_mods.ui.app import IngestApp

        IngestApp(settings=settings).run()
        return 0

    try:
        result = run_ingest(settings)
    except FetchError as e:
        log.error("Failed to parse README: %s", e)
        return 1

    print(
        f"Wrote {len(result.snapshot.mods)} mods to {settings.output_file} "
        f"({result.images_found} with preview, {result.cache_hits} cached, "
        f"{result.readme_fetches} fetched, {len(result.removed_files)} images removed)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
