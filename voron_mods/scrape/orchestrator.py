# voron_mods/scrape/orchestrator.py
from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import requests

from ..config import IngestSettings
from ..models import DraftMod, Mod, ModsSnapshot
from ..scrape.http import create_session, fetch_text
from ..scrape.images import fetch_preview_image
from ..scrape.table import parse_mods
from ..storage.csv_export import write_csv
from ..storage.image_cache import ImageCache, is_miss
from ..storage.image_store import maybe_materialize_image, remove_orphan_images
from ..storage.snapshot import build_snapshot, write_snapshot
from ..utils_debug import dbg

log = logging.getLogger(__name__)

ProgressCB = Callable[[int, int, str], None]


@dataclass
class IngestResult:
    snapshot: ModsSnapshot
    readme_fetches: int = 0
    cache_hits: int = 0
    images_found: int = 0
    skipped_by_deadline: int = 0
    removed_files: List[Path] = field(default_factory=list)


@dataclass
class _ImageStage:
    """Per-run bookkeeping for the image stage."""
    images: Dict[str, Optional[str]] = field(default_factory=dict)
    readme_fetches: int = 0
    cache_hits: int = 0
    skipped: int = 0


def resolve_image(
    source_path: str,
    *,
    image_dir: Path,
    session: requests.Session,
    timeout: float,
) -> Optional[str]:
    """README -> first image -> (maybe) local still frame. None = no image."""
    image = fetch_preview_image(source_path, session=session, timeout=timeout)
    if image is None:
        return None
    return maybe_materialize_image(image, image_dir=image_dir, session=session, timeout=timeout)


def _unique_sources(drafts: List[DraftMod]) -> Dict[str, Optional[str]]:
    """
    source_path -> change token, first occurrence wins.

    Rows sharing a folder are resolved once.
    """
    out: Dict[str, Optional[str]] = {}
    for d in drafts:
        if d.source_path and d.source_path not in out:
            out[d.source_path] = d.last_changed
    return out


async def add_preview_images(
    drafts: List[DraftMod],
    *,
    settings: IngestSettings,
    cache: ImageCache,
    session: requests.Session,
    progress_cb: Optional[ProgressCB] = None,
) -> _ImageStage:
    """
    Resolve one image per distinct source path.

    Cache hits are taken first; the misses are fetched in batches of
    settings.concurrency, and the next batch only starts once the current one
    is done. Each task writes only its own cache key.
    """
    stage = _ImageStage()
    sources = _unique_sources(drafts)
    pending: List[str] = []

    for source_path, token in sources.items():
        cached = cache.lookup(source_path, token, settings.image_dir)
        if is_miss(cached):
            pending.append(source_path)
            continue
        stage.images[source_path] = cached
        stage.cache_hits += 1
        dbg("cache-hit", source_path=source_path, image=cached)

    total = len(pending)
    width = max(1, settings.concurrency)
    deadline = (
        time.monotonic() + settings.image_deadline_s
        if settings.image_deadline_s is not None
        else None
    )

    loop = asyncio.get_running_loop()

    def _resolve_and_store(source_path: str) -> None:
        try:
            image = resolve_image(
                source_path,
                image_dir=settings.image_dir,
                session=session,
                timeout=settings.timeout_s,
            )
        except Exception:
            # Don't kill the run over one mod; leave its cache entry alone so
            # the next run retries it.
            log.exception("image resolution failed for %s", source_path)
            stage.images[source_path] = None
            return

        stage.images[source_path] = image
        cache.store(source_path, image, sources[source_path])
        dbg("resolved", source_path=source_path, image=image)

    with ThreadPoolExecutor(max_workers=width, thread_name_prefix="mod-image") as pool:
        for start in range(0, total, width):
            if deadline is not None and time.monotonic() > deadline:
                stage.skipped = total - start
                log.warning(
                    "image deadline of %ss reached, %d mod(s) left without a preview",
                    settings.image_deadline_s,
                    stage.skipped,
                )
                break

            batch = pending[start:start + width]
            stage.readme_fetches += len(batch)
            await asyncio.gather(
                *(loop.run_in_executor(pool, _resolve_and_store, sp) for sp in batch)
            )

            done = min(start + width, total)
            if progress_cb:
                progress_cb(done, total, f"Resolved images ({done}/{total})\n{batch[-1]}")

    return stage


def finalize_mods(drafts: List[DraftMod], images: Dict[str, Optional[str]]) -> List[Mod]:
    mods: List[Mod] = []
    for d in drafts:
        image = images.get(d.source_path) if d.source_path else None
        mods.append(Mod.from_draft(d, image=image))
    return mods


async def ingest(
    settings: IngestSettings,
    *,
    session: Optional[requests.Session] = None,
    progress_cb: Optional[ProgressCB] = None,
) -> IngestResult:
    """
    One full ingestion run.

    Raises FetchError if the upstream table can't be fetched; in that case
    nothing on disk is touched.
    """
    session = session or create_session()

    if progress_cb:
        progress_cb(0, 0, f"Fetching table\n{settings.readme_url}")
    log.info("fetching VoronUsers README from %s", settings.readme_url)
    markdown = fetch_text(
        settings.readme_url,
        session=session,
        timeout=settings.timeout_s,
        required=True,
    )

    drafts = parse_mods(markdown or "")
    log.info("parsed %d mods", len(drafts))

    cache = ImageCache.load(settings.cache_file)
    stage = _ImageStage()
    if settings.resolve_images:
        stage = await add_preview_images(
            drafts,
            settings=settings,
            cache=cache,
            session=session,
            progress_cb=progress_cb,
        )

    snapshot = build_snapshot(finalize_mods(drafts, stage.images))

    if settings.resolve_images:
        cache.prune(d.source_path for d in drafts if d.source_path)
        cache.save()

    write_snapshot(snapshot, settings.output_file)

    removed: List[Path] = []
    if settings.resolve_images:
        removed = remove_orphan_images(settings.image_dir, (m.image for m in snapshot.mods))

    if settings.csv_file is not None:
        write_csv(snapshot, settings.csv_file)

    result = IngestResult(
        snapshot=snapshot,
        readme_fetches=stage.readme_fetches,
        cache_hits=stage.cache_hits,
        images_found=sum(1 for m in snapshot.mods if m.image),
        skipped_by_deadline=stage.skipped,
        removed_files=removed,
    )

    if progress_cb:
        progress_cb(
            len(snapshot.mods),
            len(snapshot.mods),
            f"Done ✅ {len(snapshot.mods)} mods, {result.images_found} with a preview\n"
            f"Wrote: {settings.output_file}",
        )
    return result


def run_ingest(
    settings: IngestSettings,
    *,
    session: Optional[requests.Session] = None,
    progress_cb: Optional[ProgressCB] = None,
) -> IngestResult:
    """Blocking wrapper around ingest() for the CLI, tests and UI worker thread."""
    return asyncio.run(ingest(settings, session=session, progress_cb=progress_cb))
