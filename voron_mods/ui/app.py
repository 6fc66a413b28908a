# voron_mods/ui/app.py
from __future__ import annotations

from typing import Any, Optional
import asyncio
import webbrowser

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.reactive import reactive
from textual.widgets import Header, Footer, DataTable, Static
from textual.binding import Binding

from voron_mods.config import IngestSettings, SUPPORTED
from voron_mods.models import Mod
from voron_mods.scrape.http import FetchError
from voron_mods.scrape.orchestrator import IngestResult, run_ingest
from voron_mods.storage.snapshot import load_snapshot


FAMILY_LABELS = {
    "v0": "V0",
    "v0_1": "V0.1",
    "v1_8": "V1.8",
    "v2_4": "V2.4",
    "trident": "Trident",
}


# ----------------------------
# Small UI widgets
# ----------------------------

class StatCard(Static):
    def __init__(self, label: str, icon: str = ""):
        super().__init__()
        self.label = label
        self.icon = icon

    def update_value(self, v: str) -> None:
        self.update(f"{self.icon} {self.label}\n[b]{v}[/b]")


class Details(Static):
    can_focus = True

    def show_mod(self, mod: Optional[Mod]) -> None:
        if mod is None:
            self.update("Select a row…")
            return

        flags = mod.compatibility.to_dict()
        printers = ", ".join(FAMILY_LABELS[k] for k, v in flags.items() if v == SUPPORTED) or "-"

        lines = [
            f"[b]{mod.title}[/b]",
            f"by {mod.creator}",
            "",
            mod.description,
            "",
            f"Printers: {printers}",
            f"Last changed: {mod.last_changed or 'N/A'}",
            f"Link: {mod.link}",
            f"Repo path: {mod.repo_path or '-'}",
            f"README: {mod.readme_url or '-'}",
            f"Preview: {mod.image or 'none'}",
        ]
        self.update("\n".join(lines))
        self.scroll_home()


# ----------------------------
# Main App
# ----------------------------

class IngestApp(App):
    """Runs an ingestion and lets the operator inspect the resulting snapshot."""

    CSS = """
    Screen {
        background: #101417;
        color: #e8eef2;
    }

    #stats_row {
        height: 4;
        margin: 1 1 1 1;
    }

    StatCard {
        width: 1fr;
        border: tall #2d3a45;
        padding: 0 2;
        background: #0b0f12;
    }

    #left_pane {
        width: 2fr;
        margin-right: 1;
    }

    #run_status {
        height: 4;
        border: tall #2d3a45;
        padding: 0 1;
        margin-bottom: 1;
        background: #0b0f12;
    }

    #mod_table {
        height: 1fr;
        border: tall #2d3a45;
    }

    #details_box {
        width: 1fr;
        border: tall #2d3a45;
        padding: 0 1;
        background: #0b0f12;
    }

    #mod_details {
        height: 100%;
        overflow-y: auto;
    }

    DataTable {
        height: 100%;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Re-run"),
        Binding("a", "filter_all", "All"),
        Binding("i", "filter_with_image", "With image"),
        Binding("m", "filter_missing", "Missing image"),
        Binding("s", "toggle_sort", "Sort"),
        Binding("enter", "focus_details", "Details"),
        Binding("escape", "focus_list", "List"),
        Binding("O", "open_url", "Open"),
    ]

    filter_mode = reactive("all")
    sort_mode = reactive("title")

    def __init__(self, *, settings: IngestSettings):
        super().__init__()
        self.settings = settings
        self.mods: list[Mod] = []
        self.row_lookup: dict[str, Mod] = {}
        self.last_result: Optional[IngestResult] = None

    # ----------------------------

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="stats_row"):
            self.card_total = StatCard("Mods", "📦")
            self.card_images = StatCard("With image", "🖼")
            self.card_cached = StatCard("Cached", "💾")
            self.card_fetched = StatCard("Fetched", "🌐")
            self.card_missing = StatCard("No image", "⚠️")
            yield self.card_total
            yield self.card_images
            yield self.card_cached
            yield self.card_fetched
            yield self.card_missing

        with Horizontal():
            with Container(id="left_pane"):
                self.run_status = Details("Ready.", id="run_status")
                yield self.run_status

                self.table = DataTable(zebra_stripes=True, id="mod_table")
                yield self.table

            with Container(id="details_box"):
                self.mod_details = Details("Select a row…", id="mod_details")
                yield self.mod_details

        yield Footer()

    # ----------------------------

    def on_mount(self) -> None:
        self.table.add_column("", width=2)
        self.table.add_column("Title")
        self.table.add_column("Creator")

        self.table.cursor_type = "row"
        self.table.focus()

        self.reload()
        self.call_after_refresh(self.start_ingest)

    # ----------------------------

    def reload(self) -> None:
        snapshot = load_snapshot(self.settings.output_file)
        self.mods = list(snapshot.mods) if snapshot else []
        self.apply_view()

    def apply_view(self) -> None:
        self.table.clear()
        self.row_lookup.clear()

        mods = list(self.mods)

        if self.filter_mode == "with_image":
            mods = [m for m in mods if m.image]
        elif self.filter_mode == "missing":
            mods = [m for m in mods if not m.image]

        if self.sort_mode == "creator":
            mods.sort(key=lambda m: (m.creator.casefold(), m.title.casefold()))
        # "title" keeps snapshot order, which is already by title

        for i, mod in enumerate(mods):
            key = f"{i}:{mod.link}"
            self.row_lookup[key] = mod
            self.table.add_row("🖼" if mod.image else "·", mod.title, mod.creator, key=key)

        if self.table.row_count:
            self.table.cursor_coordinate = (0, 0)

        with_image = sum(1 for m in self.mods if m.image)
        self.card_total.update_value(str(len(self.mods)))
        self.card_images.update_value(str(with_image))
        self.card_missing.update_value(str(len(self.mods) - with_image))
        res = self.last_result
        self.card_cached.update_value(str(res.cache_hits) if res else "-")
        self.card_fetched.update_value(str(res.readme_fetches) if res else "-")

    # ----------------------------
    # Actions
    # ----------------------------

    def action_focus_details(self) -> None:
        self.mod_details.focus()

    def action_focus_list(self) -> None:
        self.table.focus()

    def action_open_url(self) -> None:
        if not self.table.row_count:
            return
        row_key = self.table.coordinate_to_cell_key(self.table.cursor_coordinate).row_key
        mod = self.row_lookup.get(row_key.value or "")
        if mod and mod.link:
            webbrowser.open(mod.link)

    async def action_refresh(self) -> None:
        self.start_ingest()

    def start_ingest(self) -> None:
        self.run_worker(self._ingest_worker(), exclusive=True)

    async def _ingest_worker(self) -> None:
        loop = asyncio.get_running_loop()
        self.run_status.update("[b]Ingesting…[/b]")

        def progress_cb(i: int, n: int, msg: str) -> None:
            pct = int((i / n) * 100) if n else 0
            self.call_from_thread(self.run_status.update, f"[b]Ingesting…[/b] {pct}%\n{msg}")

        def _do() -> IngestResult:
            return run_ingest(self.settings, progress_cb=progress_cb)

        try:
            self.last_result = await loop.run_in_executor(None, _do)
        except FetchError as e:
            self.run_status.update(f"❌ {e}\nPrevious snapshot kept.")
            return

        self.reload()
        res = self.last_result
        self.run_status.update(
            f"✅ Ingest finished. {len(res.snapshot.mods)} mods, "
            f"{len(res.removed_files)} unused image(s) removed."
        )

    # ----------------------------

    def action_filter_all(self) -> None:
        self.filter_mode = "all"
        self.apply_view()

    def action_filter_with_image(self) -> None:
        self.filter_mode = "with_image"
        self.apply_view()

    def action_filter_missing(self) -> None:
        self.filter_mode = "missing"
        self.apply_view()

    def action_toggle_sort(self) -> None:
        self.sort_mode = "creator" if self.sort_mode == "title" else "title"
        self.apply_view()

    def on_data_table_row_highlighted(self, event: Any) -> None:
        key = event.row_key.value if event.row_key else ""
        self.mod_details.show_mod(self.row_lookup.get(key))
