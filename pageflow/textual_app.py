"""Textual host application for the pagination engine.

A plain-text editor on the left, and on the right the live page count,
page dimensions, header/footer settings and a summary of every page's
chrome. Pagination follows the text through the debounced engine; export
writes the paginated PDF.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import List, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.reactive import reactive
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Checkbox, Footer, Header, Input, Static, TextArea

from .chrome import ChromeLayer, PageChromeRenderer
from .constants import PageConstants
from .errors import ExportError
from .export import ExportPipeline
from .files import save_text
from .geometry import PageGeometry
from .model import PaginationState
from .pagination import PaginationEngine
from .raster import PlainTextSurface
from .scheduler import Scheduler, TextualScheduler
from .settings_persistence import SettingsPersistence, get_persistence

logger = logging.getLogger(__name__)

TEST_PARAGRAPH = "Lorem ipsum dolor sit amet, consectetur adipiscing elit."
TEST_PARAGRAPH_COUNT = 100


def describe_layer(layer: ChromeLayer) -> List[str]:
    """One summary line per page and per break marker."""
    lines = []
    for page in layer.pages:
        parts = [f"Page {page.page_number} @ {page.background.top:g}px"]
        if page.header:
            parts.append(f"header: {page.header.text}")
        if page.footer:
            parts.append(f"footer: {page.footer.text}")
        lines.append(" | ".join(parts))
    for marker in layer.markers:
        lines.append(f"--- {marker.label} ends at {marker.top:g}px")
    return lines


def describe_geometry(geometry: PageGeometry) -> List[str]:
    dpi = geometry.dpi
    content_w, content_h = geometry.content_size_inches()
    return [
        f'Size: {geometry.page_width_px / dpi:g}" x {geometry.page_height_px / dpi:g}"',
        f'Margins: {geometry.margin_px / dpi:g}" all sides',
        f'Content: {content_w:g}" x {content_h:g}"',
    ]


def export_path_for(filename: Optional[str]) -> str:
    if filename:
        return str(Path(filename).with_suffix(".pdf"))
    return PageConstants.DEFAULT_EXPORT_FILENAME


class PageflowApp(App):
    """Plain-text editor with live pagination and PDF export."""

    CSS = """
    TextArea {
        width: 1fr;
        border: none;
    }
    #sidebar {
        width: 48;
        padding: 0 1;
        background: $panel;
    }
    #page-count {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+s", "save", "Save"),
        # The editor binds ctrl+e to line end
        Binding("ctrl+e", "export", "Export PDF", priority=True),
        Binding("ctrl+t", "insert_test_content", "Test content"),
    ]

    total_pages = reactive(1, init=False)

    def __init__(self, filename: Optional[str] = None,
                 geometry: Optional[PageGeometry] = None,
                 persistence: Optional[SettingsPersistence] = None,
                 scheduler: Optional[Scheduler] = None):
        super().__init__()
        self.filename = filename
        self.geometry = geometry or PageGeometry.letter()
        self.persistence = persistence or get_persistence()
        self.header_footer = self.persistence.load_header_footer(filename)
        self.surface = PlainTextSurface(self.geometry)
        self.renderer = PageChromeRenderer(self.geometry)
        self.pipeline = ExportPipeline(self.geometry)
        self._scheduler = scheduler
        self.engine: Optional[PaginationEngine] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            yield TextArea(id="editor")
            with VerticalScroll(id="sidebar"):
                yield Static("Total Pages: 1", id="page-count")
                yield Static("\n".join(describe_geometry(self.geometry)), id="dimensions")
                yield Input(value=self.header_footer.header_text, placeholder="Header text",
                            id="header-input")
                yield Input(value=self.header_footer.footer_template,
                            placeholder="Footer text (use {page} for page numbers)",
                            id="footer-input")
                yield Checkbox("Show page numbers", value=self.header_footer.show_page_numbers,
                               id="show-page-numbers")
                yield Static("", id="pages", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        scheduler = self._scheduler or TextualScheduler(self)
        self.engine = PaginationEngine(self.geometry, self.surface, scheduler)
        self.engine.subscribe(self._on_pagination)

        if self.filename:
            self._load_file(self.filename)
        self.engine.start()
        self.query_one("#editor", TextArea).focus()

    def on_unmount(self) -> None:
        if self.engine is not None:
            self.engine.close()

    def _load_file(self, filename: str) -> None:
        try:
            text = Path(filename).read_text(encoding="utf-8")
        except FileNotFoundError:
            self.sub_title = f"New file: {filename}"
            return
        except (OSError, UnicodeDecodeError) as e:
            self.notify(f"Error loading file: {e}", severity="error")
            return
        self.query_one("#editor", TextArea).load_text(text)
        self.surface.set_text(text)
        self.sub_title = f"Editing: {filename}"

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self.surface.set_text(event.text_area.text)
        if self.engine is not None:
            self.engine.on_content_changed()

    def on_resize(self, event: events.Resize) -> None:
        if self.engine is not None:
            self.engine.on_size_changed()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "header-input":
            self._update_config(header_text=event.value)
        elif event.input.id == "footer-input":
            self._update_config(footer_template=event.value)

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        if event.checkbox.id == "show-page-numbers":
            self._update_config(show_page_numbers=event.value)

    def _update_config(self, **changes) -> None:
        config = dataclasses.replace(self.header_footer, **changes)
        if config == self.header_footer:
            return
        self.header_footer = config
        self.persistence.save_header_footer(self.filename, config)
        if self.engine is not None:
            self._refresh_sidebar(self.engine.state)

    def _on_pagination(self, state: PaginationState) -> None:
        self._refresh_sidebar(state)

    def _refresh_sidebar(self, state: PaginationState) -> None:
        layer = self.renderer.render(state, self.header_footer)
        self.total_pages = state.total_pages
        self.query_one("#pages", Static).update("\n".join(describe_layer(layer)))

    def watch_total_pages(self, total_pages: int) -> None:
        self.query_one("#page-count", Static).update(f"Total Pages: {total_pages}")

    def action_save(self) -> None:
        """Save the editor text to the open file."""
        if not self.filename:
            self.notify("No filename set", severity="warning")
            return
        text = self.query_one("#editor", TextArea).text
        try:
            save_text(self.filename, text)
        except OSError as e:
            logger.warning(f"Save failed: {e}")
            self.notify(f"Error saving: {e}", severity="error")
            return
        self.sub_title = f"Editing: {self.filename}"
        self.notify(f"Saved to {self.filename}")

    def action_insert_test_content(self) -> None:
        text = "\n".join([TEST_PARAGRAPH] * TEST_PARAGRAPH_COUNT)
        self.query_one("#editor", TextArea).load_text(text)
        self.surface.set_text(text)
        if self.engine is not None:
            self.engine.on_content_changed()

    async def action_export(self) -> None:
        self.run_worker(self._export(), group="export")

    async def _export(self) -> None:
        path = export_path_for(self.filename)
        try:
            result = await self.pipeline.export(self.surface, path)
        except ExportError as e:
            logger.warning(f"Export failed: {e}")
            self.notify(f"Export failed: {e}", severity="error")
            return
        self.notify(f"Exported {result.page_count} page(s) to {result.path}")
