"""Per-page decoration laid out around the continuous content.

Page backgrounds, headers, footers and the gaps between pages live in paged
space, where pages are stacked with a fixed gap. Break markers live in flow
space, on top of the continuous content column. Both are derived from the
same PaginationState so they stay in registration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import PageConstants
from .geometry import PageGeometry
from .model import HeaderFooterConfig, PageBreak, PaginationState


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, horizontally centred in its column."""
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class TextOverlay:
    """Centred line of text at a fixed vertical position.

    Attributes:
        text: Text to draw
        top: Offset of the text box top in paged space (headers)
        bottom: Offset of the text box bottom in paged space (footers)
    """
    text: str
    top: Optional[float] = None
    bottom: Optional[float] = None


@dataclass(frozen=True)
class PageChrome:
    """Decoration for one page."""
    index: int
    background: Rect
    header: Optional[TextOverlay]
    footer: Optional[TextOverlay]

    @property
    def page_number(self) -> int:
        return self.index + 1


@dataclass(frozen=True)
class BreakMarker:
    """Dashed line drawn over the content where a page ends."""
    page_number: int
    top: float
    label: str


@dataclass(frozen=True)
class ChromeLayer:
    """Complete decoration for the current pagination state."""
    pages: Tuple[PageChrome, ...]
    gaps: Tuple[Rect, ...]
    markers: Tuple[BreakMarker, ...]
    total_height: float


def footer_text(config: HeaderFooterConfig, page_index: int) -> str:
    """Footer text for a 0-based page index.

    A footer template wins over automatic page numbers. A template without
    the placeholder is shown unchanged.
    """
    page_number = page_index + 1
    if config.footer_template:
        return config.footer_template.replace(
            PageConstants.PAGE_PLACEHOLDER, str(page_number), 1
        )
    if config.show_page_numbers:
        return PageConstants.PAGE_NUMBER_FORMAT.format(page_number)
    return ""


class PageChromeRenderer:
    """Lays out backgrounds, headers, footers and break markers."""

    def __init__(self, geometry: PageGeometry,
                 gap_px: float = PageConstants.PAGE_GAP_PX,
                 header_offset_px: float = PageConstants.HEADER_OFFSET_PX,
                 footer_offset_px: float = PageConstants.FOOTER_OFFSET_PX):
        self.geometry = geometry
        self.gap_px = gap_px
        self.header_offset_px = header_offset_px
        self.footer_offset_px = footer_offset_px

    def render(self, state: PaginationState, config: HeaderFooterConfig) -> ChromeLayer:
        """Build the decoration layer for a pagination state.

        Args:
            state: Current pagination.
            config: Header and footer settings, read as-is.

        Returns:
            Immutable layer with one PageChrome per page.
        """
        total_pages = max(1, state.total_pages)
        pages = tuple(self.render_page(i, config) for i in range(total_pages))
        gaps = tuple(self._gap(i) for i in range(total_pages - 1))
        markers = tuple(self.marker_for(b) for b in state.page_breaks)
        return ChromeLayer(
            pages=pages,
            gaps=gaps,
            markers=markers,
            total_height=self.geometry.paged_height(total_pages, self.gap_px),
        )

    def render_page(self, index: int, config: HeaderFooterConfig) -> PageChrome:
        geometry = self.geometry
        top = geometry.page_top(index, self.gap_px)
        background = Rect(top, geometry.content_width_px, geometry.content_height_px)

        header = None
        if config.header_text:
            header = TextOverlay(config.header_text, top=top + self.header_offset_px)

        footer = None
        text = footer_text(config, index)
        if text:
            footer = TextOverlay(text, bottom=background.bottom - self.footer_offset_px)

        return PageChrome(index=index, background=background, header=header, footer=footer)

    def marker_for(self, page_break: PageBreak) -> BreakMarker:
        # Flow space: the content column starts below the top margin
        return BreakMarker(
            page_number=page_break.page_number,
            top=page_break.height_from_top + self.geometry.margin_px,
            label=PageConstants.PAGE_NUMBER_FORMAT.format(page_break.page_number),
        )

    def _gap(self, index: int) -> Rect:
        # Strip between page `index` and page `index + 1`
        top = self.geometry.page_top(index + 1, self.gap_px) - self.gap_px
        return Rect(top, self.geometry.content_width_px, self.gap_px)
