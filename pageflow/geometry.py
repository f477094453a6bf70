"""Page geometry and coordinate mapping for the pageflow engine.

This module defines the physical page model (size, margins, resolution) and
the mapping between the two coordinate systems the engine works in:

- flow space: offsets within the single continuous column of content,
- paged space: offsets across stacked page backgrounds separated by gaps.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .constants import PageConstants


class GeometryError(ValueError):
    """Exception raised when a page configuration has no usable content area."""


@dataclass(frozen=True)
class PageGeometry:
    """Derived pixel dimensions of one physical page.

    Attributes:
        page_width_px: Full page width in device pixels
        page_height_px: Full page height in device pixels
        margin_px: Uniform margin in device pixels
        dpi: Device pixels per inch
    """
    page_width_px: float
    page_height_px: float
    margin_px: float
    dpi: float

    def __post_init__(self) -> None:
        if self.dpi <= 0:
            raise GeometryError(f"DPI must be positive, got {self.dpi}")
        if self.page_width_px <= 0 or self.page_height_px <= 0:
            raise GeometryError(
                f"Page size must be positive, got {self.page_width_px}x{self.page_height_px}"
            )
        if self.margin_px < 0:
            raise GeometryError(f"Margin must not be negative, got {self.margin_px}")
        if self.content_width_px <= 0 or self.content_height_px <= 0:
            raise GeometryError(
                f"Margins of {self.margin_px}px leave no content area on a "
                f"{self.page_width_px}x{self.page_height_px}px page"
            )

    @classmethod
    def from_inches(cls, page_width_in: float, page_height_in: float,
                    margin_in: float, dpi: float) -> 'PageGeometry':
        """Create a geometry from physical page measurements.

        Args:
            page_width_in: Page width in inches.
            page_height_in: Page height in inches.
            margin_in: Uniform margin in inches.
            dpi: Device pixels per inch.

        Returns:
            The derived geometry.

        Raises:
            GeometryError: If the configuration leaves no content area.
        """
        return cls(
            page_width_px=page_width_in * dpi,
            page_height_px=page_height_in * dpi,
            margin_px=margin_in * dpi,
            dpi=dpi,
        )

    @classmethod
    def letter(cls) -> 'PageGeometry':
        """US Letter with 1" margins at the configured screen resolution.

        8.5" x 11" at 96 DPI = 816 x 1056 px
        1" margins = 96 px each side
        Content area = 624 x 864 px
        """
        return cls.from_inches(
            PageConstants.PAGE_WIDTH_INCHES,
            PageConstants.PAGE_HEIGHT_INCHES,
            PageConstants.MARGIN_INCHES,
            PageConstants.DPI,
        )

    @property
    def content_width_px(self) -> float:
        return self.page_width_px - 2 * self.margin_px

    @property
    def content_height_px(self) -> float:
        """Height of one page's content area; the pagination unit."""
        return self.page_height_px - 2 * self.margin_px

    @property
    def points_per_px(self) -> float:
        return PageConstants.POINTS_PER_INCH / self.dpi

    @property
    def content_width_pt(self) -> float:
        return self.content_width_px * self.points_per_px

    @property
    def content_height_pt(self) -> float:
        return self.content_height_px * self.points_per_px

    def content_size_inches(self) -> tuple[float, float]:
        """Content area size in inches, rounded to hundredths."""
        return (
            round(self.content_width_px / self.dpi, 2),
            round(self.content_height_px / self.dpi, 2),
        )

    def page_index_at(self, flow_offset: float) -> int:
        """Map a flow-space offset to the 0-based index of the page holding it."""
        if flow_offset <= 0:
            return 0
        return int(math.floor(flow_offset / self.content_height_px))

    def page_top(self, page_index: int, gap_px: float) -> float:
        """Top of a page background in paged space."""
        return page_index * (self.content_height_px + gap_px)

    def flow_to_paged(self, flow_offset: float, gap_px: float) -> float:
        """Map a flow-space offset into paged space.

        The offset keeps its position within its page; every page boundary
        crossed adds one gap.
        """
        index = self.page_index_at(flow_offset)
        within_page = max(flow_offset, 0) - index * self.content_height_px
        return self.page_top(index, gap_px) + within_page

    def paged_height(self, total_pages: int, gap_px: float) -> float:
        """Total height of the stacked pages, never less than one page."""
        return max(
            self.content_height_px * total_pages + gap_px * max(0, total_pages - 1),
            self.content_height_px,
        )
