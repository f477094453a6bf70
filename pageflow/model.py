"""Value types shared by the pagination, chrome and export layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, order=True)
class PageBreak:
    """Boundary in flow space where one page ends and the next begins.

    Attributes:
        page_number: 1-based number of the page that ends here
        height_from_top: Offset from the top of the content flow
    """
    page_number: int
    height_from_top: float


@dataclass(frozen=True)
class PaginationState:
    """Result of one pagination pass.

    Always replaced as a whole; nothing mutates an existing state.
    """
    page_breaks: Tuple[PageBreak, ...] = ()
    total_pages: int = 1
    content_height: float = 0.0

    @classmethod
    def initial(cls) -> 'PaginationState':
        """State shown before anything has been measured: one empty page."""
        return cls()


@dataclass(frozen=True)
class HeaderFooterConfig:
    """Header and footer settings for every page.

    Attributes:
        header_text: Text centred at the top of every page; empty for none
        footer_template: Footer text; "{page}" is replaced by the page number
        show_page_numbers: Show "Page N" when no footer template is set
    """
    header_text: str = ""
    footer_template: str = ""
    show_page_numbers: bool = True

    def to_dict(self) -> dict:
        return {
            "header_text": self.header_text,
            "footer_template": self.footer_template,
            "show_page_numbers": self.show_page_numbers,
        }
