"""Plain-text content surface.

Lays plain text out in a single column as wide as the page content area,
reports the resulting height, and rasterizes the column with Pillow. This is
the content collaborator used by the command line and the Textual app; the
pagination and export code only see its height and its image.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from PIL import Image, ImageDraw, ImageFont

from .constants import PageConstants
from .errors import CaptureError
from .geometry import PageGeometry

logger = logging.getLogger(__name__)


def load_font(size: float):
    """Pillow's bundled font at a pixel size."""
    return ImageFont.load_default(size=size)


def wrap_paragraph(paragraph: str, width: float, measure: Callable[[str], float]) -> List[str]:
    """Greedy word wrap of one paragraph.

    Args:
        paragraph: Paragraph text without newlines.
        width: Available width in pixels.
        measure: Returns the rendered width of a string.

    Returns:
        Wrapped lines; a blank paragraph is one empty line.
    """
    words = paragraph.split()
    if not words:
        return [""]

    lines: List[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if measure(candidate) <= width:
            current = candidate
            continue
        if current:
            lines.append(current)
        # Hard-break words wider than the column
        while measure(word) > width and len(word) > 1:
            cut = len(word) - 1
            while cut > 1 and measure(word[:cut]) > width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    lines.append(current)
    return lines


class PlainTextSurface:
    """Content flow for a plain-text document.

    Provides the content height, change notifications and full-height
    captures the pagination and export layers consume.
    """

    def __init__(self, geometry: PageGeometry, text: str = "",
                 font_size: float = PageConstants.FONT_SIZE_PX,
                 line_spacing: float = PageConstants.LINE_SPACING):
        self.geometry = geometry
        self._text = text
        self._font_size = font_size
        self.line_spacing = line_spacing
        self._font = load_font(font_size)
        self._lines: List[str] | None = None
        self._subscribers: List[Callable[[], Any]] = []

    @property
    def text(self) -> str:
        return self._text

    @property
    def font_size(self) -> float:
        return self._font_size

    @property
    def line_height(self) -> float:
        return self._font_size * self.line_spacing

    def set_text(self, text: str) -> None:
        if text == self._text:
            return
        self._text = text
        self._lines = None
        self._notify()

    def set_font_size(self, font_size: float) -> None:
        """Change the font size; the height changes without an edit."""
        if font_size == self._font_size:
            return
        self._font_size = font_size
        self._font = load_font(font_size)
        self._lines = None
        self._notify()

    def subscribe(self, callback: Callable[[], Any]) -> Callable[[], None]:
        """Register for "height may have changed" notifications.

        Returns:
            Callable that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def lines(self) -> List[str]:
        """Wrapped lines of the whole document."""
        lines = self._lines
        if lines is None:
            lines = []
            text = self._text
            if text:
                width = self.geometry.content_width_px
                for paragraph in text.split("\n"):
                    lines.extend(wrap_paragraph(paragraph, width, self._font.getlength))
            # Text may have been replaced while wrapping
            if self._text is text:
                self._lines = lines
        return lines

    def content_height(self) -> float:
        return len(self.lines()) * self.line_height

    def capture(self, scale_factor: float) -> Image.Image:
        """Render the whole content column.

        Args:
            scale_factor: Output pixels per layout pixel.

        Returns:
            RGB image content_width_px * scale wide and content height * scale tall.

        Raises:
            CaptureError: If the text cannot be drawn.
        """
        if scale_factor <= 0:
            raise CaptureError(f"Scale factor must be positive, got {scale_factor}")

        lines = self.lines()
        width = max(1, round(self.geometry.content_width_px * scale_factor))
        height = max(1, round(len(lines) * self.line_height * scale_factor))
        try:
            image = Image.new("RGB", (width, height), PageConstants.BACKGROUND_COLOR)
            draw = ImageDraw.Draw(image)
            font = load_font(self._font_size * scale_factor)
            step = self.line_height * scale_factor
            for i, line in enumerate(lines):
                if line:
                    draw.text((0, i * step), line, font=font, fill=PageConstants.TEXT_COLOR)
        except (OSError, ValueError, MemoryError) as e:
            raise CaptureError(f"Could not rasterize text: {e}") from e

        logger.debug(f"Captured {len(lines)} line(s) at {width}x{height}px")
        return image

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback()
