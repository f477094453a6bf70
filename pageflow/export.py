"""Slice a full-height raster of the content into pages and write a PDF.

The content is captured once as a single image covering the whole flow. It
is cut into strips one page tall, each strip is placed at the top of a
background-filled page canvas, and the canvases are assembled into a PDF.
Nothing is written until every page has been produced, and the file is
replaced atomically, so a failed export never leaves a partial document.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
import os
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Protocol

from PIL import Image

from .constants import PageConstants
from .errors import CaptureError, ExportError, ExportInProgressError
from .files import write_atomically
from .geometry import PageGeometry
from .pdf_generator import PDFGenerator

logger = logging.getLogger(__name__)


class RasterizationService(Protocol):
    """Produces one image of the complete content flow.

    ``capture`` may return the image directly or an awaitable of it.
    """

    def capture(self, scale_factor: float) -> Any: ...


class ExportResult(NamedTuple):
    path: str
    page_count: int


@dataclass(frozen=True)
class ExportJob:
    """One slicing pass over a captured image."""
    source_image: Image.Image
    geometry: PageGeometry
    scale_factor: float
    background: str = PageConstants.BACKGROUND_COLOR

    def __post_init__(self) -> None:
        if self.scale_factor <= 0:
            raise ExportError(f"Scale factor must be positive, got {self.scale_factor}")

    @property
    def page_width(self) -> int:
        return max(1, round(self.geometry.content_width_px * self.scale_factor))

    @property
    def scaled_page_height(self) -> float:
        """Unrounded height of one page in source pixels."""
        return self.geometry.content_height_px * self.scale_factor

    @property
    def page_height(self) -> int:
        return max(1, round(self.scaled_page_height))

    @property
    def page_count(self) -> int:
        # An empty capture still yields the single blank page the editor shows
        return max(1, math.ceil(self.source_image.height / self.scaled_page_height))

    def page(self, index: int) -> Image.Image:
        """Page image for a 0-based index, padded with the background.

        Strip boundaries are rounded from the fractional page height, so
        pixel rounding never accumulates across pages.
        """
        top = round(index * self.scaled_page_height)
        bottom = min(round((index + 1) * self.scaled_page_height),
                     top + self.page_height, self.source_image.height)
        right = min(self.page_width, self.source_image.width)

        canvas = Image.new("RGB", (self.page_width, self.page_height), self.background)
        if bottom > top and right > 0:
            strip = self.source_image.crop((0, top, right, bottom))
            if strip.mode not in ("RGB", "L"):
                strip = strip.convert("RGBA")
                canvas.paste(strip, (0, 0), strip)
            else:
                canvas.paste(strip, (0, 0))
        return canvas

    def pages(self) -> List[Image.Image]:
        return [self.page(i) for i in range(self.page_count)]


class ExportPipeline:
    """Turns a rasterized content flow into a paginated PDF.

    Only one export may run at a time; a request made while another is in
    flight is rejected.
    """

    def __init__(self, geometry: PageGeometry,
                 scale_factor: float = PageConstants.EXPORT_SCALE,
                 background: str = PageConstants.BACKGROUND_COLOR,
                 pdf_generator: PDFGenerator | None = None):
        self.geometry = geometry
        self.scale_factor = scale_factor
        self.background = background
        self.pdf_generator = pdf_generator or PDFGenerator()
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def slice_pages(self, source_image: Image.Image) -> List[Image.Image]:
        """Cut a full-height capture into page images.

        Args:
            source_image: Capture of the whole content at this pipeline's scale.

        Returns:
            Page images, each exactly one scaled content area in size.
        """
        job = ExportJob(source_image, self.geometry, self.scale_factor, self.background)
        return job.pages()

    def render_document(self, source_image: Image.Image) -> bytes:
        """Slice a capture and assemble the pages into PDF bytes."""
        pages = self.slice_pages(source_image)
        logger.debug(f"Sliced {source_image.height}px capture into {len(pages)} page(s)")
        return self.pdf_generator.generate_pdf(pages, self.geometry)

    async def export(self, surface: RasterizationService, output_path: str) -> ExportResult:
        """Capture the content and write it as a paginated PDF.

        Capture, slicing, PDF encoding and the file write run in a worker
        thread so the event loop keeps serving timers and input meanwhile.

        Args:
            surface: Rasterization service for the content flow.
            output_path: Destination PDF path; ".pdf" is appended if missing.

        Returns:
            Path written and number of pages.

        Raises:
            ExportInProgressError: If another export is running.
            CaptureError: If the content could not be rasterized.
            ExportError: If the PDF could not be produced or written.
        """
        if self._in_flight:
            raise ExportInProgressError("An export is already in progress")
        self._in_flight = True
        try:
            if not output_path.endswith('.pdf'):
                output_path += '.pdf'
            source_image = await self._capture(surface)
            page_count, path = await asyncio.to_thread(self._write, source_image, output_path)
            logger.info(f"Exported {page_count} page(s) to {path}")
            return ExportResult(path, page_count)
        finally:
            self._in_flight = False

    def _write(self, source_image: Image.Image, output_path: str) -> tuple[int, str]:
        pages = self.slice_pages(source_image)
        pdf_content = self.pdf_generator.generate_pdf(pages, self.geometry)
        try:
            path = write_atomically(output_path, pdf_content)
        except OSError as e:
            raise ExportError(f"Save error: {e}") from e
        return len(pages), path

    async def _capture(self, surface: RasterizationService) -> Image.Image:
        try:
            result = await asyncio.to_thread(surface.capture, self.scale_factor)
            if inspect.isawaitable(result):
                result = await result
        except CaptureError:
            raise
        except Exception as e:
            # Justification: any rasterizer failure is reported as a capture error
            raise CaptureError(f"Could not capture content: {e}") from e
        if not isinstance(result, Image.Image):
            raise CaptureError(f"Rasterizer returned {type(result).__name__}, not an image")
        return result


def validate_output_path(filename: str) -> tuple[bool, str]:
    """Check if the output path is valid and writable.

    Args:
        filename: Output file path to validate.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not filename:
        return False, "No filename specified"

    dir_name = os.path.dirname(filename) or '.'
    if not os.path.isdir(dir_name):
        return False, f"Directory does not exist: {dir_name}"
    if not os.access(dir_name, os.W_OK):
        return False, f"Directory is not writable: {dir_name}"
    if os.path.exists(filename) and not os.access(filename, os.W_OK):
        return False, f"File is not writable: {filename}"
    return True, ""
