"""Generate PDF documents from page images.

Each page image becomes one PDF page whose size is the content area of the
page geometry, converted from device pixels to points. Images are drawn to
fill the page exactly; their pixel density is whatever the export scale
produced.
"""

import io
import logging
from typing import Sequence

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .errors import PDFGenerationError
from .geometry import PageGeometry

logger = logging.getLogger(__name__)


class PDFGenerator:
    """Assemble page images into a multi-page PDF."""

    def __init__(self, title: str = "Document"):
        """Initialize PDF generator.

        Args:
            title: Document title stored in the PDF metadata.
        """
        self.title = title

    def page_size(self, geometry: PageGeometry) -> tuple[float, float]:
        """Physical page size in points for a geometry."""
        return (geometry.content_width_pt, geometry.content_height_pt)

    def generate_pdf(self, pages: Sequence[Image.Image], geometry: PageGeometry) -> bytes:
        """Generate PDF from page images.

        Args:
            pages: Page images in order, all with the page's aspect ratio.
            geometry: Page geometry that defines the physical page size.

        Returns:
            Complete PDF document as bytes.

        Raises:
            PDFGenerationError: If there are no pages or a page cannot be drawn.
        """
        if not pages:
            raise PDFGenerationError("Cannot generate a PDF with no pages")

        width_pt, height_pt = self.page_size(geometry)
        pdf_buffer = io.BytesIO()

        c = canvas.Canvas(pdf_buffer, pagesize=(width_pt, height_pt))
        c.setTitle(self.title)

        try:
            for page_num, page in enumerate(pages, 1):
                # PDF origin is bottom-left; the image covers the whole page
                c.drawImage(ImageReader(page), 0, 0, width=width_pt, height=height_pt)
                c.showPage()
                logger.debug(f"Added page {page_num} ({page.width}x{page.height}px)")
            c.save()
        except (OSError, ValueError) as e:
            raise PDFGenerationError(f"Could not assemble PDF: {e}") from e

        pdf_buffer.seek(0)
        return pdf_buffer.read()
