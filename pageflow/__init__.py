"""Pageflow - Height-based pagination and paginated PDF export."""

from .chrome import ChromeLayer, PageChromeRenderer, footer_text
from .errors import CaptureError, ExportError, ExportInProgressError
from .export import ExportJob, ExportPipeline, ExportResult
from .geometry import GeometryError, PageGeometry
from .model import HeaderFooterConfig, PageBreak, PaginationState
from .pagination import PaginationEngine, compute_pagination

__all__ = [
    'CaptureError',
    'ChromeLayer',
    'ExportError',
    'ExportInProgressError',
    'ExportJob',
    'ExportPipeline',
    'ExportResult',
    'GeometryError',
    'HeaderFooterConfig',
    'PageBreak',
    'PageChromeRenderer',
    'PageGeometry',
    'PaginationEngine',
    'PaginationState',
    'compute_pagination',
    'footer_text',
]
