"""Exceptions raised by the export path."""


class ExportError(Exception):
    """Exception raised when a document cannot be exported."""


class CaptureError(ExportError):
    """Exception raised when the content surface cannot be rasterized."""


class ExportInProgressError(ExportError):
    """Exception raised when an export is requested while one is running."""


class PDFGenerationError(ExportError):
    """Exception raised when page images cannot be assembled into a PDF."""
