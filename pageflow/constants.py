"""Constants and configuration for the pageflow engine."""

class PageConstants:
    """Central configuration constants for pagination and export."""

    # Physical page (US Letter)
    PAGE_WIDTH_INCHES = 8.5
    PAGE_HEIGHT_INCHES = 11.0
    MARGIN_INCHES = 1.0  # Uniform margin on all sides
    DPI = 96  # Device pixels per inch for on-screen layout
    POINTS_PER_INCH = 72  # PDF user space units

    # Paged-space layout
    PAGE_GAP_PX = 28  # Visual spacing between stacked page backgrounds
    HEADER_OFFSET_PX = 8  # Header distance below the page top
    FOOTER_OFFSET_PX = 8  # Footer distance above the page bottom

    # Recalculation timing
    DEBOUNCE_MS = 150  # Quiet period before pagination is recomputed

    # Export
    EXPORT_SCALE = 2  # Output pixel density relative to display pixels
    BACKGROUND_COLOR = "#ffffff"  # Fill for page padding
    DEFAULT_EXPORT_FILENAME = "document.pdf"

    # Plain text surface
    FONT_SIZE_PX = 16
    LINE_SPACING = 1.5  # Line height as a multiple of the font size
    TEXT_COLOR = "#000000"

    # Footer
    PAGE_PLACEHOLDER = "{page}"
    PAGE_NUMBER_FORMAT = "Page {}"

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary export files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary export files
