"""Pageflow CLI entry point.

Allows running via `python -m pageflow` and provides the console script
defined in `pyproject.toml`.

Usage:
    pageflow [FILE]                 Edit FILE with live pagination
    pageflow --pages FILE           Print the page count and break offsets
    pageflow --export FILE OUT.pdf  Export FILE as a paginated PDF
    pageflow --version
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from .version import get_version_string

USAGE = __doc__.split("Usage:", 1)[1].rstrip()


def _load_surface(filename: str):
    from .geometry import PageGeometry
    from .raster import PlainTextSurface

    text = Path(filename).read_text(encoding="utf-8")
    return PlainTextSurface(PageGeometry.letter(), text)


def print_pagination(filename: str) -> int:
    """Print the pagination of a plain-text file."""
    from .pagination import compute_pagination

    surface = _load_surface(filename)
    state = compute_pagination(surface.content_height(), surface.geometry)
    print(f"Content height: {state.content_height:g}px")
    print(f"Total pages: {state.total_pages}")
    for page_break in state.page_breaks:
        print(f"  page {page_break.page_number} ends at {page_break.height_from_top:g}px")
    return 0


def export_file(filename: str, output: str) -> int:
    """Export a plain-text file to a paginated PDF."""
    from .errors import ExportError
    from .export import ExportPipeline, validate_output_path

    ok, error = validate_output_path(output)
    if not ok:
        print(error, file=sys.stderr)
        return 1

    surface = _load_surface(filename)
    pipeline = ExportPipeline(surface.geometry)
    try:
        result = asyncio.run(pipeline.export(surface, output))
    except ExportError as e:
        print(f"Export failed: {e}", file=sys.stderr)
        return 1
    print(f"Exported {result.page_count} page(s) to {result.path}")
    return 0


def main() -> None:
    # Small arg parsing for the headless modes, version, and optional filename
    args = sys.argv[1:]
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return
    if args and args[0] in ("--help", "-h"):
        print("Usage:" + USAGE)
        return

    try:
        if args and args[0] == "--pages":
            if len(args) != 2:
                print("Usage:" + USAGE, file=sys.stderr)
                sys.exit(2)
            sys.exit(print_pagination(args[1]))
        if args and args[0] == "--export":
            if len(args) != 3:
                print("Usage:" + USAGE, file=sys.stderr)
                sys.exit(2)
            sys.exit(export_file(args[1], args[2]))
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading {args[1]}: {e}", file=sys.stderr)
        sys.exit(1)

    # Lazy import to avoid importing UI deps for the headless modes
    from .textual_app import PageflowApp
    app = PageflowApp(filename=args[0] if args else None)
    app.run()


if __name__ == "__main__":  # pragma: no cover
    main()
