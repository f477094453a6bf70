"""Atomic file writes for documents and exported PDFs."""

from __future__ import annotations

import os
import tempfile

from .constants import PageConstants


def write_atomically(filename: str, content: bytes) -> str:
    """Write bytes to a file via a temporary file and rename.

    The temporary file lives in the destination directory so the final
    ``os.replace`` never crosses filesystems. On failure the temporary file
    is removed and the destination is left as it was.

    Args:
        filename: Destination path.
        content: Bytes to write.

    Returns:
        The path written.

    Raises:
        OSError: If the file could not be written.
    """
    dir_name = os.path.dirname(filename) or '.'
    base_name = os.path.basename(filename)
    temp_filename = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='wb',
            dir=dir_name,
            prefix=PageConstants.ATOMIC_SAVE_PREFIX + base_name,
            suffix=PageConstants.ATOMIC_SAVE_SUFFIX,
            delete=False
        ) as temp_file:
            temp_filename = temp_file.name
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_filename, filename)
    except OSError:
        if temp_filename is not None:
            try:
                os.remove(temp_filename)
            except OSError:
                pass
        raise
    return filename


def save_text(filename: str, text: str) -> str:
    """Atomically save a document's text as UTF-8."""
    return write_atomically(filename, text.encode('utf-8'))
