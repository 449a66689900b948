"""Unpack a ZIP archive into a flat list of FileEntry.

Directory structure inside the archive is discarded: every member name is
reduced to its basename, and members whose basename is empty (directory
placeholders) are dropped.
"""

from __future__ import annotations

import io
import zipfile
import zlib

from loguru import logger

from fogimport.errors import DecodeError, ErrorKind
from fogimport.files import FileEntry, basename

# Everything zipfile raises on damaged input (bad names, offsets, versions)
_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    ValueError,
    NotImplementedError,
    RuntimeError,
    OSError,
    EOFError,
    zlib.error,
)


def unpack_archive(data: bytes) -> list[FileEntry]:
    """Unpack ZIP bytes into entries, in archive order.

    Args:
        data: Raw archive content.

    Returns:
        One FileEntry per non-directory member.

    Raises:
        DecodeError: kind INVALID_ARCHIVE if the bytes are not a readable ZIP.
    """
    entries: list[FileEntry] = []
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for info in archive.infolist():
                name = basename(info.filename)
                if not name:
                    continue
                entries.append(FileEntry(name, archive.read(info)))
    except _ARCHIVE_ERRORS as exc:
        raise DecodeError(ErrorKind.INVALID_ARCHIVE, f"unreadable zip archive: {exc}") from exc

    logger.debug(f"Unpacked {len(entries)} entries from archive")
    return entries
