"""Error taxonomy for the import pipeline.

Every failure carries an ErrorKind.  Users only ever see one of two
message keys; the finer kinds are kept for logs and tests.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """What went wrong during an import batch."""
    ALREADY_IMPORTED = "already_imported"
    INVALID_ARCHIVE = "invalid_archive"
    INVALID_TILE_DATA = "invalid_tile_data"
    INVALID_ENCODING = "invalid_encoding"
    INVALID_XML = "invalid_xml"
    UNRECOGNIZED_FORMAT = "unrecognized_format"

    @property
    def message_key(self) -> str:
        """User-facing message key for this kind."""
        if self is ErrorKind.ALREADY_IMPORTED:
            return "error-already-imported"
        return "error-invalid-format"


class FogImportError(Exception):
    """Base class for import failures."""

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


class DecodeError(FogImportError):
    """Raised when a decoder cannot make sense of its input."""


class AlreadyImportedError(FogImportError):
    """Raised when a map-replacing group meets a non-empty coverage map."""

    def __init__(self, message: str = "coverage map already populated") -> None:
        super().__init__(ErrorKind.ALREADY_IMPORTED, message)
