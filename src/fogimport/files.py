"""File handles and entries flowing through the import pipeline.

A FileHandle is anything with a ``name`` and an async ``read_bytes()``.
A FileEntry is a name/bytes pair whose name has been reduced to a basename.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

_PATH_PREFIX = re.compile(r"^.*[\\/]", re.DOTALL)


def basename(name: str) -> str:
    """Strip everything up to and including the last '/' or '\\'."""
    return _PATH_PREFIX.sub("", name)


class FileHandle(Protocol):
    """A user-supplied file: a name plus lazily readable content."""

    name: str

    async def read_bytes(self) -> bytes: ...


@dataclass(frozen=True)
class FileEntry:
    """A named binary blob, e.g. one member of an unpacked archive."""
    name: str
    data: bytes


@dataclass
class MemoryFile:
    """FileHandle backed by bytes already in memory."""
    name: str
    data: bytes

    async def read_bytes(self) -> bytes:
        return self.data


class PathFile:
    """FileHandle backed by a file on disk, read off the event loop."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.name = self.path.name

    async def read_bytes(self) -> bytes:
        return await asyncio.to_thread(self.path.read_bytes)

    def __repr__(self) -> str:
        return f"PathFile({str(self.path)!r})"


async def read_entries(
    files: list[FileHandle], semaphore: asyncio.Semaphore
) -> list[FileEntry]:
    """Read every handle concurrently; results keep the input order."""

    async def _read(handle: FileHandle) -> FileEntry:
        async with semaphore:
            data = await handle.read_bytes()
        return FileEntry(basename(handle.name), data)

    return list(await asyncio.gather(*(_read(f) for f in files)))
