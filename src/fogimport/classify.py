"""Extension classifier: split a file list into extension groups.

Classification looks at names only.  The key is the lowercased text after
the last '.', or "" when there is no '.' past the first character.  Each
key maps to a GroupKind so later stages branch on one tagged value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from fogimport.files import FileHandle, basename


class GroupKind(Enum):
    """What the pipeline does with a group of files."""
    ARCHIVE = "archive"
    LOOSE_TILES = "loose_tiles"
    GPX = "gpx"
    KML = "kml"
    UNRECOGNIZED = "unrecognized"


_KIND_BY_EXTENSION = {
    "zip": GroupKind.ARCHIVE,
    "": GroupKind.LOOSE_TILES,
    "gpx": GroupKind.GPX,
    "kml": GroupKind.KML,
}

# Order in which the importer visits groups
PROCESSING_ORDER = (
    GroupKind.ARCHIVE,
    GroupKind.LOOSE_TILES,
    GroupKind.GPX,
    GroupKind.KML,
)


@dataclass
class FileGroup:
    """Files sharing one extension key."""
    extension: str
    kind: GroupKind
    files: list = field(default_factory=list)


def file_extension(name: str) -> str:
    """Return the lowercase extension of *name*, or "" if it has none.

    Any directory prefix is ignored, and a leading dot does not start an
    extension: ".hidden" -> "".
    """
    name = basename(name)
    dot = name.rfind(".")
    if dot <= 0:
        return ""
    return name[dot + 1:].lower()


def group_kind(extension: str) -> GroupKind:
    return _KIND_BY_EXTENSION.get(extension, GroupKind.UNRECOGNIZED)


def group_by_extension(files: list[FileHandle]) -> dict[str, list[FileHandle]]:
    """Map extension key -> files, keeping input order within each key."""
    groups: dict[str, list[FileHandle]] = {}
    for handle in files:
        groups.setdefault(file_extension(handle.name), []).append(handle)
    return groups


def classify(files: list[FileHandle]) -> list[FileGroup]:
    """Classify files into tagged groups, one per extension key.

    Groups appear in order of first occurrence of their key.
    """
    return [
        FileGroup(extension=ext, kind=group_kind(ext), files=members)
        for ext, members in group_by_extension(files).items()
    ]
