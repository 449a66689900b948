"""Import pipeline for Fog of World sync data and GPX/KML tracks.

Files are classified by extension, decoded into a coverage map (FogMap)
or feature collections, and handed to a map-state holder.
"""

from fogimport.classify import GroupKind, classify
from fogimport.errors import AlreadyImportedError, DecodeError, ErrorKind, FogImportError
from fogimport.feature import Feature, FeatureCollection
from fogimport.files import FileEntry, MemoryFile, PathFile
from fogimport.importer import BatchState, Importer, ImportResult
from fogimport.state import MapState
from fogimport.tiles import FogMap

__all__ = [
    "AlreadyImportedError",
    "BatchState",
    "DecodeError",
    "ErrorKind",
    "Feature",
    "FeatureCollection",
    "FileEntry",
    "FogImportError",
    "FogMap",
    "GroupKind",
    "ImportResult",
    "Importer",
    "MapState",
    "MemoryFile",
    "PathFile",
    "classify",
]
