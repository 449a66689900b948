"""Coverage map tiles: archive unpacking and sync tile decoding."""

from fogimport.tiles.archive import unpack_archive
from fogimport.tiles.fogmap import FogMap, decode_tiles, make_tile_filename

__all__ = ["FogMap", "decode_tiles", "make_tile_filename", "unpack_archive"]
