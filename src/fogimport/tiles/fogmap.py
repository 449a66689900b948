"""FogMap: the coverage map built from Fog of World sync tiles.

The world is a MAP_WIDTH x MAP_WIDTH grid of tiles.  Each tile file is
zlib-compressed and holds a header of TILE_WIDTH x TILE_WIDTH uint16 block
indices followed by the referenced blocks.  A block is a 64 x 64 bitmap of
visited pixels plus three bytes of extra data.

Tile file names encode the tile id:
    <4 chars> <id digits masked by FILENAME_MASK1> <2 chars>
"""

from __future__ import annotations

import hashlib
import zlib
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np
from loguru import logger

from fogimport.errors import DecodeError, ErrorKind
from fogimport.files import FileEntry

MAP_WIDTH = 512
TILE_WIDTH = 128
TILE_HEADER_LEN = TILE_WIDTH * TILE_WIDTH
TILE_HEADER_SIZE = TILE_HEADER_LEN * 2
BITMAP_WIDTH = 64
BLOCK_BITMAP_SIZE = BITMAP_WIDTH * BITMAP_WIDTH // 8
BLOCK_EXTRA_DATA = 3
BLOCK_SIZE = BLOCK_BITMAP_SIZE + BLOCK_EXTRA_DATA

FILENAME_MASK1 = "olhwjsktri"
FILENAME_MASK2 = "eizxdwknmo"


# ---------------------------------------------------------------------------
# Tile file names
# ---------------------------------------------------------------------------

def parse_tile_filename(filename: str) -> int:
    """Return the tile id encoded in *filename*.

    Raises:
        ValueError: If the name does not carry a valid masked id.
    """
    masked = filename[4:-2]
    if not masked:
        raise ValueError(f"not a tile file name: {filename!r}")
    digits = []
    for ch in masked:
        digit = FILENAME_MASK1.find(ch)
        if digit < 0:
            raise ValueError(f"not a tile file name: {filename!r}")
        digits.append(str(digit))
    tile_id = int("".join(digits))
    if tile_id >= MAP_WIDTH * MAP_WIDTH:
        raise ValueError(f"tile id out of range in {filename!r}: {tile_id}")
    return tile_id


def make_tile_filename(x: int, y: int) -> str:
    """Build the sync file name for the tile at (x, y)."""
    tile_id = x + y * MAP_WIDTH
    digits = str(tile_id)
    prefix = hashlib.md5(digits.encode()).hexdigest()[:4]
    body = "".join(FILENAME_MASK1[int(d)] for d in digits)
    suffix = "".join(FILENAME_MASK2[int(d)] for d in f"{tile_id % 100:02d}")
    return prefix + body + suffix


# ---------------------------------------------------------------------------
# Blocks and tiles
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Block:
    """A 64 x 64 bitmap of visited pixels within a tile."""
    x: int
    y: int
    bitmap: bytes
    extra: bytes

    def is_visited(self, px: int, py: int) -> bool:
        """Whether pixel (px, py) of this block is set (MSB-first rows)."""
        byte = self.bitmap[py * (BITMAP_WIDTH // 8) + px // 8]
        return bool((byte >> (7 - px % 8)) & 1)

    def visited_count(self) -> int:
        bits = np.unpackbits(np.frombuffer(self.bitmap, dtype=np.uint8))
        return int(bits.sum())


@dataclass
class Tile:
    """One decoded sync tile."""
    filename: str
    x: int
    y: int
    blocks: dict[tuple[int, int], Block] = field(default_factory=dict)

    @property
    def tile_id(self) -> int:
        return self.x + self.y * MAP_WIDTH


def decode_tile(filename: str, data: bytes) -> Tile:
    """Decode one tile file.

    Raises:
        ValueError: Bad file name or truncated layout.
        zlib.error: Payload is not zlib data.
    """
    tile_id = parse_tile_filename(filename)
    raw = zlib.decompress(data)
    if len(raw) < TILE_HEADER_SIZE:
        raise ValueError(f"tile {filename!r} shorter than its header ({len(raw)} bytes)")

    header = np.frombuffer(raw, dtype="<u2", count=TILE_HEADER_LEN)
    blocks: dict[tuple[int, int], Block] = {}
    for i in np.flatnonzero(header):
        start = TILE_HEADER_SIZE + (int(header[i]) - 1) * BLOCK_SIZE
        end = start + BLOCK_SIZE
        if end > len(raw):
            raise ValueError(f"tile {filename!r} block {int(header[i])} out of bounds")
        bx, by = int(i) % TILE_WIDTH, int(i) // TILE_WIDTH
        blocks[(bx, by)] = Block(
            x=bx,
            y=by,
            bitmap=raw[start:start + BLOCK_BITMAP_SIZE],
            extra=raw[start + BLOCK_BITMAP_SIZE:end],
        )

    return Tile(
        filename=filename,
        x=tile_id % MAP_WIDTH,
        y=tile_id // MAP_WIDTH,
        blocks=blocks,
    )


# ---------------------------------------------------------------------------
# Coverage map
# ---------------------------------------------------------------------------

class FogMap:
    """Immutable set of decoded tiles keyed by (x, y)."""

    def __init__(self, tiles: dict[tuple[int, int], Tile] | None = None) -> None:
        self._tiles: dict[tuple[int, int], Tile] = dict(tiles or {})

    @classmethod
    def empty(cls) -> FogMap:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self._tiles

    @property
    def tiles(self) -> dict[tuple[int, int], Tile]:
        return dict(self._tiles)

    @property
    def tile_count(self) -> int:
        return len(self._tiles)

    @property
    def block_count(self) -> int:
        return sum(len(t.blocks) for t in self._tiles.values())

    def visited_pixel_count(self) -> int:
        return sum(
            block.visited_count()
            for tile in self._tiles.values()
            for block in tile.blocks.values()
        )

    def __repr__(self) -> str:
        return f"FogMap(tiles={self.tile_count}, blocks={self.block_count})"


def decode_tiles(entries: Iterable[FileEntry]) -> FogMap:
    """Build a FogMap from tile file entries.

    Entries that are not valid tiles are skipped with a warning.  When the
    same tile appears twice the later entry wins.

    Raises:
        DecodeError: kind INVALID_TILE_DATA if entries were given but none
            decoded to a tile.
    """
    tiles: dict[tuple[int, int], Tile] = {}
    seen = 0
    for entry in entries:
        seen += 1
        try:
            tile = decode_tile(entry.name, entry.data)
        except (ValueError, zlib.error) as exc:
            logger.warning(f"Unable to load tile {entry.name}: {exc}")
            continue
        tiles[(tile.x, tile.y)] = tile

    if seen and not tiles:
        raise DecodeError(
            ErrorKind.INVALID_TILE_DATA,
            f"none of {seen} entries is a valid tile",
        )
    logger.debug(f"Decoded {len(tiles)} tiles from {seen} entries")
    return FogMap(tiles)
