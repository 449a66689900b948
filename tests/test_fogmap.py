"""Tests for sync tile decoding: file names, tile layout, FogMap aggregate."""

import zlib

import pytest

from fogimport.errors import DecodeError, ErrorKind
from fogimport.files import FileEntry
from fogimport.tiles.fogmap import (
    MAP_WIDTH,
    TILE_HEADER_SIZE,
    FogMap,
    decode_tile,
    decode_tiles,
    make_tile_filename,
    parse_tile_filename,
)
from tests.lib.builders import FULL_BITMAP, tile_bytes, tile_file


class TestTileFilename:
    """Masked tile ids in sync file names."""

    @pytest.mark.parametrize("x, y", [(0, 0), (7, 0), (511, 0), (12, 345), (511, 511)])
    def test_make_then_parse(self, x, y):
        assert parse_tile_filename(make_tile_filename(x, y)) == x + y * MAP_WIDTH

    def test_known_encoding(self):
        """Digits 0-9 map through 'olhwjsktri'."""
        assert parse_tile_filename("abcdlhwzz") == 123

    @pytest.mark.parametrize("name", ["", "short", "abcdXYZzz", "README.txt", "abcd" + "r" * 7 + "zz"])
    def test_invalid_names(self, name):
        with pytest.raises(ValueError):
            parse_tile_filename(name)


class TestDecodeTile:
    """Single tile payloads."""

    def test_block_positions_and_extra(self):
        """Header indices place blocks at (i % 128, i // 128)."""
        name, data = tile_file(3, 2, {(5, 0): FULL_BITMAP, (1, 127): b"\x80"})
        tile = decode_tile(name, data)
        assert (tile.x, tile.y) == (3, 2)
        assert set(tile.blocks) == {(5, 0), (1, 127)}
        assert tile.blocks[(5, 0)].extra == b"\x01\x01\x01"

    def test_pixel_bits(self):
        """Bitmaps are read MSB first, row-major."""
        name, data = tile_file(0, 0, {(0, 0): b"\x80"})
        block = decode_tile(name, data).blocks[(0, 0)]
        assert block.is_visited(0, 0)
        assert not block.is_visited(1, 0)
        assert not block.is_visited(0, 1)
        assert block.visited_count() == 1

    def test_not_zlib(self):
        with pytest.raises(zlib.error):
            decode_tile(make_tile_filename(0, 0), b"plain bytes")

    def test_short_header(self):
        with pytest.raises(ValueError):
            decode_tile(make_tile_filename(0, 0), zlib.compress(b"\0" * 10))

    def test_block_out_of_bounds(self):
        """A header index past the end of the payload is rejected."""
        header = bytearray(TILE_HEADER_SIZE)
        header[0] = 9
        with pytest.raises(ValueError):
            decode_tile(make_tile_filename(0, 0), zlib.compress(bytes(header)))


class TestDecodeTiles:
    """Batches of tile entries into a FogMap."""

    def test_builds_map(self):
        entries = [FileEntry(*tile_file(1, 1)), FileEntry(*tile_file(2, 1))]
        fog_map = decode_tiles(entries)
        assert not fog_map.is_empty
        assert fog_map.tile_count == 2
        assert fog_map.block_count == 2
        assert fog_map.visited_pixel_count() == 2 * 64 * 64

    def test_unrecognized_entries_skipped(self):
        """Non-tile entries are ignored while valid ones decode."""
        entries = [
            FileEntry("README.txt", b"hello"),
            FileEntry(*tile_file(4, 4)),
            FileEntry(make_tile_filename(5, 5), b"garbage"),
        ]
        fog_map = decode_tiles(entries)
        assert set(fog_map.tiles) == {(4, 4)}

    def test_all_invalid_raises(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_tiles([FileEntry("README.txt", b"hello")])
        assert exc_info.value.kind is ErrorKind.INVALID_TILE_DATA

    def test_no_entries_gives_empty_map(self):
        assert decode_tiles([]).is_empty

    def test_duplicate_tile_last_wins(self):
        first = FileEntry(make_tile_filename(0, 0), tile_bytes({(0, 0): FULL_BITMAP}))
        second = FileEntry(make_tile_filename(0, 0), tile_bytes({(9, 9): FULL_BITMAP}))
        fog_map = decode_tiles([first, second])
        assert set(fog_map.tiles[(0, 0)].blocks) == {(9, 9)}


class TestFogMap:
    def test_empty(self):
        fog_map = FogMap.empty()
        assert fog_map.is_empty
        assert fog_map.tile_count == 0
        assert fog_map.visited_pixel_count() == 0

    def test_tiles_is_a_copy(self):
        fog_map = decode_tiles([FileEntry(*tile_file(1, 1))])
        fog_map.tiles.clear()
        assert fog_map.tile_count == 1
