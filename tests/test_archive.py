"""Tests for archive unpacking: basename stripping, directory entries, bad input."""

import pytest

from fogimport.errors import DecodeError, ErrorKind
from fogimport.tiles.archive import unpack_archive
from tests.lib.builders import bad_name_zip_bytes, zip_bytes


class TestUnpackArchive:
    """Unpack ZIP bytes into FileEntry lists."""

    def test_paths_stripped_to_basename(self):
        """Forward and back slashes are both stripped."""
        data = zip_bytes({
            "Sync/tiles/abcdolhwe": b"one",
            "Backup\\old\\efghlhwz": b"two",
            "top": b"three",
        })
        entries = unpack_archive(data)
        assert [e.name for e in entries] == ["abcdolhwe", "efghlhwz", "top"]
        assert [e.data for e in entries] == [b"one", b"two", b"three"]

    def test_directory_entries_dropped(self):
        """Directory placeholders have an empty basename and are skipped."""
        data = zip_bytes({"Sync/": b"", "Sync/tile": b"x"})
        entries = unpack_archive(data)
        assert [e.name for e in entries] == ["tile"]
        assert all(e.name for e in entries)

    def test_empty_archive(self):
        assert unpack_archive(zip_bytes({})) == []

    def test_not_a_zip(self):
        """Non-zip bytes fail with INVALID_ARCHIVE."""
        with pytest.raises(DecodeError) as exc_info:
            unpack_archive(b"<?xml version='1.0'?><gpx/>")
        assert exc_info.value.kind is ErrorKind.INVALID_ARCHIVE

    def test_truncated_zip(self):
        data = zip_bytes({"tile": b"x" * 100})
        with pytest.raises(DecodeError) as exc_info:
            unpack_archive(data[: len(data) // 2])
        assert exc_info.value.kind is ErrorKind.INVALID_ARCHIVE

    def test_corrupt_member_name(self):
        """A damaged central directory name is an invalid archive, not a crash."""
        with pytest.raises(DecodeError) as exc_info:
            unpack_archive(bad_name_zip_bytes())
        assert exc_info.value.kind is ErrorKind.INVALID_ARCHIVE
