"""Tests for the extension classifier: keys, grouping order, group kinds."""

import pytest

from fogimport.classify import GroupKind, classify, file_extension, group_by_extension
from fogimport.files import MemoryFile


def _files(*names):
    return [MemoryFile(name, b"") for name in names]


class TestFileExtension:
    """Extension key extraction."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("track.gpx", "gpx"),
            ("TRACK.GPX", "gpx"),
            ("Sync.Zip", "zip"),
            ("archive.tar.zip", "zip"),
            ("a1b2olhwjs", ""),
            (".hidden", ""),
            ("trailing.", ""),
            ("folder.v2/tilefile", ""),
            ("C:\\exports\\trail.KML", "kml"),
        ],
    )
    def test_extension_rule(self, name, expected):
        assert file_extension(name) == expected


class TestClassify:
    """Grouping of file lists."""

    def test_every_file_lands_in_exactly_one_group(self):
        """Each input file appears in exactly one group."""
        files = _files("a.gpx", "b.kml", "c", "d.zip", "e.xyz", "f.GPX")
        groups = classify(files)
        members = [f for g in groups for f in g.files]
        assert len(members) == len(files)
        assert {id(f) for f in members} == {id(f) for f in files}

    def test_order_preserved_within_group(self):
        """Files keep their relative input order inside a group."""
        files = _files("2.gpx", "x.kml", "1.GPX", "3.gpx")
        groups = group_by_extension(files)
        assert [f.name for f in groups["gpx"]] == ["2.gpx", "1.GPX", "3.gpx"]

    def test_group_kinds(self):
        """Known keys map to their kinds; anything else is unrecognized."""
        groups = classify(_files("a.zip", "b", "c.gpx", "d.kml", "e.txt"))
        kinds = {g.extension: g.kind for g in groups}
        assert kinds == {
            "zip": GroupKind.ARCHIVE,
            "": GroupKind.LOOSE_TILES,
            "gpx": GroupKind.GPX,
            "kml": GroupKind.KML,
            "txt": GroupKind.UNRECOGNIZED,
        }

    def test_empty_input(self):
        assert classify([]) == []
