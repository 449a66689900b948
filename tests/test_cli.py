"""Tests for the command-line importer."""

import json

from fogimport.cli import main
from tests.lib.builders import tile_file, zip_bytes

GPX = (
    b'<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><name>run</name><trkseg>'
    b'<trkpt lat="1" lon="2"/><trkpt lat="3" lon="4"/></trkseg></trk></gpx>'
)


class TestCLI:
    def test_import_and_export(self, tmp_path, capsys):
        archive = tmp_path / "Sync.zip"
        archive.write_bytes(zip_bytes(dict([tile_file(1, 1), tile_file(1, 2)])))
        track = tmp_path / "run.gpx"
        track.write_bytes(GPX)
        out = tmp_path / "tracks.geojson"

        code = main([str(archive), str(track), "--geojson", str(out), "--log-level", "warning"])

        assert code == 0
        printed = capsys.readouterr().out
        assert "tiles:    2" in printed
        assert "features: 1" in printed
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["type"] == "FeatureCollection"
        assert data["features"][0]["geometry"]["coordinates"] == [[2.0, 1.0], [4.0, 3.0]]

    def test_unrecognized_exit_code(self, tmp_path, capsys):
        junk = tmp_path / "a.xyz"
        junk.write_bytes(b"?")
        assert main([str(junk), "--log-level", "ERROR"]) == 1
        assert "status:   failed" in capsys.readouterr().out
