"""Bytes -> text -> XML -> FeatureCollection for GPX and KML files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Callable

from fogimport.errors import DecodeError, ErrorKind
from fogimport.feature import FeatureCollection
from fogimport.tracks.gpx import gpx_to_features
from fogimport.tracks.kml import kml_to_features


class TrackDecoder:
    """Decodes GPX and KML documents.

    One instance is created lazily per import batch and shared by every
    track file in it.

    Args:
        encoding: Text codec for the raw bytes.  A leading UTF-8 byte order
            mark is tolerated.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = "utf-8-sig" if encoding.lower().replace("_", "-") == "utf-8" else encoding

    def decode_gpx(self, data: bytes) -> FeatureCollection:
        """Decode a GPX document.

        Raises:
            DecodeError: kind INVALID_ENCODING or INVALID_XML.
        """
        return self._decode(data, gpx_to_features)

    def decode_kml(self, data: bytes) -> FeatureCollection:
        """Decode a KML document.

        Raises:
            DecodeError: kind INVALID_ENCODING or INVALID_XML.
        """
        return self._decode(data, kml_to_features)

    def _decode(
        self, data: bytes, convert: Callable[[ET.Element], FeatureCollection]
    ) -> FeatureCollection:
        try:
            text = data.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise DecodeError(ErrorKind.INVALID_ENCODING, str(exc)) from exc
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise DecodeError(ErrorKind.INVALID_XML, str(exc)) from exc
        return convert(root)


def parse_gpx(gpx_string: str) -> FeatureCollection:
    """Parse a GPX XML string.

    Raises:
        DecodeError: kind INVALID_XML on malformed XML.
    """
    return TrackDecoder().decode_gpx(gpx_string.encode("utf-8"))


def parse_kml(kml_string: str) -> FeatureCollection:
    """Parse a KML XML string.

    Raises:
        DecodeError: kind INVALID_XML on malformed XML.
    """
    return TrackDecoder().decode_kml(kml_string.encode("utf-8"))
