"""Track documents (GPX, KML) decoded to feature collections.

Parsers use xml.etree.ElementTree from the standard library.
"""

from fogimport.tracks.decoder import TrackDecoder, parse_gpx, parse_kml

__all__ = ["TrackDecoder", "parse_gpx", "parse_kml"]
