"""Feature and FeatureCollection dataclasses for decoded tracks.

All coordinates are stored in GeoJSON convention: [lng, lat] or [lng, lat, alt].
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass
class Feature:
    """A single geographic feature decoded from a track document.

    Attributes:
        geometry_type: One of "Point", "LineString", "MultiLineString",
            "Polygon", "GeometryCollection".
        coordinates: GeoJSON-style coordinate arrays.  For
            "GeometryCollection" this holds the member Features' geometries
            as (type, coordinates) pairs.
        properties: Arbitrary key-value metadata.
    """

    geometry_type: str
    coordinates: list
    properties: dict = field(default_factory=dict)

    def geometry(self) -> dict:
        """Render the GeoJSON geometry object."""
        if self.geometry_type == "GeometryCollection":
            return {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": gtype, "coordinates": coords}
                    for gtype, coords in self.coordinates
                ],
            }
        return {"type": self.geometry_type, "coordinates": self.coordinates}

    def to_geojson(self) -> dict:
        return {
            "type": "Feature",
            "geometry": self.geometry(),
            "properties": dict(self.properties),
        }


@dataclass
class FeatureCollection:
    """An ordered sequence of features decoded from one or more documents."""

    features: list[Feature] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self):
        return iter(self.features)

    @classmethod
    def concat(cls, collections: Iterable[FeatureCollection]) -> FeatureCollection:
        """Concatenate collections, preserving the given order."""
        features: list[Feature] = []
        for collection in collections:
            features.extend(collection.features)
        return cls(features=features)

    def to_geojson(self) -> dict:
        """Export as a GeoJSON FeatureCollection dict (RFC 7946)."""
        return {
            "type": "FeatureCollection",
            "features": [f.to_geojson() for f in self.features],
        }
