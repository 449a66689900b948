"""Convert a GPX 1.0/1.1 document to a FeatureCollection.

Handles trk/trkseg/trkpt (tracks), rte/rtept (routes) and wpt (waypoints).
Extracts name, desc, time and ele (elevation).

GPX uses lat/lon attributes on elements (latitude first).
All coordinates stored as [lng, lat] or [lng, lat, ele] (GeoJSON convention).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from fogimport.feature import Feature, FeatureCollection

_PROPERTY_TAGS = ("name", "desc", "time")


def gpx_to_features(root: ET.Element) -> FeatureCollection:
    """Convert a parsed GPX root element.

    Features come out as all tracks, then all routes, then all waypoints.
    A document with none of these yields an empty collection.
    """
    ns = _detect_namespace(root)
    features: list[Feature] = []

    for trk in _find_all(root, "trk", ns):
        feature = _parse_track(trk, ns)
        if feature is not None:
            features.append(feature)

    for rte in _find_all(root, "rte", ns):
        feature = _parse_route(rte, ns)
        if feature is not None:
            features.append(feature)

    for wpt in _find_all(root, "wpt", ns):
        feature = _parse_waypoint(wpt, ns)
        if feature is not None:
            features.append(feature)

    return FeatureCollection(features=features)


def _detect_namespace(root: ET.Element) -> str:
    """Detect GPX namespace from root tag."""
    tag = root.tag
    if "{" in tag:
        return tag.split("}")[0] + "}"
    return ""


def _find_all(parent: ET.Element, tag: str, ns: str) -> list[ET.Element]:
    """Find all direct children with the given tag."""
    return parent.findall(f"{ns}{tag}")


def _get_child_text(parent: ET.Element, tag: str, ns: str) -> str:
    """Get text of a direct child element."""
    elem = parent.find(f"{ns}{tag}")
    if elem is not None and elem.text:
        return elem.text.strip()
    return ""


def _properties(elem: ET.Element, ns: str) -> dict:
    properties: dict = {}
    for tag in _PROPERTY_TAGS:
        text = _get_child_text(elem, tag, ns)
        if text:
            properties[tag] = text
    return properties


def _parse_point(elem: ET.Element, ns: str) -> list[float]:
    """Extract [lng, lat] or [lng, lat, ele] from lat/lon attributes.

    Returns [] when either attribute is missing or not a number.
    """
    try:
        lat = float(elem.get("lat"))
        lon = float(elem.get("lon"))
    except (ValueError, TypeError):
        return []

    ele_text = _get_child_text(elem, "ele", ns)
    if ele_text:
        try:
            return [lon, lat, float(ele_text)]
        except ValueError:
            pass
    return [lon, lat]


def _parse_points(
    parent: ET.Element, tag: str, ns: str
) -> tuple[list[list[float]], list[str]]:
    """Collect coordinates and times of all *tag* children of *parent*.

    Fewer than two usable points is not a line; both lists come back empty.
    """
    coordinates: list[list[float]] = []
    times: list[str] = []
    for pt in _find_all(parent, tag, ns):
        coord = _parse_point(pt, ns)
        if coord:
            coordinates.append(coord)
            times.append(_get_child_text(pt, "time", ns))
    if len(coordinates) < 2:
        return [], []
    return coordinates, times


def _parse_track(trk: ET.Element, ns: str) -> Feature | None:
    """Parse a trk element.

    One non-empty segment gives a LineString, several give a
    MultiLineString.  Tracks with no points are dropped.
    """
    lines: list[list[list[float]]] = []
    line_times: list[list[str]] = []
    for seg in _find_all(trk, "trkseg", ns):
        coordinates, times = _parse_points(seg, "trkpt", ns)
        if coordinates:
            lines.append(coordinates)
            line_times.append(times)

    if not lines:
        return None

    properties = _properties(trk, ns)
    if len(lines) == 1:
        if any(line_times[0]):
            properties["coordTimes"] = line_times[0]
        return Feature("LineString", lines[0], properties)

    if any(any(times) for times in line_times):
        properties["coordTimes"] = line_times
    return Feature("MultiLineString", lines, properties)


def _parse_route(rte: ET.Element, ns: str) -> Feature | None:
    """Parse a rte element into a LineString Feature."""
    coordinates, times = _parse_points(rte, "rtept", ns)
    if not coordinates:
        return None

    properties = _properties(rte, ns)
    if any(times):
        properties["coordTimes"] = times
    return Feature("LineString", coordinates, properties)


def _parse_waypoint(wpt: ET.Element, ns: str) -> Feature | None:
    """Parse a wpt element into a Point Feature."""
    coords = _parse_point(wpt, ns)
    if not coords:
        return None
    return Feature("Point", coords, _properties(wpt, ns))
