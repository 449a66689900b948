"""Convert a KML 2.2 document to a FeatureCollection.

Handles Placemark with Point, LineString, LinearRing, Polygon, gx:Track,
MultiGeometry and gx:MultiTrack.  Extracts name, description, ExtendedData
and inline styles (LineStyle color/width, PolyStyle color).
KML coordinate format: "lng,lat,alt lng,lat,alt" (longitude first, latitude second).
All coordinates stored as [lng, lat] or [lng, lat, alt] (GeoJSON convention).
"""

from __future__ import annotations

import string
import xml.etree.ElementTree as ET

from fogimport.feature import Feature, FeatureCollection

# Google extension namespace (gx:Track, gx:coord, gx:MultiTrack)
_GX_NS = "{http://www.google.com/kml/ext/2.2}"

_SIMPLE_GEOMETRIES = ("Point", "LineString", "LinearRing", "Polygon")

# (geometry type, coordinates, coordTimes)
_Geometry = tuple[str, list, list]


def kml_to_features(root: ET.Element) -> FeatureCollection:
    """Convert a parsed KML root element.

    Every Placemark in the tree is visited in document order.  Placemarks
    without a usable geometry are dropped, so a document without any
    yields an empty collection.
    """
    ns = _detect_namespace(root)
    features: list[Feature] = []
    for pm in root.iter(f"{ns}Placemark"):
        feature = _parse_placemark(pm, ns)
        if feature is not None:
            features.append(feature)
    return FeatureCollection(features=features)


def _detect_namespace(root: ET.Element) -> str:
    """Detect KML namespace from root element tag."""
    tag = root.tag
    if "{" in tag:
        return tag.split("}")[0] + "}"
    return ""


def _get_text(parent: ET.Element, tag: str) -> str:
    """Get text content of a direct child element (tag fully qualified)."""
    elem = parent.find(tag)
    if elem is not None and elem.text:
        return elem.text.strip()
    return ""


def _parse_placemark(pm: ET.Element, ns: str) -> Feature | None:
    """Parse a single Placemark element into a Feature."""
    geometries: list[_Geometry] = []
    for child in pm:
        geometries.extend(_parse_geometry(child, ns))
    if not geometries:
        return None

    properties: dict = {}
    name = _get_text(pm, f"{ns}name")
    if name:
        properties["name"] = name
    description = _get_text(pm, f"{ns}description")
    if description:
        properties["description"] = description
    properties.update(_parse_extended_data(pm, ns))
    properties.update(_parse_style(pm, ns))

    if len(geometries) == 1:
        gtype, coords, times = geometries[0]
        if any(times):
            properties["coordTimes"] = times
        return Feature(gtype, coords, properties)

    times = [t for _, _, t in geometries]
    if any(any(t) for t in times):
        properties["coordTimes"] = times
    return Feature(
        "GeometryCollection",
        [(gtype, coords) for gtype, coords, _ in geometries],
        properties,
    )


def _parse_geometry(elem: ET.Element, ns: str) -> list[_Geometry]:
    """Parse one geometry element; multi-geometries are flattened."""
    tag = elem.tag
    if tag == f"{ns}MultiGeometry" or tag == f"{_GX_NS}MultiTrack":
        members: list[_Geometry] = []
        for child in elem:
            members.extend(_parse_geometry(child, ns))
        return members

    if tag == f"{_GX_NS}Track":
        return _parse_gx_track(elem)

    for gtype in _SIMPLE_GEOMETRIES:
        if tag == f"{ns}{gtype}":
            break
    else:
        return []

    if gtype == "Point":
        coords = _parse_coordinates(elem, ns)
        return [("Point", coords[0], [])] if coords else []

    if gtype in ("LineString", "LinearRing"):
        coords = _parse_coordinates(elem, ns)
        return [("LineString", coords, [])] if coords else []

    rings = _parse_polygon_rings(elem, ns)
    return [("Polygon", rings, [])] if rings else []


def _parse_coordinate_string(coord_str: str) -> list[list[float]]:
    """Parse KML coordinate string: 'lng,lat,alt lng,lat,alt ...'

    Returns list of [lng, lat] or [lng, lat, alt] arrays.
    """
    coords = []
    for token in coord_str.split():
        parts = token.split(",")
        if len(parts) < 2:
            continue
        try:
            coords.append([float(p) for p in parts[:3]])
        except ValueError:
            continue
    return coords


def _parse_coordinates(geom_elem: ET.Element, ns: str) -> list[list[float]]:
    coord_elem = geom_elem.find(f"{ns}coordinates")
    if coord_elem is None or not coord_elem.text:
        return []
    return _parse_coordinate_string(coord_elem.text)


def _parse_polygon_rings(polygon_elem: ET.Element, ns: str) -> list[list[list[float]]]:
    """Parse polygon rings (outer boundary + optional inner boundaries)."""
    rings = []
    for boundary in ("outerBoundaryIs", "innerBoundaryIs"):
        for elem in polygon_elem.findall(f"{ns}{boundary}/{ns}LinearRing"):
            coords = _parse_coordinates(elem, ns)
            if coords:
                rings.append(coords)
    return rings


def _parse_gx_track(track: ET.Element) -> list[_Geometry]:
    """Parse gx:Track: space separated gx:coord values plus sibling <when> times."""
    coords: list[list[float]] = []
    for coord_elem in track.findall(f"{_GX_NS}coord"):
        try:
            coords.append([float(p) for p in (coord_elem.text or "").split()[:3]])
        except ValueError:
            continue
    coords = [c for c in coords if len(c) >= 2]
    if not coords:
        return []

    times = [
        (elem.text or "").strip()
        for elem in track
        if elem.tag.endswith("}when") or elem.tag == "when"
    ]
    if len(times) != len(coords):
        times = []
    return [("LineString", coords, times)]


def _parse_extended_data(pm: ET.Element, ns: str) -> dict:
    """Collect ExtendedData/Data name -> value pairs."""
    data: dict = {}
    for elem in pm.findall(f"{ns}ExtendedData/{ns}Data"):
        key = elem.get("name")
        if key:
            data[key] = _get_text(elem, f"{ns}value")
    return data


def _kml_color(value: str) -> tuple[str, float] | None:
    """Convert a KML aabbggrr color to ('#rrggbb', opacity)."""
    value = value.strip().lstrip("#")
    if len(value) != 8:
        return None
    if not all(c in string.hexdigits for c in value):
        return None
    alpha = int(value[0:2], 16)
    return f"#{value[6:8]}{value[4:6]}{value[2:4]}", round(alpha / 255, 3)


def _parse_style(pm: ET.Element, ns: str) -> dict:
    """Parse the inline Style element of a Placemark into simplestyle keys."""
    style_elem = pm.find(f"{ns}Style")
    if style_elem is None:
        return {}

    style: dict = {}

    line_style = style_elem.find(f"{ns}LineStyle")
    if line_style is not None:
        color = _kml_color(_get_text(line_style, f"{ns}color"))
        if color:
            style["stroke"], style["stroke-opacity"] = color
        width = _get_text(line_style, f"{ns}width")
        if width:
            try:
                style["stroke-width"] = float(width)
            except ValueError:
                pass

    poly_style = style_elem.find(f"{ns}PolyStyle")
    if poly_style is not None:
        color = _kml_color(_get_text(poly_style, f"{ns}color"))
        if color:
            style["fill"], style["fill-opacity"] = color

    return style
