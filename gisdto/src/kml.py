"""Transform parsed KML documents into features and feature collections.

Folders become FeatureCollections of their Placemarks and Placemarks become
Features. Coordinates follow KML `lon,lat[,alt]` order, which is already the
geometry x/y/z order.
"""

from __future__ import annotations

from typing import Iterator
import xml.etree.ElementTree as ET

from loguru import logger
from shapely.errors import ShapelyError
from shapely.geometry import GeometryCollection, LinearRing, LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry

from gisdto.src.errors import MalformedKmlError, UnsupportedKindError
from gisdto.src.feature import Feature, FeatureCollection


COORDINATE_DECIMALS = 7
GEOMETRY_TAGS = {
    "Point",
    "LineString",
    "LinearRing",
    "Polygon",
    "MultiGeometry",
    "Model",
    "Track",
    "MultiTrack",
}

Coordinate = tuple[float, ...]


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_kml(text: str | bytes) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise MalformedKmlError(f"Invalid KML document: {exc}") from exc


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if local_name(child.tag) == name:
            yield child


def _child(element: ET.Element, name: str) -> ET.Element | None:
    return next(_children(element, name), None)


def _child_text(element: ET.Element, name: str) -> str | None:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


class KmlReader:
    """Walks an ElementTree KML document and emits feature graphs."""

    def __init__(self, decimals: int = COORDINATE_DECIMALS) -> None:
        self.decimals = decimals

    def transform_kml(self, root: ET.Element) -> list[Feature | FeatureCollection]:
        document = root if local_name(root.tag) == "Document" else _child(root, "Document")
        if document is None:
            return []

        entities: list[Feature | FeatureCollection] = []
        for child in document:
            kind = local_name(child.tag)
            if kind == "Folder":
                entities.append(self.transform_folder(child))
            elif kind == "Placemark":
                entities.append(self.transform_placemark(child))
            else:
                logger.debug("Skipping unsupported KML document member {}", kind)
        return entities

    def transform_folder(self, folder: ET.Element) -> FeatureCollection:
        collection = FeatureCollection(id=folder.get("id"), name=_child_text(folder, "name"))
        collection.description = _child_text(folder, "description")
        collection.properties.update(self.transform_extended_data(folder))
        for placemark in _children(folder, "Placemark"):
            collection.add_features(self.transform_placemark(placemark))
        logger.debug("Imported KML folder {} with {} placemarks", collection.id, len(collection.features))
        return collection

    def transform_placemark(self, placemark: ET.Element) -> Feature:
        geometry_element = next(
            (child for child in placemark if local_name(child.tag) in GEOMETRY_TAGS),
            None,
        )
        if geometry_element is None:
            raise MalformedKmlError(f"Placemark '{placemark.get('id')}' has no geometry.")

        feature = Feature(id=placemark.get("id"), name=_child_text(placemark, "name"))
        feature.description = _child_text(placemark, "description")
        feature.properties.update(self.transform_extended_data(placemark))
        feature.geometry = self.transform_geometry(geometry_element)
        return feature

    def transform_extended_data(self, element: ET.Element) -> dict[str, str]:
        properties: dict[str, str] = {}
        extended_data = _child(element, "ExtendedData")
        if extended_data is None:
            return properties
        for data in _children(extended_data, "Data"):
            name = data.get("name")
            if name:
                properties[name] = _child_text(data, "value") or ""
        return properties

    def transform_geometry(self, element: ET.Element) -> BaseGeometry:
        try:
            return self._build_geometry(element)
        except MalformedKmlError:
            raise
        except (ShapelyError, ValueError) as exc:
            raise MalformedKmlError(f"Invalid KML {local_name(element.tag)}: {exc}") from exc

    def _build_geometry(self, element: ET.Element) -> BaseGeometry:
        kind = local_name(element.tag)
        if kind == "Point":
            return Point(self.transform_coordinates(element)[0])
        if kind == "LineString":
            return LineString(self.transform_coordinates(element))
        if kind == "LinearRing":
            return self.transform_linear_ring(element)
        if kind == "Polygon":
            return self.transform_polygon(element)
        if kind == "MultiGeometry":
            return GeometryCollection(
                [self.transform_geometry(child) for child in element if local_name(child.tag) in GEOMETRY_TAGS]
            )
        raise UnsupportedKindError(kind, "KML geometry")

    def transform_linear_ring(self, element: ET.Element) -> LinearRing:
        return LinearRing(self.transform_coordinates(element))

    def transform_polygon(self, element: ET.Element) -> Polygon:
        outer = _child(element, "outerBoundaryIs")
        ring = _child(outer, "LinearRing") if outer is not None else None
        if ring is None:
            raise MalformedKmlError("Polygon has no outerBoundaryIs/LinearRing.")
        holes: list[LinearRing] = []
        for inner in _children(element, "innerBoundaryIs"):
            for inner_ring in _children(inner, "LinearRing"):
                holes.append(self.transform_linear_ring(inner_ring))
        return Polygon(self.transform_linear_ring(ring), holes)

    def transform_coordinates(self, element: ET.Element) -> list[Coordinate]:
        text = _child_text(element, "coordinates")
        if not text:
            raise MalformedKmlError(f"{local_name(element.tag)} has no coordinates.")
        coordinates: list[Coordinate] = []
        for token in text.split():
            parts = token.split(",")
            if len(parts) < 2:
                raise MalformedKmlError(f"Invalid KML coordinate: {token!r}")
            try:
                values = tuple(round(float(part), self.decimals) for part in parts[:3])
            except ValueError as exc:
                raise MalformedKmlError(f"Invalid KML coordinate: {token!r}") from exc
            coordinates.append(values)
        return coordinates


def import_kml(text: str | bytes) -> list[Feature | FeatureCollection]:
    return KmlReader().transform_kml(parse_kml(text))
