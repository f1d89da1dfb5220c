"""GeoJSON writer and reader for features, collections and images.

Every record in a written collection shares one fixed attribute schema:
`featureType, name, <union of property keys>, address, position, envelope`,
followed by the native geometry. Property keys missing on a feature are written
as null rather than omitted.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import math
from typing import Any, Iterable
from uuid import uuid4

import geopandas as gpd
from loguru import logger
from shapely.errors import ShapelyError
from shapely.geometry import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    mapping,
    shape,
)
from shapely.geometry.base import BaseGeometry

from gisdto.src.errors import GeoJSONEncodingError, MalformedGeoJSONError, UnsupportedKindError
from gisdto.src.feature import Envelope, Feature, FeatureCollection
from gisdto.src.image import Image
from gisdto.src.position import Position


DEFAULT_DECIMALS = 4
SCHEMA_NAME = "gisdto.Feature"
LEADING_ATTRIBUTES = ("featureType", "name")
TRAILING_ATTRIBUTES = ("address", "position", "envelope")
RESERVED_ATTRIBUTES = {*LEADING_ATTRIBUTES, *TRAILING_ATTRIBUTES}

# Multi-part types first: they are not subclasses of their single-part types,
# but LinearRing is a LineString.
GEOMETRY_ATTRIBUTES: tuple[tuple[type[BaseGeometry], str], ...] = (
    (MultiPoint, "multipoint"),
    (MultiLineString, "multilinestring"),
    (MultiPolygon, "multipolygon"),
    (GeometryCollection, "geometrycollection"),
    (Point, "point"),
    (LineString, "linestring"),
    (Polygon, "polygon"),
)


@dataclass(slots=True)
class FeatureSchema:
    name: str
    attributes: list[str]
    geometry_name: str


def geometry_attribute_name(geometry: BaseGeometry) -> str:
    for geometry_class, attribute_name in GEOMETRY_ATTRIBUTES:
        if isinstance(geometry, geometry_class):
            return attribute_name
    raise UnsupportedKindError(type(geometry).__name__, "GeoJSON geometry attribute")


def schema_property_keys(keys: Iterable[str]) -> list[str]:
    return [key for key in keys if key not in RESERVED_ATTRIBUTES]


def build_feature_schema(feature: Feature, keys: Iterable[str]) -> FeatureSchema:
    if feature.geometry is None:
        raise ValueError(f"Feature '{feature.id}' has no geometry to encode.")
    return FeatureSchema(
        name=SCHEMA_NAME,
        attributes=[*LEADING_ATTRIBUTES, *schema_property_keys(keys), *TRAILING_ATTRIBUTES],
        geometry_name=geometry_attribute_name(feature.geometry),
    )


def union_property_keys(features: Iterable[Feature]) -> list[str]:
    keys: dict[str, None] = {}
    for feature in features:
        for key in feature.properties:
            keys.setdefault(key, None)
    return list(keys)


def _format_decimal(value: float) -> str:
    text = f"{value:.4f}"
    if text.startswith("0."):
        return text[1:]
    if text.startswith("-0."):
        return "-" + text[2:]
    return text


def format_envelope(geometry: BaseGeometry) -> str:
    """Render the bounds as `[minX,maxX,minY,maxY]`, four decimals, `#.0000` style."""
    envelope = Envelope.from_geometry(geometry)
    values = (envelope.min_x, envelope.max_x, envelope.min_y, envelope.max_y)
    return "[" + ",".join(_format_decimal(value) for value in values) + "]"


def parse_envelope(text: str) -> Envelope:
    stripped = text.strip()
    if not (stripped.startswith("[") and stripped.endswith("]")):
        raise MalformedGeoJSONError(f"Envelope must be bracketed: {text!r}")
    parts = stripped[1:-1].split(",")
    if len(parts) != 4:
        raise MalformedGeoJSONError(f"Envelope must have four values: {text!r}")
    try:
        min_x, max_x, min_y, max_y = (float(part) for part in parts)
    except ValueError as exc:
        raise MalformedGeoJSONError(f"Envelope values must be numeric: {text!r}") from exc
    return Envelope(min_x, min_y, max_x, max_y)


def _round_json_value(value: Any, precision: int | None) -> Any:
    if isinstance(value, float):
        return value if precision is None else round(value, precision)
    if isinstance(value, (list, tuple)):
        return [_round_json_value(item, precision) for item in value]
    if isinstance(value, dict):
        return {key: _round_json_value(item, precision) for key, item in value.items()}
    return value


def geometry_payload(geometry: BaseGeometry | None, decimals: int | None = DEFAULT_DECIMALS) -> dict[str, Any] | None:
    if geometry is None:
        return None
    return _round_json_value(mapping(geometry), decimals)


def feature_attribute_values(feature: Feature, keys: Iterable[str]) -> dict[str, Any]:
    """Attribute values in schema order; position stays a shapely Point."""
    keys = list(keys)
    build_feature_schema(feature, keys)
    values: dict[str, Any] = {
        "featureType": feature.feature_type,
        "name": feature.name,
    }
    for key in schema_property_keys(keys):
        values[key] = feature.properties.get(key)
    values["address"] = str(feature.address) if feature.address is not None else None
    values["position"] = feature.position.as_point() if feature.position is not None else None
    values["envelope"] = format_envelope(feature.geometry)
    return values


def _record_id(feature: Feature) -> str:
    return feature.id if feature.id is not None else f"fid-{uuid4().hex}"


def build_feature_record(
    feature: Feature,
    keys: Iterable[str],
    decimals: int | None = DEFAULT_DECIMALS,
) -> dict[str, Any]:
    properties = feature_attribute_values(feature, keys)
    properties["position"] = geometry_payload(properties["position"], decimals)
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": geometry_payload(feature.geometry, decimals),
        "id": _record_id(feature),
    }


def build_feature_collection_payload(
    collection: FeatureCollection,
    decimals: int | None = DEFAULT_DECIMALS,
) -> dict[str, Any]:
    keys = union_property_keys(collection.features)
    logger.debug(
        "Encoding feature collection {} with {} features over {} property keys",
        collection.id,
        len(collection.features),
        len(keys),
    )
    return {
        "type": "FeatureCollection",
        "features": [build_feature_record(feature, keys, decimals) for feature in collection.features],
    }


def _dumps(payload: dict[str, Any]) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise GeoJSONEncodingError(f"Could not write GeoJSON: {exc}") from exc


def write_feature(feature: Feature, decimals: int | None = DEFAULT_DECIMALS) -> str:
    return _dumps(build_feature_record(feature, feature.properties.keys(), decimals))


def write_feature_collection(collection: FeatureCollection, decimals: int | None = DEFAULT_DECIMALS) -> str:
    return _dumps(build_feature_collection_payload(collection, decimals))


def write_image(image: Image, decimals: int | None = DEFAULT_DECIMALS) -> str:
    return write_feature(image.as_feature(), decimals)


def _reject_constant(name: str) -> float:
    raise MalformedGeoJSONError(f"Non-finite number {name} is not valid GeoJSON.")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise MalformedGeoJSONError(f"Number {text} is out of range.")
    return value


def _load_json(text: str | bytes) -> Any:
    try:
        return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedGeoJSONError(f"Invalid JSON: {exc}") from exc


def _shape_or_none(payload: Any, context: str) -> BaseGeometry | None:
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise MalformedGeoJSONError(f"{context} must be a GeoJSON geometry object.")
    try:
        return shape(payload)
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError) as exc:
        raise MalformedGeoJSONError(f"{context} is not a valid geometry: {exc}") from exc


def _text_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


def feature_from_payload(payload: Any) -> Feature:
    if not isinstance(payload, dict) or payload.get("type") != "Feature":
        raise MalformedGeoJSONError("Expected a GeoJSON Feature object.")
    raw_properties = payload.get("properties") or {}
    if not isinstance(raw_properties, dict):
        raise MalformedGeoJSONError("Feature properties must be an object.")

    feature = Feature(
        id=_text_or_none(payload.get("id")),
        feature_type=_text_or_none(raw_properties.get("featureType")),
        name=_text_or_none(raw_properties.get("name")),
        geometry=_shape_or_none(payload.get("geometry"), "Feature geometry"),
    )
    point = _shape_or_none(raw_properties.get("position"), "Feature position")
    if point is not None:
        if not isinstance(point, Point) or point.is_empty:
            raise MalformedGeoJSONError("Feature position must be a non-empty Point.")
        feature.position = Position.from_point(point)
        if point.has_z:
            feature.position.elevation = point.z

    for key, value in raw_properties.items():
        if key in RESERVED_ATTRIBUTES or value is None:
            continue
        feature.properties.set(key, value if not isinstance(value, (dict, list)) else json.dumps(value))
    return feature


def read_feature(text: str | bytes) -> Feature:
    """Read a Feature; the flattened `address` string is not parsed back."""
    return feature_from_payload(_load_json(text))


def read_feature_collection(text: str | bytes) -> FeatureCollection:
    payload = _load_json(text)
    if not isinstance(payload, dict) or payload.get("type") != "FeatureCollection":
        raise MalformedGeoJSONError("Expected a GeoJSON FeatureCollection object.")
    rows = payload.get("features")
    if not isinstance(rows, list):
        raise MalformedGeoJSONError("FeatureCollection features must be an array.")
    return FeatureCollection(
        id=_text_or_none(payload.get("id")),
        features=[feature_from_payload(row) for row in rows],
    )


def build_feature_table(collection: FeatureCollection) -> gpd.GeoDataFrame:
    """Tabular view of a collection using the same union schema as the writer."""
    keys = union_property_keys(collection.features)
    columns = ["id", *LEADING_ATTRIBUTES, *schema_property_keys(keys), *TRAILING_ATTRIBUTES, "geometry"]
    rows: list[dict[str, Any]] = []
    for feature in collection.features:
        row = {"id": _record_id(feature)}
        row.update(feature_attribute_values(feature, keys))
        row["geometry"] = feature.geometry
        rows.append(row)
    if not rows:
        return gpd.GeoDataFrame(columns=columns, geometry="geometry", crs="EPSG:4326")
    return gpd.GeoDataFrame(rows, columns=columns, geometry="geometry", crs="EPSG:4326")
