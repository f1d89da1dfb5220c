"""GeoJSON writer/reader tests."""

from __future__ import annotations

import json

import pytest
from shapely.geometry import GeometryCollection, LinearRing, MultiPoint, Point, Polygon

from gisdto.src.errors import GeoJSONEncodingError, MalformedGeoJSONError
from gisdto.src.feature import Envelope, Feature, FeatureCollection
from gisdto.src.geojson import (
    build_feature_schema,
    build_feature_table,
    format_envelope,
    geometry_attribute_name,
    parse_envelope,
    read_feature,
    read_feature_collection,
    union_property_keys,
    write_feature,
    write_feature_collection,
    write_image,
)
from gisdto.src.image import Image
from gisdto.src.position import Position


@pytest.mark.geojson
def test_collection_records_share_union_schema(mixed_collection: FeatureCollection) -> None:
    payload = json.loads(write_feature_collection(mixed_collection))
    tower, road = payload["features"]

    assert payload["type"] == "FeatureCollection"
    assert list(tower["properties"]) == list(road["properties"])
    assert list(tower["properties"]) == [
        "featureType",
        "name",
        "height",
        "lanes",
        "address",
        "position",
        "envelope",
    ]
    assert tower["properties"]["lanes"] is None
    assert road["properties"]["lanes"] == "2"


@pytest.mark.geojson
def test_coordinates_are_rounded_to_four_decimals(mixed_collection: FeatureCollection) -> None:
    payload = json.loads(write_feature_collection(mixed_collection))
    tower = payload["features"][0]

    assert tower["id"] == "tower"
    assert tower["geometry"] == {"type": "Point", "coordinates": [-86.1235, 34.6543]}
    assert tower["properties"]["envelope"] == "[-86.1235,-86.1235,34.6543,34.6543]"


@pytest.mark.geojson
def test_full_precision_when_decimals_is_none(mixed_collection: FeatureCollection) -> None:
    payload = json.loads(write_feature_collection(mixed_collection, decimals=None))

    assert payload["features"][0]["geometry"]["coordinates"] == [-86.123456, 34.654321]


@pytest.mark.geojson
def test_feature_record_flattens_address_and_position(building_feature: Feature) -> None:
    record = json.loads(write_feature(building_feature))
    properties = record["properties"]

    assert properties["featureType"] == "building"
    assert properties["floors"] == "3"
    assert properties["address"] == "10101 Binary Blvd., Boolean, IO 090909"
    assert properties["position"] == {"type": "Point", "coordinates": [-86.5, 34.5]}
    assert properties["envelope"] == "[-86.6000,-86.4000,34.4000,34.6000]"
    assert record["geometry"]["type"] == "Polygon"


@pytest.mark.geojson
def test_envelope_uses_pattern_without_leading_zero() -> None:
    geometry = Polygon([(-0.5, 0.25), (0.5, 0.25), (0.5, 12.5)])

    assert format_envelope(geometry) == "[-.5000,.5000,.2500,12.5000]"


@pytest.mark.geojson
def test_envelope_round_trip_reproduces_rounded_extents(building_feature: Feature) -> None:
    record = json.loads(write_feature(building_feature))
    decoded = parse_envelope(record["properties"]["envelope"])
    expected = building_feature.envelope

    assert decoded == Envelope(*(round(value, 4) for value in expected))


@pytest.mark.geojson
def test_missing_id_is_generated() -> None:
    record = json.loads(write_feature(Feature(geometry=Point(1, 1))))

    assert record["id"].startswith("fid-")


@pytest.mark.geojson
def test_feature_without_geometry_is_rejected() -> None:
    with pytest.raises(ValueError):
        write_feature(Feature(id="empty"))


@pytest.mark.geojson
def test_reserved_property_names_do_not_duplicate_columns() -> None:
    feature = Feature(id="f", name="Real", geometry=Point(0, 0))
    feature.properties.set("name", "shadow")
    schema = build_feature_schema(feature, feature.properties.keys())

    assert schema.attributes == ["featureType", "name", "address", "position", "envelope"]
    assert schema.geometry_name == "point"


@pytest.mark.geojson
@pytest.mark.parametrize(
    ("geometry", "expected"),
    [
        (LinearRing([(0, 0), (1, 0), (1, 1)]), "linestring"),
        (MultiPoint([(0, 0), (1, 1)]), "multipoint"),
        (GeometryCollection([Point(0, 0)]), "geometrycollection"),
        (Polygon([(0, 0), (1, 0), (1, 1)]), "polygon"),
    ],
)
def test_geometry_attribute_dispatch(geometry, expected: str) -> None:
    assert geometry_attribute_name(geometry) == expected


@pytest.mark.geojson
def test_union_keys_keep_first_appearance_order(mixed_collection: FeatureCollection) -> None:
    assert union_property_keys(mixed_collection.features) == ["height", "lanes"]


@pytest.mark.geojson
def test_image_is_written_as_polygon_feature() -> None:
    image = Image(id="img", name="Overlay", width=4, envelope=Envelope(-10, -10, 10, 10))
    record = json.loads(write_image(image))

    assert record["id"] == "img"
    assert record["properties"]["featureType"] == "image"
    assert record["properties"]["width"] == "4"
    assert record["geometry"]["coordinates"] == [[[-10, -10], [10, -10], [10, 10], [-10, 10], [-10, -10]]]


@pytest.mark.geojson
def test_read_feature_restores_fields(building_feature: Feature) -> None:
    building_feature.description = "Annex building"
    feature = read_feature(write_feature(building_feature))

    assert feature == building_feature
    assert feature.feature_type == "building"
    assert feature.name == "Annex"
    assert feature.description == "Annex building"
    assert feature.properties.get("floors") == "3"
    assert feature.position == Position.get_instance(34.5, -86.5)
    assert feature.geometry.equals(building_feature.geometry)
    assert feature.address is None


@pytest.mark.geojson
def test_read_feature_collection(mixed_collection: FeatureCollection) -> None:
    collection = read_feature_collection(write_feature_collection(mixed_collection))

    assert collection == mixed_collection
    assert collection.features[0].properties.get("height") == "120.5"
    assert "lanes" not in collection.features[0].properties


@pytest.mark.geojson
@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        '{"type": "Point", "coordinates": [0, 0]}',
        '{"type": "Feature", "properties": "flat", "geometry": null}',
        '{"type": "Feature", "properties": {}, "geometry": {"type": "Blob", "coordinates": []}}',
        '{"type": "Feature", "properties": {"position": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}}}',
        '{"type": "Feature", "properties": {"position": {"type": "Point", "coordinates": []}}, "geometry": null}',
        '{"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [NaN, 0]}}',
        '{"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [-Infinity, 0]}}',
        '{"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [1e999, 0]}}',
    ],
)
def test_malformed_documents_are_rejected(text: str) -> None:
    with pytest.raises(MalformedGeoJSONError):
        read_feature(text)


@pytest.mark.geojson
def test_malformed_collection_is_rejected() -> None:
    with pytest.raises(MalformedGeoJSONError):
        read_feature_collection('{"type": "FeatureCollection", "features": {}}')


@pytest.mark.geojson
def test_feature_table_uses_fixed_schema(mixed_collection: FeatureCollection) -> None:
    table = build_feature_table(mixed_collection)

    assert table.columns.tolist() == [
        "id",
        "featureType",
        "name",
        "height",
        "lanes",
        "address",
        "position",
        "envelope",
        "geometry",
    ]
    assert table["id"].tolist() == ["tower", "road"]
    assert table.crs.to_epsg() == 4326
    assert table.geometry.iloc[1].geom_type == "LineString"


@pytest.mark.geojson
def test_feature_table_for_empty_collection() -> None:
    table = build_feature_table(FeatureCollection())

    assert len(table) == 0
    assert table.columns.tolist() == [
        "id",
        "featureType",
        "name",
        "address",
        "position",
        "envelope",
        "geometry",
    ]


@pytest.mark.geojson
def test_non_finite_coordinates_fail_to_encode() -> None:
    feature = Feature(id="nan", geometry=Point(float("nan"), 0))

    with pytest.raises(GeoJSONEncodingError):
        write_feature(feature)
