"""Shared pytest fixtures."""

from __future__ import annotations

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage
from shapely.geometry import LineString, Point, Polygon

from gisdto.main import app
from gisdto.src.address import Address
from gisdto.src.feature import Feature, FeatureCollection
from gisdto.src.position import Position


SAMPLE_KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <name>Sample</name>
    <Style id="red"><LineStyle><color>ff0000ff</color></LineStyle></Style>
    <Placemark id="hq">
      <name>Headquarters</name>
      <description>Main office</description>
      <ExtendedData>
        <Data name="floors"><value>4</value></Data>
      </ExtendedData>
      <Point><coordinates>-86.58071234567,34.72987654321,190</coordinates></Point>
    </Placemark>
    <Folder id="routes">
      <name>Routes</name>
      <ExtendedData>
        <Data name="owner"><value>ops</value></Data>
      </ExtendedData>
      <Placemark id="r1">
        <name>Route 1</name>
        <LineString><coordinates>-86.6,34.7 -86.5,34.8</coordinates></LineString>
      </Placemark>
      <Placemark id="lot">
        <name>Parking</name>
        <Polygon>
          <outerBoundaryIs><LinearRing><coordinates>0,0 4,0 4,4 0,4 0,0</coordinates></LinearRing></outerBoundaryIs>
          <innerBoundaryIs><LinearRing><coordinates>1,1 2,1 2,2 1,2 1,1</coordinates></LinearRing></innerBoundaryIs>
        </Polygon>
      </Placemark>
    </Folder>
  </Document>
</kml>
"""


@pytest.fixture()
def sample_kml() -> str:
    return SAMPLE_KML


@pytest.fixture()
def sample_address() -> Address:
    return Address("10101 Binary Blvd.", "Boolean", "IO", "090909", "CONGO")


@pytest.fixture()
def building_feature(sample_address: Address) -> Feature:
    feature = Feature.get_instance_full(
        "building",
        "Annex",
        sample_address,
        Position.get_instance(34.5, -86.5),
        Polygon([(-86.6, 34.4), (-86.4, 34.4), (-86.4, 34.6), (-86.6, 34.6)]),
    )
    feature.id = "annex"
    feature.properties.set("floors", 3)
    return feature


@pytest.fixture()
def mixed_collection() -> FeatureCollection:
    tower = Feature(id="tower", feature_type="tower", name="Tower", geometry=Point(-86.123456, 34.654321))
    tower.properties.set("height", 120.5)
    road = Feature(id="road", feature_type="road", name="Road", geometry=LineString([(0, 0), (1, 1)]))
    road.properties.set("lanes", 2)
    road.properties.set("height", 0)
    return FeatureCollection.get_instance("mixed", "network", "Mixed", [tower, road])


@pytest.fixture()
def png_bytes() -> bytes:
    output = BytesIO()
    PILImage.new("RGB", (4, 3), color=(200, 10, 10)).save(output, format="PNG")
    return output.getvalue()


@pytest.fixture()
def test_client() -> TestClient:
    with TestClient(app) as client:
        yield client
