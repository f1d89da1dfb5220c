"""Position normalization and equality tests."""

from __future__ import annotations

from datetime import UTC, datetime
import math

import pytest
from shapely.geometry import Point

from gisdto.src.position import Position


@pytest.mark.model
def test_coordinate_without_elevation_has_nan_z() -> None:
    coordinate = Position.get_instance(10, 20).as_coordinate()

    assert coordinate.x == 20.0
    assert coordinate.y == 10.0
    assert math.isnan(coordinate.z)


@pytest.mark.model
def test_coordinate_with_elevation() -> None:
    position = Position.get_instance(10, 20, 30, "WGS84", 0.5, 0.5)
    coordinate = position.as_coordinate()

    assert (coordinate.x, coordinate.y, coordinate.z) == (20.0, 10.0, 30.0)
    assert position.accuracy_horizontal == 0.5
    assert position.accuracy_vertical == 0.5


@pytest.mark.model
def test_proximity_equality() -> None:
    base = Position.get_instance(34.0, -87.0)

    assert base == Position.get_instance(34.00009, -87.00009)
    assert base != Position.get_instance(34.0002, -87.0)
    assert Position() != Position()


@pytest.mark.model
@pytest.mark.parametrize(
    ("latitude", "longitude", "expected"),
    [
        (180, 0, (0.0, 0.0)),
        (100, 0, (80.0, 0.0)),
        (-100, 0, (-80.0, 0.0)),
        (0, 360, (0.0, 0.0)),
        (0, 190, (0.0, -170.0)),
        (0, -190, (0.0, 170.0)),
        (45, -45, (45.0, -45.0)),
    ],
)
def test_single_pass_normalization(latitude: float, longitude: float, expected: tuple[float, float]) -> None:
    position = Position.get_instance(latitude, longitude)

    assert (position.latitude, position.longitude) == pytest.approx(expected)


@pytest.mark.model
def test_multi_wrap_inputs_are_not_fully_corrected() -> None:
    position = Position.get_instance(0, 400)

    assert position.longitude == pytest.approx(-320.0)


@pytest.mark.model
def test_as_point_snaps_to_six_decimals() -> None:
    point = Position.get_instance(34.123456789, -86.987654321).as_point()

    assert point.x == pytest.approx(-86.987654)
    assert point.y == pytest.approx(34.123457)
    assert not point.has_z


@pytest.mark.model
def test_from_point_reads_lon_lat_order() -> None:
    position = Position.from_point(Point(-86.5, 34.5))

    assert (position.latitude, position.longitude) == (34.5, -86.5)


@pytest.mark.model
def test_heading_and_azimuth_conversions() -> None:
    assert Position.normalize_to_heading(270) == -90
    assert Position.normalize_to_heading(-270) == 90
    assert Position.normalize_to_azimuth(-90) == 270
    assert Position.normalize_to_azimuth(360) == 0


@pytest.mark.model
def test_radial_haat_is_sorted_and_timestamp_round_trips() -> None:
    position = Position.get_instance(1, 2)
    position.set_radial_haat({270.0: 5.0, 0.0: 1.0, 90.0: 3.0})
    position.timestamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)

    assert list(position.radial_haat) == [0.0, 90.0, 270.0]
    assert position.timestamp == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert str(position) == "1.0, 2.0"


@pytest.mark.model
def test_positions_are_unhashable() -> None:
    with pytest.raises(TypeError):
        hash(Position.get_instance(1, 2))
