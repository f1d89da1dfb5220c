"""Geographic position with one-pass latitude/longitude normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import math
from typing import Mapping, NamedTuple, Sequence

from shapely.geometry import Point


DEFAULT_DATUM = "WGS84"
COORDINATE_DECIMALS = 6
PROXIMITY_DEGREES = 0.0001


class Coordinate(NamedTuple):
    x: float
    y: float
    z: float = math.nan


def _normalize_latitude(latitude: float) -> float:
    if abs(latitude) == 180:
        latitude = 0.0
    if latitude > 90:
        latitude = 90 - math.fmod(latitude, 90)
    elif latitude < -90:
        latitude = -90 - math.fmod(latitude, 90)
    return latitude


def _normalize_longitude(longitude: float) -> float:
    if abs(longitude) == 360:
        longitude = 0.0
    if longitude > 180:
        longitude = math.fmod(longitude, 360) - 360
    elif longitude < -180:
        longitude = math.fmod(longitude, 360) + 360
    return longitude


@dataclass(slots=True, eq=False)
class Position:
    """A coordinate plus optional motion, accuracy and antenna-height metadata.

    Equality is a proximity test: two positions are equal when both latitude and
    longitude differ by at most 0.0001 degrees (about 11 m). The relation is not
    transitive, so positions are not hashable.
    """

    latitude: float | None = None
    longitude: float | None = None
    name: str | None = None
    elevation: float | None = None
    heading: float | None = None
    speed: float | None = None
    datum: str | None = DEFAULT_DATUM
    accuracy_horizontal: float | None = None
    accuracy_vertical: float | None = None
    haat: float | None = None
    radial_haat: dict[float, float] = field(default_factory=dict)
    timestamp_millis: int | None = None

    def __post_init__(self) -> None:
        self.radial_haat = dict(sorted(self.radial_haat.items()))

    @classmethod
    def get_instance(
        cls,
        latitude: float,
        longitude: float,
        elevation: float | None = None,
        datum: str | None = None,
        accuracy_vertical: float | None = None,
        accuracy_horizontal: float | None = None,
    ) -> Position:
        position = cls(
            latitude=float(latitude),
            longitude=float(longitude),
            elevation=elevation,
            datum=datum if datum is not None else DEFAULT_DATUM,
            accuracy_vertical=accuracy_vertical,
            accuracy_horizontal=accuracy_horizontal,
        )
        position.normalize()
        return position

    @classmethod
    def from_point(cls, point: Point) -> Position:
        return cls.get_instance(point.y, point.x)

    @classmethod
    def from_coordinate(cls, coordinate: Sequence[float]) -> Position:
        elevation = coordinate[2] if len(coordinate) > 2 and not math.isnan(coordinate[2]) else None
        return cls.get_instance(coordinate[1], coordinate[0], elevation=elevation)

    def normalize(self) -> None:
        """Reflect latitude into [-90, 90] and wrap longitude into [-180, 180].

        A single pass only; inputs needing more than one reflection (latitude 270,
        for example) are left outside the canonical range.
        """
        if self.latitude is None or self.longitude is None:
            return
        self.latitude = _normalize_latitude(self.latitude)
        self.longitude = _normalize_longitude(self.longitude)

    def set_radial_haat(self, radial_haat: Mapping[float, float] | None) -> None:
        self.radial_haat = dict(sorted(radial_haat.items())) if radial_haat else {}

    @property
    def timestamp(self) -> datetime | None:
        if self.timestamp_millis is None:
            return None
        return datetime.fromtimestamp(self.timestamp_millis / 1000, tz=UTC)

    @timestamp.setter
    def timestamp(self, value: datetime | None) -> None:
        if value is not None:
            self.timestamp_millis = int(value.timestamp() * 1000)

    def as_coordinate(self) -> Coordinate:
        self.normalize()
        if self.elevation is not None:
            return Coordinate(self.longitude, self.latitude, self.elevation)
        return Coordinate(self.longitude, self.latitude)

    def as_point(self) -> Point:
        coordinate = self.as_coordinate()
        x = round(coordinate.x, COORDINATE_DECIMALS)
        y = round(coordinate.y, COORDINATE_DECIMALS)
        if self.elevation is not None:
            return Point(x, y, coordinate.z)
        return Point(x, y)

    def is_complete(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @staticmethod
    def normalize_to_heading(azimuth: float) -> float:
        """Map an azimuth onto [-180, 180] with 0 pointing north (one pass)."""
        heading = azimuth
        if abs(heading) == 360:
            heading = 0.0
        if heading > 180:
            heading = math.fmod(heading, 360) - 360
        elif heading < -180:
            heading = math.fmod(heading, 360) + 360
        return heading

    @staticmethod
    def normalize_to_azimuth(heading: float) -> float:
        """Map a heading onto [0, 360) (one pass)."""
        azimuth = heading
        if abs(azimuth) == 360:
            azimuth = 0.0
        if azimuth > 360:
            azimuth = math.fmod(azimuth, 360)
        elif azimuth < 0:
            azimuth = math.fmod(azimuth, 360) + 360
        return azimuth

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        if not self.is_complete() or not other.is_complete():
            return False
        return (
            abs(self.latitude - other.latitude) <= PROXIMITY_DEGREES
            and abs(self.longitude - other.longitude) <= PROXIMITY_DEGREES
        )

    __hash__ = None

    def __str__(self) -> str:
        return f"{self.latitude}, {self.longitude}"
